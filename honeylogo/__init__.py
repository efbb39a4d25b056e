"""
HoneyLogo: a small, friendly Logo with an animated turtle.
"""
