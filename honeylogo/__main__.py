"""
Run it this way:

    py -m honeylogo program.logo
"""
from .cmdline import main

main()
