"""
Put the turtle's picture in a window, via PyGame.

The session draws onto an off-screen surface. This loop's job is to keep
time for the session, copy that surface to the display once per frame,
and notice when the user wants out. The window stays open after the
program finishes, so the picture can be admired, until it gets closed.
Escape cancels a program that is still running.
"""
import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"
import pygame

from ..executive import Session
from ..syntax import Program

FPS = 60

def play(session:Session, program:Program, title="HoneyLogo", fps=FPS):
	pygame.init()
	try:
		surface = session.canvas.surface
		display = pygame.display.set_mode(surface.get_size())
		pygame.display.set_caption(title)
		clock = pygame.time.Clock()
		session.start(program)
		while True:
			for event in pygame.event.get():
				if event.type == pygame.QUIT:
					session.cancel()
					return
				elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
					session.cancel()
			session.tick(pygame.time.get_ticks() / 1000)
			display.blit(surface, (0, 0))
			pygame.display.flip()
			clock.tick(fps)
	finally:
		pygame.quit()
