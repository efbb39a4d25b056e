import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"
import unittest

import pygame

from honeylogo.canvas import Canvas, flood_fill, SPRITE_COLOR
from honeylogo.evaluator import Context
from honeylogo.parser import parse
from honeylogo.turtle import Turtle

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (255, 0, 0)

def rgb(surface, xy):
	return tuple(surface.get_at(xy))[:3]

class FloodFillTests(unittest.TestCase):

	def setUp(self):
		self.surface = pygame.Surface((60, 60))
		self.surface.fill(WHITE)
		pygame.draw.rect(self.surface, BLACK, pygame.Rect(10, 10, 30, 30), width=1)

	def test_fills_inside_only(self):
		count = flood_fill(self.surface, (25, 25), RED)
		self.assertEqual(28 * 28, count)
		self.assertEqual(RED, rgb(self.surface, (25, 25)))
		self.assertEqual(RED, rgb(self.surface, (11, 11)))
		self.assertEqual(BLACK, rgb(self.surface, (10, 10)))
		self.assertEqual(WHITE, rgb(self.surface, (5, 5)))

	def test_idempotent(self):
		flood_fill(self.surface, (25, 25), RED)
		before = pygame.image.tostring(self.surface, "RGBA")
		self.assertEqual(0, flood_fill(self.surface, (25, 25), RED))
		self.assertEqual(before, pygame.image.tostring(self.surface, "RGBA"))

	def test_same_color_is_a_no_op(self):
		self.assertEqual(0, flood_fill(self.surface, (25, 25), WHITE))

	def test_reverse_inverts(self):
		flood_fill(self.surface, (25, 25), None, reverse=True)
		self.assertEqual(BLACK, rgb(self.surface, (25, 25)))
		self.assertEqual(WHITE, rgb(self.surface, (5, 5)))

	def test_four_connected_does_not_leak_through_corners(self):
		surface = pygame.Surface((3, 3))
		surface.fill(WHITE)
		for xy in [(1, 0), (0, 1), (1, 2), (2, 1)]:
			surface.set_at(xy, BLACK)
		self.assertEqual(1, flood_fill(surface, (1, 1), RED))
		self.assertEqual(WHITE, rgb(surface, (0, 0)))

	def test_seed_off_the_surface(self):
		self.assertEqual(0, flood_fill(self.surface, (99, 99), RED))

class CanvasTests(unittest.TestCase):
	"""
	The turtle starts at the middle of a 200x200 surface, which is pixel (100, 100).
	"""

	def setUp(self):
		self.surface = pygame.Surface((200, 200))
		self.canvas = Canvas(self.surface)
		self.turtle = Turtle(self.canvas)

	def draw(self, text):
		program = parse(text)
		assert program.ok(), program.messages
		program.execute(Context(self.turtle, lambda text: None))
		self.canvas.queue.drain()

	def test_fresh_canvas(self):
		self.assertEqual(WHITE, rgb(self.surface, (0, 0)))
		self.assertEqual(SPRITE_COLOR, rgb(self.surface, (100, 100)))

	def test_raster_coordinates(self):
		self.assertEqual((100, 100), self.canvas.raster(0, 0))
		self.assertEqual((150, 70), self.canvas.raster(50, 30))

	def test_forward_draws_a_line(self):
		self.draw("FD 50")
		self.assertEqual(BLACK, rgb(self.surface, (100, 75)))
		self.assertEqual(WHITE, rgb(self.surface, (120, 75)))

	def test_pen_up_draws_nothing(self):
		self.draw("PU FD 50")
		self.assertEqual(WHITE, rgb(self.surface, (100, 75)))

	def test_pen_color(self):
		self.draw("SETPC 4 RT 90 FD 50")
		self.assertEqual(RED, rgb(self.surface, (125, 100)))

	def test_erase(self):
		self.draw("FD 50 PE BK 50")
		self.assertEqual(WHITE, rgb(self.surface, (100, 75)))

	def test_reverse_twice_restores(self):
		self.draw("PX FD 50")
		self.assertEqual(BLACK, rgb(self.surface, (100, 75)))
		self.draw("BK 50")
		self.assertEqual(WHITE, rgb(self.surface, (100, 75)))

	def test_hiding_the_turtle_uncovers_the_picture(self):
		self.draw("HT")
		self.assertEqual(WHITE, rgb(self.surface, (100, 100)))
		self.draw("ST")
		self.assertEqual(SPRITE_COLOR, rgb(self.surface, (100, 100)))

	def test_sprite_leaves_no_trail(self):
		self.draw("PU FD 50")
		self.assertEqual(WHITE, rgb(self.surface, (100, 100)))
		self.assertEqual(SPRITE_COLOR, rgb(self.surface, (100, 50)))

	def test_background(self):
		self.draw("FD 50 SETBG 1")
		self.assertEqual((0, 0, 255), rgb(self.surface, (0, 0)))
		self.assertEqual((0, 0, 255), rgb(self.surface, (100, 75)))

	def test_clearscreen(self):
		self.draw("SETBG 1 FD 50 CS")
		self.assertEqual(WHITE, rgb(self.surface, (0, 0)))
		self.assertEqual(SPRITE_COLOR, rgb(self.surface, (100, 100)))

	def test_clean_keeps_the_turtle_where_it_is(self):
		self.draw("FD 50 CLEAN")
		self.assertEqual(WHITE, rgb(self.surface, (100, 75)))
		self.assertEqual(50, self.turtle.state.y)

	def test_fill(self):
		self.draw("PU SETXY -50 -50 PD REPEAT 4 [FD 40 RT 90] PU SETXY -30 -30 SETPC 4 FILL HT")
		self.assertEqual(RED, rgb(self.surface, (65, 135)))
		self.assertEqual(BLACK, rgb(self.surface, (50, 130)))
		self.assertEqual(WHITE, rgb(self.surface, (20, 20)))

	def test_fill_twice_changes_nothing(self):
		self.draw("PU SETPC 2 FILL")
		before = pygame.image.tostring(self.surface, "RGBA")
		self.draw("FILL")
		self.assertEqual(before, pygame.image.tostring(self.surface, "RGBA"))
		self.assertEqual((0, 255, 0), rgb(self.surface, (0, 0)))

	def test_animation_takes_frames(self):
		self.turtle.forward(50)
		self.assertFalse(self.canvas.queue.idle)
		self.canvas.queue.drain()
		self.assertTrue(self.canvas.queue.idle)

	def test_cancel_leaves_what_was_drawn(self):
		self.turtle.forward(50)
		self.turtle.forward(50)
		self.turtle.cancel_animation()
		self.assertTrue(self.canvas.queue.idle)
		self.assertEqual(WHITE, rgb(self.surface, (100, 25)))
