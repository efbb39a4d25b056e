"""
Raster rendering of the turtle's doings onto a pygame Surface.

The sprite is drawn directly onto the picture, so before drawing it we save a
copy of the little square region underneath. Before anything else gets drawn,
that region is put back. This is the "lift" and "drop" you see below.

Each turtle command becomes one render task on the animation queue.
Motion is the only multi-frame kind: it advances a little each frame,
stroking as it goes when the pen is down.
"""
import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"
import math
import pygame
from dataclasses import replace
from typing import Optional

from .scheduler import AnimationQueue, Task, SimpleTask, WaitTask
from .turtle import TurtleState, PenMode, RGB

WIDTH, HEIGHT = 800, 600
SPRITE_SIZE = 15
SPRITE_COLOR = (0, 170, 0)

def invert(color:pygame.Color) -> pygame.Color:
	return pygame.Color(255 - color.r, 255 - color.g, 255 - color.b, color.a)

def flood_fill(surface:pygame.Surface, seed:tuple[int, int], color:Optional[RGB], reverse=False) -> int:
	"""
	Four-connected fill of the region of exactly the seed pixel's color.
	With reverse, every pixel in the region gets inverted instead.
	Returns how many pixels changed; zero when the seed is off the surface
	or already has the fill color.
	"""
	if not surface.get_rect().collidepoint(seed):
		return 0
	target = surface.get_at(seed)
	if reverse:
		replacement = invert(target)
	else:
		replacement = pygame.Color(*color)
		if replacement == target:
			return 0
	width, height = surface.get_size()
	count = 0
	stack = [seed]
	surface.lock()
	try:
		while stack:
			x, y = stack.pop()
			if surface.get_at((x, y)) != target:
				continue
			surface.set_at((x, y), replacement)
			count += 1
			if x > 0: stack.append((x - 1, y))
			if x < width - 1: stack.append((x + 1, y))
			if y > 0: stack.append((x, y - 1))
			if y < height - 1: stack.append((x, y + 1))
	finally:
		surface.unlock()
	return count

class Canvas:
	def __init__(self, surface:pygame.Surface, queue:AnimationQueue=None):
		self.surface = surface
		self.queue = AnimationQueue() if queue is None else queue
		self._saved : Optional[tuple[pygame.Surface, pygame.Rect]] = None
		self._scratch = pygame.Surface(surface.get_size(), pygame.SRCALPHA)

	def raster(self, x:float, y:float) -> tuple[float, float]:
		width, height = self.surface.get_size()
		return width / 2 + x, height / 2 - y

	def pixel(self, state:TurtleState) -> tuple[int, int]:
		x, y = self.raster(state.x, state.y)
		return int(round(x)), int(round(y))

	# The sprite

	def lift(self):
		""" Put back whatever the sprite was covering. """
		if self._saved is not None:
			patch, where = self._saved
			self.surface.blit(patch, where)
			self._saved = None

	def drop(self, state:TurtleState):
		""" Save what's under the sprite's square, then draw the sprite if it's visible. """
		cx, cy = self.pixel(state)
		size = SPRITE_SIZE
		where = pygame.Rect(cx - size - 2, cy - size - 2, 2 * size + 4, 2 * size + 4).clip(self.surface.get_rect())
		if where.width and where.height:
			self._saved = self.surface.subsurface(where).copy(), where
		if state.visible:
			pygame.draw.polygon(self.surface, SPRITE_COLOR, self.sprite_outline(state))

	def sprite_outline(self, state:TurtleState):
		x, y = self.raster(state.x, state.y)
		theta = math.radians(state.heading)
		ahead = math.sin(theta), -math.cos(theta)
		aside = math.cos(theta), math.sin(theta)
		size = SPRITE_SIZE
		nose = x + size * ahead[0], y + size * ahead[1]
		tail = x - size / 2 * ahead[0], y - size / 2 * ahead[1]
		return [
			nose,
			(tail[0] + size / 2 * aside[0], tail[1] + size / 2 * aside[1]),
			(tail[0] - size / 2 * aside[0], tail[1] - size / 2 * aside[1]),
		]

	# Drawing primitives

	def stroke(self, start:tuple[float, float], stop:tuple[float, float], state:TurtleState, inverted:set=None):
		"""
		A reversing pen inverts each pixel at most once per motion, so pass the same
		set for every segment of one motion. Otherwise the joints flip back.
		"""
		width = max(1, min(int(round(state.pen_size)), sum(self.surface.get_size())))
		if state.pen_mode is PenMode.REVERSE:
			self._invert_line(start, stop, width, set() if inverted is None else inverted)
		else:
			color = state.pen_color if state.pen_mode is PenMode.PAINT else state.background
			pygame.draw.line(self.surface, color, start, stop, width)

	def _invert_line(self, start, stop, width, inverted:set):
		touched = pygame.draw.line(self._scratch, (255, 255, 255, 255), start, stop, width)
		touched = touched.clip(self.surface.get_rect())
		for x in range(touched.left, touched.right):
			for y in range(touched.top, touched.bottom):
				if self._scratch.get_at((x, y)).a and (x, y) not in inverted:
					inverted.add((x, y))
					self.surface.set_at((x, y), invert(self.surface.get_at((x, y))))
		self._scratch.fill((0, 0, 0, 0), touched)

	def repaint(self, state:TurtleState):
		self.surface.fill(state.background)
		self._saved = None
		self.drop(state)

	def fill_at(self, state:TurtleState):
		self.lift()
		if state.pen_mode is PenMode.REVERSE:
			flood_fill(self.surface, self.pixel(state), None, reverse=True)
		else:
			color = state.pen_color if state.pen_mode is PenMode.PAINT else state.background
			flood_fill(self.surface, self.pixel(state), color)
		self.drop(state)

	def redraw_sprite(self, state:TurtleState):
		self.lift()
		self.drop(state)

	# What the turtle asks for. Each becomes a task on the queue.

	def reset(self, state:TurtleState):
		""" Immediately: blank the picture and show the turtle. """
		self.queue.cancel()
		self.repaint(state)

	def motion(self, before:TurtleState, after:TurtleState, steps:int):
		self.queue.submit(Motion(self, before, after, steps))

	def redraw(self, state:TurtleState):
		self.queue.submit(SimpleTask(self.redraw_sprite, state))

	def paint_background(self, state:TurtleState):
		""" Also serves for CLEARSCREEN, which is a new background plus a fresh turtle. """
		self.queue.submit(SimpleTask(self.repaint, state))

	def fill(self, state:TurtleState):
		self.queue.submit(SimpleTask(self.fill_at, state))

	def wait(self, milliseconds:float):
		self.queue.submit(WaitTask(milliseconds / 1000))

	def cancel(self):
		self.queue.cancel()

class Motion(Task):
	""" Glide from one state to the next over some number of frames, stroking as we go. """
	def __init__(self, canvas:Canvas, before:TurtleState, after:TurtleState, steps:int):
		self.canvas = canvas
		self.before = before
		self.after = after
		self.steps = max(1, steps)
		self.step = 0
		self.inverted = set()

	def proceed(self, queue):
		self.queue = queue
		self.frame()

	def frame(self):
		canvas, before, after = self.canvas, self.before, self.after
		previous = self.position(self.step)
		self.step += 1
		here = self.position(self.step)
		canvas.lift()
		if after.pen_down:
			canvas.stroke(canvas.raster(*previous), canvas.raster(*here), after, self.inverted)
		canvas.drop(replace(after, x=here[0], y=here[1]))
		if self.step < self.steps:
			self.queue.next_frame(self.frame)
		else:
			self.queue.finish()

	def position(self, step:int) -> tuple[float, float]:
		if step >= self.steps:
			return self.after.x, self.after.y
		progress = step / self.steps
		x = self.before.x + (self.after.x - self.before.x) * progress
		y = self.before.y + (self.after.y - self.before.y) * progress
		return x, y
