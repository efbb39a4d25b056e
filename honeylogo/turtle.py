"""
The turtle as a state machine.

A Turtle knows where it is, which way it faces, and what its pen is doing.
Every command replaces the (immutable) TurtleState at once, so that queries
like XCOR see the effect of a FORWARD even while its animation is still
playing out. When a canvas is attached, each change also queues a render task
carrying the before-and-after states. Without a canvas, the turtle is just
bookkeeping, which is handy for tests.

Coordinates are Logo-style: the origin is the middle of the screen, and y grows upward.
Heading is a compass bearing: zero is straight up and RIGHT turns clockwise.
"""
import math
import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"
import pygame
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .values import Value, Number, String, List, describe
from .evaluator import TypeMismatch, TooBig

if TYPE_CHECKING:
	from .canvas import Canvas

RGB = tuple[int, int, int]

class PenMode(Enum):
	PAINT = "paint"
	ERASE = "erase"
	REVERSE = "reverse"

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
DEFAULT_SPEED = 50
# Beyond this, in any direction, pixel arithmetic stops making sense.
FAR = 1e6

# The traditional sixteen, numbered the way UCBLogo numbers them.
PALETTE = [
	(0, 0, 0), (0, 0, 255), (0, 255, 0), (0, 255, 255),
	(255, 0, 0), (255, 0, 255), (255, 255, 0), (255, 255, 255),
	(155, 96, 59), (197, 136, 18), (100, 162, 64), (120, 187, 187),
	(255, 149, 119), (144, 113, 208), (255, 163, 0), (183, 183, 183),
]

@dataclass(frozen=True)
class TurtleState:
	x: float = 0.0
	y: float = 0.0
	heading: float = 0.0
	pen_down: bool = True
	pen_mode: PenMode = PenMode.PAINT
	pen_color: RGB = BLACK
	background: RGB = WHITE
	pen_size: float = 2
	visible: bool = True

	def position(self): return self.x, self.y

def as_color(value:Value, who:str) -> RGB:
	""" A palette number, a list of red-green-blue, or a color name pygame knows. """
	if isinstance(value, Number):
		index = value.value
		if index == int(index) and 0 <= index < len(PALETTE):
			return PALETTE[int(index)]
	elif isinstance(value, List):
		if len(value.items) == 3 and all(isinstance(c, Number) and 0 <= c.value <= 255 for c in value.items):
			r, g, b = (int(c.value) for c in value.items)
			return r, g, b
	elif isinstance(value, String):
		try: color = pygame.Color(value.text.lower())
		except ValueError: pass
		else: return color.r, color.g, color.b
	raise TypeMismatch("%s doesn't like %s as a color" % (who, describe(value)))

def color_value(rgb:RGB) -> List:
	return List(tuple(Number(float(c)) for c in rgb))

def _within_reach(x:float, y:float):
	if not (abs(x) <= FAR and abs(y) <= FAR):
		raise TooBig("The turtle can't go that far from home")

def _tidy(x:float) -> float:
	# Keep trigonometric fuzz from accumulating visibly over a long walk.
	return round(x, 9) + 0.0

class Turtle:
	def __init__(self, canvas:Optional["Canvas"]=None, speed:int=DEFAULT_SPEED):
		self.state = TurtleState()
		self.canvas = canvas
		self.speed = speed
		if canvas is not None:
			canvas.reset(self.state)

	def heading(self) -> float:
		return self.state.heading % 360

	def _become(self, **changes) -> tuple[TurtleState, TurtleState]:
		before = self.state
		self.state = replace(before, **changes)
		return before, self.state

	def _steps(self, distance:float) -> int:
		return math.ceil(max(5, min(abs(distance), self.speed * 5)))

	# Motion

	def forward(self, distance:float):
		theta = math.radians(self.state.heading)
		x = _tidy(self.state.x + distance * math.sin(theta))
		y = _tidy(self.state.y + distance * math.cos(theta))
		_within_reach(x, y)
		before, after = self._become(x=x, y=y)
		if self.canvas is not None:
			self.canvas.motion(before, after, self._steps(distance))

	def back(self, distance:float):
		self.forward(-distance)

	def set_position(self, x:Optional[float], y:Optional[float]):
		""" Either coordinate may be None, meaning "leave that one alone". """
		if x is None: x = self.state.x
		if y is None: y = self.state.y
		_within_reach(x, y)
		manhattan = abs(x - self.state.x) + abs(y - self.state.y)
		before, after = self._become(x=float(x), y=float(y))
		if self.canvas is not None:
			self.canvas.motion(before, after, self._steps(manhattan))

	def home(self):
		self.set_position(0, 0)
		self.set_heading(0)

	# Turning

	def left(self, degrees:float):
		self._turn(self.state.heading - degrees)

	def right(self, degrees:float):
		self._turn(self.state.heading + degrees)

	def set_heading(self, degrees:float):
		self._turn(degrees % 360)

	def _turn(self, heading):
		self._become(heading=heading)
		if self.canvas is not None:
			self.canvas.redraw(self.state)

	# The pen. These take effect for the next stroke; nothing to draw right now.

	def pen_up(self): self._become(pen_down=False)
	def pen_down(self): self._become(pen_down=True)
	def pen_paint(self): self._become(pen_mode=PenMode.PAINT)
	def pen_erase(self): self._become(pen_mode=PenMode.ERASE)
	def pen_reverse(self): self._become(pen_mode=PenMode.REVERSE)
	def set_color(self, rgb:RGB): self._become(pen_color=rgb)

	def set_pen_size(self, size:float):
		if size < 0:
			raise TypeMismatch("SETPENSIZE doesn't like %s as input" % describe(Number(size)))
		self._become(pen_size=size)

	# The whole screen

	def set_background_color(self, rgb:RGB):
		self._become(background=rgb)
		self.clean()

	def clear(self):
		self.state = TurtleState()
		self.clean()

	def clean(self):
		if self.canvas is not None:
			self.canvas.paint_background(self.state)

	def hide_turtle(self):
		self._become(visible=False)
		if self.canvas is not None:
			self.canvas.redraw(self.state)

	def show_turtle(self):
		self._become(visible=True)
		if self.canvas is not None:
			self.canvas.redraw(self.state)

	def fill(self):
		if self.canvas is not None:
			self.canvas.fill(self.state)

	def wait(self, milliseconds:float):
		if self.canvas is not None:
			self.canvas.wait(milliseconds)

	# Pacing

	def set_animation_speed(self, speed:int):
		self.speed = max(0, min(100, speed))

	def cancel_animation(self):
		if self.canvas is not None:
			self.canvas.cancel()
