"""
The executive runs a program at a human-friendly pace.

Top-level commands run one at a time. The next one begins only after the
animation queue has gone idle and then a short delay has passed, so that
someone watching can follow along. The delay shrinks as the speed goes up.

Whoever owns the Session keeps time by calling `tick` with the current time
in seconds: The display adapter does this from its event loop. Alternatively,
`run_to_end` ignores the clock and gets everything done as fast as possible.
"""
import sys
from collections import deque
from contextlib import contextmanager
from typing import Callable, Optional

import pygame

from .lexer import tokenize
from .parser import parse
from .syntax import Program, Command
from .evaluator import Context, LogoError, Signal, Output, StrayOutput, TooDeep
from .turtle import Turtle, DEFAULT_SPEED
from .canvas import Canvas
from .scheduler import AnimationQueue

# Python frames, not Logo calls. A Logo procedure call costs anywhere from three
# frames (as a statement) to a dozen (as a reporter inside an expression).
RECURSION_LIMIT = 10000

@contextmanager
def _headroom(limit:int):
	saved = sys.getrecursionlimit()
	sys.setrecursionlimit(max(saved, limit))
	try: yield
	finally: sys.setrecursionlimit(saved)

class Session:
	def __init__(self, surface:Optional[pygame.Surface], output:Callable[[str], None], speed:int=DEFAULT_SPEED):
		self.output = output
		if surface is None:
			self.canvas = None
			self.queue = AnimationQueue()
		else:
			self.canvas = Canvas(surface)
			self.queue = self.canvas.queue
		self.turtle = Turtle(self.canvas)
		self.speed = DEFAULT_SPEED
		self.set_speed(speed)
		self.now = 0.0
		self.program : Optional[Program] = None
		self.error : Optional[LogoError] = None
		self.failed : Optional[Command] = None
		self._context : Optional[Context] = None
		self._pending = deque()
		self._ready_at : Optional[float] = None

	def set_speed(self, speed:int):
		self.speed = max(0, min(100, speed))
		self.turtle.set_animation_speed(self.speed)

	@property
	def delay(self) -> float:
		""" Seconds to pause between top-level commands """
		return (500 - self.speed * 5) / 1000

	@property
	def running(self) -> bool:
		return bool(self._pending) or not self.queue.idle

	def submit(self, text:str) -> Program:
		return parse(text, tokenize(text))

	def start(self, program:Program):
		""" Begin running a program. Anything already running gets cancelled first. """
		self.cancel()
		self.program = program
		self.error = self.failed = None
		if not program.ok():
			self.output("Parsing errors:\n" + "".join("- %s\n" % m for m in program.messages))
			return
		self._context = Context(self.turtle, self.output)
		self._pending.extend(program.commands)
		self._ready_at = self.now

	def cancel(self):
		self._pending.clear()
		self._ready_at = None
		self.turtle.cancel_animation()
		self.queue.cancel()

	def tick(self, now:float):
		self.now = now
		self.queue.tick(now)
		if not self._pending or not self.queue.idle:
			return
		if self._ready_at is None:
			self._ready_at = now + self.delay
		if now >= self._ready_at:
			self._step()

	def run_to_end(self) -> bool:
		""" No pacing, no waiting. Returns whether the program finished without error. """
		while self._pending:
			self.queue.drain()
			self._step()
		self.queue.drain()
		return self.error is None

	def _step(self):
		command = self._pending.popleft()
		self._ready_at = None
		try:
			with _headroom(RECURSION_LIMIT):
				result = command.execute(self._context)
		except LogoError as ex:
			self._fail(command, ex)
		except RecursionError:
			self._fail(command, TooDeep())
		else:
			if isinstance(result, Output):
				self._fail(command, StrayOutput())
			elif isinstance(result, Signal):
				# A top-level STOP or BYE just ends the program.
				self._pending.clear()

	def _fail(self, command:Command, ex:LogoError):
		self.error, self.failed = ex, command
		self._pending.clear()
		self.output("Error: %s\n" % ex)
