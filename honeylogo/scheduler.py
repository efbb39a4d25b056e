"""
This is the simple task-queue version of a scheduler, single-threaded and cooperative.

Animation work arrives as Task objects and runs strictly one at a time, in the order
submitted. A task may finish at once, or it may spread itself over several frames
(by asking for a frame callback) or wait for a timer. Either way, the task says
when it's done by calling `finish`, which lets the next one begin.

Time only moves when somebody calls `tick`. An interactive driver does that from
its event loop; a headless one can call `drain` to fast-forward through everything.
"""
import heapq
import itertools
from collections import deque
from typing import Callable

FRAME = 1 / 60

class Task:
	def proceed(self, queue:"AnimationQueue"):
		raise NotImplementedError(type(self))

class SimpleTask(Task):
	""" A single-frame job: do it, then let the next task go. """
	def __init__(self, job, *args, **kwargs):
		assert callable(job)
		self._job = job
		self._args = args
		self._kwargs = kwargs
	def proceed(self, queue):
		self._job(*self._args, **self._kwargs)
		queue.finish()

class WaitTask(Task):
	def __init__(self, seconds:float):
		self._seconds = seconds
	def proceed(self, queue):
		queue.call_later(self._seconds, queue.finish)

class AnimationQueue:
	"""
	Responsible for the FIFO of pending tasks, the one task in flight,
	the callbacks waiting on the next frame, and any timers.
	"""
	def __init__(self):
		self.now = 0.0
		self._tasks = deque()
		self._busy = False
		self._pumping = False
		self._frames = []
		self._timers = []
		self._sequence = itertools.count()

	@property
	def idle(self) -> bool:
		return not (self._busy or self._tasks)

	def __len__(self): return len(self._tasks) + self._busy

	def submit(self, task:Task):
		assert isinstance(task, Task)
		self._tasks.append(task)
		self._pump()

	def finish(self):
		""" The task in flight calls this when it is done. """
		self._busy = False
		self._pump()

	def _pump(self):
		# A task that finishes within its own proceed() would otherwise recurse
		# once per queued task. Instead, the outermost pump keeps going.
		if self._pumping: return
		self._pumping = True
		try:
			while self._tasks and not self._busy:
				self._busy = True
				self._tasks.popleft().proceed(self)
		finally:
			self._pumping = False

	def next_frame(self, callback:Callable[[], None]):
		self._frames.append(callback)

	def call_later(self, seconds:float, callback:Callable[[], None]):
		heapq.heappush(self._timers, (self.now + seconds, next(self._sequence), callback))

	def tick(self, now:float):
		"""
		Run the frame callbacks that were registered before this tick,
		then any timers that have come due. Callbacks registered while
		this runs must wait for the next tick.
		"""
		self.now = max(self.now, now)
		frames, self._frames = self._frames, []
		for callback in frames:
			callback()
		while self._timers and self._timers[0][0] <= self.now:
			heapq.heappop(self._timers)[2]()

	def drain(self):
		""" Fast-forward: keep ticking (skipping ahead to timers when nothing else is pending) until idle. """
		while not self.idle:
			if self._frames:
				self.tick(self.now + FRAME)
			elif self._timers:
				self.tick(self._timers[0][0])
			else:
				raise RuntimeError("A task is in flight but nothing will ever finish it.")

	def cancel(self):
		""" Drop everything pending. Whatever was already drawn, stays drawn. """
		self._tasks.clear()
		self._frames.clear()
		self._timers.clear()
		self._busy = False
