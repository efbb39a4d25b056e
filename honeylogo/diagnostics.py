import sys, random
from pathlib import Path
from typing import Any, Optional

from boozetools.support.failureprone import SourceText, illustration

from .lexer import Token
from .syntax import Program, Command, CallProcedure

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'Blargh', 'Bother', 'Crumbs', 'Curses', 'Drat',
		'Fiddlesticks', 'Gadzooks', 'Good Grief', 'Great Scott',
		'Jeepers', 'Leaping Lizards', 'Nuts', 'Rats', 'Shell Shock', 'Snapping Turtles',
	]

	resignations = [
		'The turtle is confused.',
		'The turtle has pulled in its head.',
		'I cannot continue.',
		'I need to ask for help.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	""" Collects the issues found with a program, and explains them on the console. """
	_issues : list["Pic"]

	def __init__(self, *, verbose:int, max_issues=10, path:Optional[Path]=None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues
		self._path = path

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	def issue(self, it:Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def _source(self, program:Program) -> SourceText:
		filename = None if self._path is None else str(self._path)
		return SourceText(program.source, filename=filename)

	# Methods the front-end is likely to call:

	def no_such_file(self, path:Path):
		self.issue(Pic("I see no file called %s" % path, []))

	def parse_issues(self, program:Program):
		source = self._source(program)
		for pi in program.errors:
			problem = [Annotation(source, pi.token, "confused here")] if pi.token else []
			self.issue(Pic(pi.message, problem))

	# Methods the static check calls:

	def undefined_procedure(self, program:Program, call:CallProcedure):
		intro = "There's no procedure called %s anywhere in this program." % call.name
		self.issue(Pic(intro, [Annotation(self._source(program), call.token)]))

	def wrong_arity(self, program:Program, call:CallProcedure, need:int):
		plural = '' if need == 1 else 's'
		caption = "%s takes %d input%s, but got %d here." % (call.name, need, plural, len(call.args))
		intro = "A procedure call disagrees with the procedure's definition."
		self.issue(Pic(intro, [Annotation(self._source(program), call.token, caption)]))

	# Methods the executive calls:

	def run_time_error(self, program:Program, command:Command, ex:Exception):
		intro = "The program stopped with an error: %s" % ex
		problem = [Annotation(self._source(program), command.token, "while doing this")] if command.token else []
		self.issue(Pic(intro, problem))

class Annotation:
	def __init__(self, source:SourceText, token:Token, caption:str=""):
		self.source = source
		self.slice = slice(token.start, token.stop)
		self.caption = caption
	def illustrate(self):
		row, col = self.source.find_row_col(self.slice.start)
		single_line = self.source.line_of_text(row)
		width = self.slice.stop - self.slice.start
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	def as_text(self):
		lines = [self._intro, ""]
		lines.extend(ann.illustrate() for ann in self._anns)
		lines.extend(self._footer)
		return '\n'.join(lines)

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
