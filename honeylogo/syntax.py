"""
The command tree the parser builds and the evaluator runs.

There are only three kinds of command node: a call to a built-in (whose behavior
comes from the command table), a procedure definition, and a procedure call.
Everything else about the language lives in the command table and the values.
"""
from typing import Optional, Sequence, TYPE_CHECKING

from .values import Value, Procedure, describe
from .evaluator import (
	Context, OUTCOME, Signal, Stop, Output, Unwind,
	NoOutput, StrayOutput, resolve, run_commands,
)

if TYPE_CHECKING:
	from .lexer import Token
	from .primitive import CommandSpec

class Command:
	""" Anything that can be run in a Context. """
	token: Optional["Token"] = None   # Where it came from, for diagnostics.

	def execute(self, ctx:Context) -> OUTCOME:
		try: return self.perform(ctx)
		except Unwind as uw: return uw.signal

	def perform(self, ctx:Context) -> OUTCOME:
		raise NotImplementedError(type(self))

	def describe(self) -> str:
		raise NotImplementedError(type(self))

	def __repr__(self): return "<%s>" % self.describe()

class Primitive(Command):
	""" A call to some built-in, with its raw (unresolved) arguments. """
	def __init__(self, spec:"CommandSpec", args:Sequence[Value], token=None):
		self.spec = spec
		self.args = tuple(args)
		self.token = token

	def perform(self, ctx:Context) -> OUTCOME:
		return self.spec.fn(ctx, *self.args)

	def describe(self) -> str:
		return " ".join([self.spec.name, *map(describe, self.args)])

class DefineProcedure(Command):
	"""
	TO name :params ... END. Running this merely installs the procedure.
	The body runs later, when something calls it.
	"""
	def __init__(self, name:str, params:Sequence[str], body:Sequence[Command], token=None):
		self.procedure = Procedure(name, tuple(params), tuple(body))
		self.token = token

	def perform(self, ctx:Context) -> OUTCOME:
		ctx.define(self.procedure)

	def describe(self) -> str:
		p = self.procedure
		lines = ["TO " + " ".join([p.name, *(":" + x for x in p.params)])]
		lines.extend("  " + c.describe() for c in p.body)
		lines.append("END")
		return "\n".join(lines)

class CallProcedure(Command):
	"""
	Arguments are evaluated in the caller's context. Then the body runs in a fresh
	child context that knows only the parameters. A Stop or Output signal from
	the body ends here; anything else (i.e. Bye) keeps going up.

	When the call sits in value position, the procedure must OUTPUT something.
	"""
	def __init__(self, name:str, args:Sequence[Value], as_expression=False, token=None):
		self.name = name
		self.args = tuple(args)
		self.as_expression = as_expression
		self.token = token

	def perform(self, ctx:Context) -> OUTCOME:
		procedure = ctx.procedure(self.name)
		actual = [resolve(ctx, a) for a in self.args]
		if len(actual) < len(procedure.params):
			missing = ", ".join(":" + p for p in procedure.params[len(actual):])
			ctx.warn("%s got no value for %s" % (procedure.name, missing))
		inner = ctx.child(dict(zip(procedure.params, actual)))
		result = run_commands(inner, procedure.body)
		if isinstance(result, Output):
			return result.value
		if self.as_expression and not isinstance(result, Signal):
			raise NoOutput(procedure.name)
		if isinstance(result, Stop):
			if self.as_expression:
				raise NoOutput(procedure.name)
			return inner.last_result
		return result

	def describe(self) -> str:
		return " ".join([self.name, *map(describe, self.args)])

class ParseIssue:
	""" One diagnostic from the parser: what went wrong, and near which token. """
	def __init__(self, message:str, token:Optional["Token"]):
		self.message = message
		self.token = token
	def __str__(self): return self.message
	def __repr__(self): return "<ParseIssue %r>" % self.message

class Program:
	""" The top-level commands of a source text, plus whatever the parser complained about. """
	def __init__(self, commands:Sequence[Command], source:str="", errors:Sequence[ParseIssue]=()):
		self.commands = list(commands)
		self.source = source
		self.errors = list(errors)

	@property
	def messages(self) -> list[str]:
		return [issue.message for issue in self.errors]

	def ok(self): return not self.errors

	def execute(self, ctx:Context) -> OUTCOME:
		""" Run all the way through, synchronously. The Session paces things instead. """
		result = run_commands(ctx, self.commands)
		if isinstance(result, Output):
			raise StrayOutput()
		return result

	def describe(self) -> str:
		return "\n".join(c.describe() for c in self.commands)

	def __iter__(self): return iter(self.commands)
	def __len__(self): return len(self.commands)
