"""
The run-time heart: execution contexts, value resolution, and the non-local exits.

Commands never raise to say STOP, OUTPUT, or BYE. Instead, `execute` may return a
Signal in place of a value, and every caller that runs a sequence of commands passes
any Signal straight back up until it reaches the boundary that consumes it:
A procedure call swallows Stop and Output. The program driver swallows Bye.

Resolution is the one place where a signal can turn up inside an expression,
for instance when a procedure called for its value says BYE. There, the signal
unwinds (as an Unwind exception) only as far as the nearest command boundary,
where it becomes an ordinary returned Signal again. See syntax.Command.execute.

Actual mistakes, like an undefined variable or dividing by zero, are exceptions.
"""
import math
import operator
from typing import Callable, Optional, Union, TYPE_CHECKING

from .values import (
	Value, Number, String, Boolean, List, Block,
	VariableRef, Operation, CommandRef, Procedure, CONCRETE,
	describe, type_name,
)

if TYPE_CHECKING:
	from .syntax import Command
	from .turtle import Turtle

###############################################################################

class LogoError(Exception):
	""" Something went wrong while running a program. Fatal to the current command. """

class UndefinedVariable(LogoError):
	def __init__(self, name:str):
		super().__init__("%s has no value" % name)
		self.name = name

class UndefinedProcedure(LogoError):
	def __init__(self, name:str):
		super().__init__("I don't know how to %s" % name)
		self.name = name

class TypeMismatch(LogoError):
	pass

class DivisionByZero(LogoError):
	def __init__(self):
		super().__init__("Can't divide by zero")

class EmptyInput(LogoError):
	pass

class NoValue(LogoError):
	def __init__(self, what:str):
		super().__init__("%s did not return a value when one was expected" % what)

class NoOutput(LogoError):
	def __init__(self, name:str):
		super().__init__("Procedure '%s' does not output a value" % name)

class StrayOutput(LogoError):
	def __init__(self):
		super().__init__("OUTPUT can only be used inside a procedure")

class TooDeep(LogoError):
	def __init__(self):
		super().__init__("Too many procedure calls inside each other")

class TooBig(LogoError):
	pass

###############################################################################

class Signal:
	""" A non-local exit, carried back up the call chain as a result. """
	__slots__ = ()

class Stop(Signal):
	def __repr__(self): return "<Stop>"

class Output(Signal):
	__slots__ = ("value",)
	def __init__(self, value:Value): self.value = value
	def __repr__(self): return "<Output %s>" % describe(self.value)

class Bye(Signal):
	def __repr__(self): return "<Bye>"

OUTCOME = Union[Value, Signal, None]

class Unwind(Exception):
	""" Carries a Signal out of expression resolution to the enclosing command. """
	def __init__(self, signal:Signal):
		super().__init__(signal)
		self.signal = signal

###############################################################################

class Context:
	"""
	Where commands run. Variables are private to one context.
	The procedure table is shared (by reference) with every child context,
	so a definition made anywhere is visible everywhere in the same run.
	"""
	def __init__(self, turtle:"Turtle", output:Callable[[str], None], procedures:dict=None):
		self.turtle = turtle
		self.output = output
		self.procedures = {} if procedures is None else procedures
		self.variables : dict[str, Value] = {}
		self.last_result : Optional[Value] = None
		self.repcount = -1

	def child(self, bindings:dict[str, Value]) -> "Context":
		"""
		A procedure-call context: Parameters are local, and nothing else
		from the caller is visible. Only the procedure table carries over.
		"""
		inner = Context(self.turtle, self.output, self.procedures)
		for name, value in bindings.items():
			inner.assign(name, value)
		return inner

	def assign(self, name:str, value:Value):
		self.variables[name.casefold()] = value

	def lookup(self, name:str) -> Value:
		try: return self.variables[name.casefold()]
		except KeyError: raise UndefinedVariable(name) from None

	def define(self, procedure:Procedure):
		self.procedures[procedure.name.casefold()] = procedure

	def procedure(self, name:str) -> Procedure:
		try: return self.procedures[name.casefold()]
		except KeyError: raise UndefinedProcedure(name) from None

	def warn(self, text:str):
		self.output("Warning: " + text + "\n")

###############################################################################

def run_commands(ctx:Context, commands) -> OUTCOME:
	"""
	Run a sequence of commands. Stops early and hands back the signal
	if any command produces one; otherwise the last command's result.
	"""
	result = None
	for command in commands:
		result = command.execute(ctx)
		if isinstance(result, Signal):
			return result
		ctx.last_result = result
	return result

###############################################################################

def resolve(ctx:Context, value:Value) -> Value:
	try: fn = RESOLVE[type(value)]
	except KeyError: raise NotImplementedError(type(value), value)
	return fn(value, ctx)

def _resolve_concrete(value:Value, ctx:Context):
	return value

def _resolve_variable_ref(value:VariableRef, ctx:Context):
	return ctx.lookup(value.name)

def _resolve_operation(value:Operation, ctx:Context):
	a = as_number(resolve(ctx, value.left), value.op)
	b = as_number(resolve(ctx, value.right), value.op)
	if value.op == "/" and b == 0:
		raise DivisionByZero()
	result = ARITHMETIC[value.op](a, b)
	return Number(finite(float(result), value.op))

def _resolve_command_ref(value:CommandRef, ctx:Context):
	result = value.command.execute(ctx)
	if isinstance(result, Signal):
		raise Unwind(result)
	if result is None:
		raise NoValue(value.command.describe())
	return result

RESOLVE = {}
for _t in CONCRETE:
	RESOLVE[_t] = _resolve_concrete
RESOLVE[VariableRef] = _resolve_variable_ref
RESOLVE[Operation] = _resolve_operation
RESOLVE[CommandRef] = _resolve_command_ref

ARITHMETIC = {
	"+"  : operator.add,
	"-"  : operator.sub,
	"*"  : operator.mul,
	"/"  : operator.truediv,
	"<"  : operator.lt,
	">"  : operator.gt,
	"<=" : operator.le,
	">=" : operator.ge,
	"==" : operator.eq,
	"!=" : operator.ne,
}

###############################################################################
#  Coercions: Commands call these on resolved arguments.

def finite(x:float, who:str) -> float:
	""" Floats overflow to infinity quietly. Logo says so instead. """
	if math.isfinite(x):
		return x
	raise TooBig("%s made a number too big to handle" % who)

def as_number(value:Value, who:str) -> float:
	if isinstance(value, Number):
		return finite(value.value, who)
	if isinstance(value, String):
		# A quoted word that happens to spell a number is still a number, as in "5
		try: x = float(value.text)
		except ValueError: pass
		else:
			if math.isfinite(x): return x
	raise TypeMismatch("%s doesn't like %s as input" % (who, describe(value)))

def as_integer(value:Value, who:str) -> int:
	return int(as_number(value, who))

def as_word(value:Value, who:str) -> str:
	if isinstance(value, String): return value.text
	if isinstance(value, Number): return describe(value)
	if isinstance(value, Boolean): return "true" if value.value else "false"
	raise TypeMismatch("%s doesn't like %s as input" % (who, describe(value)))

def as_list(value:Value, who:str) -> tuple[Value, ...]:
	if isinstance(value, List): return value.items
	raise TypeMismatch("%s doesn't like %s as input" % (who, describe(value)))

def as_block(value:Value, who:str) -> Block:
	if isinstance(value, Block): return value
	raise TypeMismatch("%s needs a block of commands, not a %s" % (who, type_name(value)))

def is_true(value:Value, who:str) -> bool:
	if isinstance(value, Boolean): return value.value
	if isinstance(value, Number): return value.value != 0
	if isinstance(value, String):
		word = value.text.upper()
		if word == "TRUE": return True
		if word == "FALSE": return False
	raise TypeMismatch("%s doesn't like %s as a condition" % (who, describe(value)))
