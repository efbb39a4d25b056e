"""
The closed set of run-time data in HoneyLogo.

Concrete values play themselves. Three variants are not-yet-values:
a variable reference, an arithmetic or relational operation, and a command
in value position. These get resolved against a Context at the moment some
command needs the actual datum. See evaluator.resolve.

Everything here is immutable once constructed.
"""
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from .syntax import Command

class Value:
	""" Root of the value variants. """
	__slots__ = ()

@dataclass(frozen=True)
class Number(Value):
	value: float

@dataclass(frozen=True)
class String(Value):
	text: str

@dataclass(frozen=True)
class Boolean(Value):
	value: bool

@dataclass(frozen=True)
class List(Value):
	items: tuple[Value, ...] = ()

@dataclass(frozen=True)
class Block(Value):
	commands: tuple["Command", ...] = ()

@dataclass(frozen=True)
class VariableRef(Value):
	name: str

@dataclass(frozen=True)
class Operation(Value):
	op: str
	left: Value
	right: Value

@dataclass(frozen=True)
class CommandRef(Value):
	command: "Command"

@dataclass(frozen=True)
class Procedure(Value):
	name: str
	params: tuple[str, ...]
	body: tuple["Command", ...]

CONCRETE = (Number, String, Boolean, List, Block, Procedure)

TRUE = Boolean(True)
FALSE = Boolean(False)

def flag(it:bool) -> Boolean:
	return TRUE if it else FALSE

###############################################################################

def format_number(x:float) -> str:
	if math.isfinite(x) and x == int(x) and abs(x) < 1e15:
		return str(int(x))
	return repr(x)

def as_text(value:Value, bracket_lists=False) -> str:
	"""
	Logo's way of writing a datum. PRINT leaves off the outermost brackets
	of a list, while SHOW keeps them. Nested lists always get brackets.
	"""
	if isinstance(value, Number): return format_number(value.value)
	if isinstance(value, String): return value.text
	if isinstance(value, Boolean): return "true" if value.value else "false"
	if isinstance(value, List):
		inside = " ".join(as_text(item, True) for item in value.items)
		return "[%s]" % inside if bracket_lists else inside
	if isinstance(value, Block):
		return "[%s]" % " ".join(c.describe() for c in value.commands)
	if isinstance(value, Procedure):
		return "TO %s" % " ".join([value.name, *(":" + p for p in value.params)])
	return describe(value)

def describe(value:Value) -> str:
	""" Source-like rendering, including the unevaluated variants. """
	if isinstance(value, VariableRef): return ":" + value.name
	if isinstance(value, Operation):
		return "(%s %s %s)" % (describe(value.left), value.op, describe(value.right))
	if isinstance(value, CommandRef): return "(%s)" % value.command.describe()
	if isinstance(value, String): return '"' + value.text
	if isinstance(value, List): return as_text(value, True)
	return as_text(value)

def type_name(value:Value) -> str:
	if isinstance(value, String): return "word"
	return type(value).__name__.lower()
