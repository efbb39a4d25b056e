"""
Build the primitive namespace: the table of built-in commands.

Each entry knows its canonical name, its aliases, the shape of each argument slot
(which tells the parser how to read it), whether it reports a value (and may
therefore appear in value position), and the Python function that does the work.

Implementations receive the Context and their raw arguments, and resolve each
argument themselves right before using it.
"""
import math
import random
from enum import Enum
from typing import Callable, NamedTuple, Optional

from .values import (
	Value, Number, String, Boolean, List,
	FALSE, flag, as_text, describe,
)
from .evaluator import (
	Context, Signal, Stop, Output, Bye,
	TypeMismatch, EmptyInput, DivisionByZero, finite,
	resolve, run_commands, as_number, as_integer, as_word, as_list, as_block, is_true,
)
from .turtle import as_color, color_value

class Shape(Enum):
	NUMBER = "number"
	WORD = "word"
	LIST = "list"
	BLOCK = "block"
	ANY = "anything"

class Category(Enum):
	TURTLE = "Turtle Graphics"
	GRAPHICS = "Graphics"
	CONTROL = "Control Structures"
	VARIABLES = "Variables"
	ARITHMETIC = "Arithmetic"
	LOGIC = "Logic"
	LISTS = "List Processing"
	IO = "Input/Output Operations"

class CommandSpec(NamedTuple):
	name: str
	aliases: tuple[str, ...]
	shapes: tuple[Shape, ...]
	fn: Callable
	outputs: bool
	category: Category
	description: str

	@property
	def arity(self): return len(self.shapes)

TABLE : dict[str, CommandSpec] = {}
SPECS : list[CommandSpec] = []

def lookup(word:str) -> Optional[CommandSpec]:
	return TABLE.get(word.upper())

def primitive(name, *aliases, shapes=(), outputs=False, category=Category.CONTROL):
	def register(fn):
		spec = CommandSpec(name, aliases, tuple(shapes), fn, outputs, category, (fn.__doc__ or "").strip())
		for key in (name, *aliases):
			assert key not in TABLE, key
			TABLE[key] = spec
		SPECS.append(spec)
		return fn
	return register

NUMBER, WORD, LIST, BLOCK, ANY = Shape.NUMBER, Shape.WORD, Shape.LIST, Shape.BLOCK, Shape.ANY

def _number(ctx:Context, raw:Value, who:str) -> float:
	return as_number(resolve(ctx, raw), who)

###############################################################################
#  Turtle motion and pen

@primitive("FORWARD", "FD", shapes=[NUMBER], category=Category.TURTLE)
def _forward(ctx, distance):
	""" Move turtle forward """
	ctx.turtle.forward(_number(ctx, distance, "FORWARD"))

@primitive("BACK", "BK", shapes=[NUMBER], category=Category.TURTLE)
def _back(ctx, distance):
	""" Move turtle backward """
	ctx.turtle.back(_number(ctx, distance, "BACK"))

@primitive("LEFT", "LT", shapes=[NUMBER], category=Category.TURTLE)
def _left(ctx, angle):
	""" Turn turtle left """
	ctx.turtle.left(_number(ctx, angle, "LEFT"))

@primitive("RIGHT", "RT", shapes=[NUMBER], category=Category.TURTLE)
def _right(ctx, angle):
	""" Turn turtle right """
	ctx.turtle.right(_number(ctx, angle, "RIGHT"))

@primitive("PENUP", "PU", category=Category.TURTLE)
def _pen_up(ctx):
	""" Lift pen up """
	ctx.turtle.pen_up()

@primitive("PENDOWN", "PD", category=Category.TURTLE)
def _pen_down(ctx):
	""" Put pen down for drawing """
	ctx.turtle.pen_down()

@primitive("PENPAINT", "PPT", category=Category.TURTLE)
def _pen_paint(ctx):
	""" Pen draws in the pen color """
	ctx.turtle.pen_paint()

@primitive("PENERASE", "PE", category=Category.TURTLE)
def _pen_erase(ctx):
	""" Pen draws in the background color """
	ctx.turtle.pen_erase()

@primitive("PENREVERSE", "PX", "PENR", category=Category.TURTLE)
def _pen_reverse(ctx):
	""" Pen inverts whatever it passes over """
	ctx.turtle.pen_reverse()

@primitive("HIDETURTLE", "HT", category=Category.TURTLE)
def _hide_turtle(ctx):
	""" Hide the turtle cursor """
	ctx.turtle.hide_turtle()

@primitive("SHOWTURTLE", "ST", category=Category.TURTLE)
def _show_turtle(ctx):
	""" Show the turtle cursor """
	ctx.turtle.show_turtle()

@primitive("CLEARSCREEN", "CS", category=Category.TURTLE)
def _clear_screen(ctx):
	""" Clear the graphics screen and send the turtle home """
	ctx.turtle.clear()

@primitive("CLEAN", category=Category.TURTLE)
def _clean(ctx):
	""" Erase the drawing but leave the turtle where it is """
	ctx.turtle.clean()

@primitive("HOME", category=Category.TURTLE)
def _home(ctx):
	""" Move turtle to the center of the screen """
	ctx.turtle.home()

@primitive("SETHEADING", "SETH", shapes=[NUMBER], category=Category.TURTLE)
def _set_heading(ctx, angle):
	""" Set turtle heading """
	ctx.turtle.set_heading(_number(ctx, angle, "SETHEADING"))

@primitive("SETPOS", shapes=[LIST], category=Category.TURTLE)
def _set_pos(ctx, where):
	""" Set turtle position from a list [x y] """
	items = as_list(resolve(ctx, where), "SETPOS")
	if len(items) != 2:
		raise TypeMismatch("SETPOS needs a list of two numbers, not %s" % describe(List(items)))
	ctx.turtle.set_position(as_number(items[0], "SETPOS"), as_number(items[1], "SETPOS"))

@primitive("SETXY", "SXY", shapes=[NUMBER, NUMBER], category=Category.TURTLE)
def _set_xy(ctx, x, y):
	""" Set turtle X and Y coordinates """
	ctx.turtle.set_position(_number(ctx, x, "SETXY"), _number(ctx, y, "SETXY"))

@primitive("SETX", shapes=[NUMBER], category=Category.TURTLE)
def _set_x(ctx, x):
	""" Set the X coordinate of the turtle """
	ctx.turtle.set_position(_number(ctx, x, "SETX"), None)

@primitive("SETY", shapes=[NUMBER], category=Category.TURTLE)
def _set_y(ctx, y):
	""" Set the Y coordinate of the turtle """
	ctx.turtle.set_position(None, _number(ctx, y, "SETY"))

@primitive("SETPENCOLOR", "SETPC", "SPC", shapes=[ANY], category=Category.GRAPHICS)
def _set_pen_color(ctx, color):
	""" Set pen color: a number 0-15, a list [r g b], or a color name """
	ctx.turtle.set_color(as_color(resolve(ctx, color), "SETPENCOLOR"))

@primitive("SETBACKGROUND", "SETBG", shapes=[ANY], category=Category.GRAPHICS)
def _set_background(ctx, color):
	""" Set the background color, repainting the whole screen """
	ctx.turtle.set_background_color(as_color(resolve(ctx, color), "SETBACKGROUND"))

@primitive("SETPENSIZE", "SETPS", shapes=[NUMBER], category=Category.GRAPHICS)
def _set_pen_size(ctx, size):
	""" Set pen size """
	ctx.turtle.set_pen_size(_number(ctx, size, "SETPENSIZE"))

@primitive("FILL", "FL", category=Category.GRAPHICS)
def _fill(ctx):
	""" Fill the enclosed area around the turtle """
	ctx.turtle.fill()

@primitive("WAIT", shapes=[NUMBER], category=Category.CONTROL)
def _wait(ctx, ticks):
	""" Pause for some sixtieths of a second """
	ctx.turtle.wait(_number(ctx, ticks, "WAIT") * 1000 / 60)

###############################################################################
#  Turtle queries

@primitive("XCOR", outputs=True, category=Category.TURTLE)
def _xcor(ctx):
	""" The turtle's X coordinate """
	return Number(ctx.turtle.state.x)

@primitive("YCOR", outputs=True, category=Category.TURTLE)
def _ycor(ctx):
	""" The turtle's Y coordinate """
	return Number(ctx.turtle.state.y)

@primitive("POS", outputs=True, category=Category.TURTLE)
def _pos(ctx):
	""" The turtle's position as a list [x y] """
	return List(tuple(Number(c) for c in ctx.turtle.state.position()))

@primitive("HEADING", "HD", outputs=True, category=Category.TURTLE)
def _heading(ctx):
	""" The turtle's heading, from 0 up to (not including) 360 """
	return Number(ctx.turtle.heading())

@primitive("PENCOLOR", "PC", outputs=True, category=Category.GRAPHICS)
def _pen_color(ctx):
	""" The pen color as a list [r g b] """
	return color_value(ctx.turtle.state.pen_color)

@primitive("PENDOWNP", outputs=True, category=Category.TURTLE)
def _pen_down_p(ctx):
	""" Is the pen down? """
	return flag(ctx.turtle.state.pen_down)

@primitive("SHOWNP", outputs=True, category=Category.TURTLE)
def _shown_p(ctx):
	""" Is the turtle visible? """
	return flag(ctx.turtle.state.visible)

###############################################################################
#  Control

def _run_block(ctx, block, who):
	return run_commands(ctx, as_block(resolve(ctx, block), who).commands)

@primitive("REPEAT", "RP", shapes=[NUMBER, BLOCK])
def _repeat(ctx, count, block):
	""" Repeat commands """
	times = as_integer(resolve(ctx, count), "REPEAT")
	body = as_block(resolve(ctx, block), "REPEAT")
	outer = ctx.repcount
	try:
		for i in range(times):
			ctx.repcount = i + 1
			result = run_commands(ctx, body.commands)
			if isinstance(result, Signal):
				return result
	finally:
		ctx.repcount = outer

@primitive("REPCOUNT", outputs=True)
def _repcount(ctx):
	""" Which time around the innermost REPEAT this is """
	return Number(ctx.repcount)

@primitive("IF", shapes=[ANY, BLOCK])
def _if(ctx, condition, block):
	""" Run the block if the condition holds """
	if is_true(resolve(ctx, condition), "IF"):
		return _run_block(ctx, block, "IF")

@primitive("IFELSE", shapes=[ANY, BLOCK, BLOCK])
def _if_else(ctx, condition, block, else_block):
	""" Run one block or the other """
	if is_true(resolve(ctx, condition), "IFELSE"):
		return _run_block(ctx, block, "IFELSE")
	else:
		return _run_block(ctx, else_block, "IFELSE")

@primitive("UNTIL", "UT", shapes=[ANY, BLOCK])
def _until(ctx, condition, block):
	""" Run the block, then test the condition, until it holds """
	while True:
		result = _run_block(ctx, block, "UNTIL")
		if isinstance(result, Signal):
			return result
		if is_true(resolve(ctx, condition), "UNTIL"):
			return

@primitive("WHILE", shapes=[ANY, BLOCK])
def _while(ctx, condition, block):
	""" Test the condition, then run the block, for as long as it holds """
	while is_true(resolve(ctx, condition), "WHILE"):
		result = _run_block(ctx, block, "WHILE")
		if isinstance(result, Signal):
			return result

@primitive("STOP")
def _stop(ctx):
	""" Stop the current procedure """
	return Stop()

@primitive("OUTPUT", "OP", shapes=[ANY])
def _output(ctx, value):
	""" Return a value from a procedure """
	return Output(resolve(ctx, value))

@primitive("BYE")
def _bye(ctx):
	""" End the whole program """
	return Bye()

###############################################################################
#  Variables

@primitive("MAKE", "MK", shapes=[WORD, ANY], category=Category.VARIABLES)
def _make(ctx, name, value):
	""" Create or set a variable """
	ctx.assign(as_word(resolve(ctx, name), "MAKE"), resolve(ctx, value))

@primitive("THING", "TH", shapes=[WORD], outputs=True, category=Category.VARIABLES)
def _thing(ctx, name):
	""" The value of the named variable """
	return ctx.lookup(as_word(resolve(ctx, name), "THING"))

###############################################################################
#  Arithmetic

def _arithmetic(name, *aliases, arity=2):
	def wrap(fn):
		def implementation(ctx, *args):
			return Number(finite(float(fn(*(_number(ctx, a, name) for a in args))), name))
		implementation.__doc__ = fn.__doc__
		primitive(name, *aliases, shapes=[NUMBER]*arity, outputs=True, category=Category.ARITHMETIC)(implementation)
		return fn
	return wrap

@_arithmetic("SUM")
def _sum(a, b):
	""" Add two numbers """
	return a + b

@_arithmetic("DIFFERENCE")
def _difference(a, b):
	""" Subtract the second number from the first """
	return a - b

@_arithmetic("PRODUCT", "PROD")
def _product(a, b):
	""" Multiply two numbers """
	return a * b

@_arithmetic("QUOTIENT", "QUOT")
def _quotient(a, b):
	""" Divide the first number by the second """
	if b == 0: raise DivisionByZero()
	return a / b

@_arithmetic("REMAINDER", "REM")
def _remainder(a, b):
	""" Remainder after division, with the sign of the dividend """
	if b == 0: raise DivisionByZero()
	return math.fmod(a, b)

@_arithmetic("MINUS", arity=1)
def _minus(a):
	""" Negate a number """
	return -a

@_arithmetic("ABSOLUTE", "ABS", arity=1)
def _absolute(a):
	""" Absolute value """
	return abs(a)

@_arithmetic("INT", arity=1)
def _int(a):
	""" Drop the fractional part """
	return math.trunc(a)

@_arithmetic("ROUND", arity=1)
def _round(a):
	""" Round to the nearest whole number, halves away from zero """
	return math.copysign(math.floor(abs(a) + 0.5), a)

@_arithmetic("SQRT", arity=1)
def _sqrt(a):
	""" Square root """
	if a < 0: raise TypeMismatch("SQRT doesn't like %s as input" % as_text(Number(a)))
	return math.sqrt(a)

@_arithmetic("SIN", arity=1)
def _sin(a):
	""" Sine of an angle in degrees """
	return math.sin(math.radians(a))

@_arithmetic("COS", arity=1)
def _cos(a):
	""" Cosine of an angle in degrees """
	return math.cos(math.radians(a))

@_arithmetic("ARCTAN", arity=1)
def _arctan(a):
	""" Arc tangent, in degrees """
	return math.degrees(math.atan(a))

@_arithmetic("ARCCOS", "ACS", arity=1)
def _arccos(a):
	""" Arc cosine, in degrees """
	if not -1 <= a <= 1: raise TypeMismatch("ARCCOS doesn't like %s as input" % as_text(Number(a)))
	return math.degrees(math.acos(a))

@_arithmetic("RANDOM", "RND", arity=1)
def _random(a):
	""" A random whole number from zero up to (not including) the input """
	if a < 1: raise TypeMismatch("RANDOM doesn't like %s as input" % as_text(Number(a)))
	return random.randrange(int(a))

###############################################################################
#  Logic and predicates

def equal(a:Value, b:Value) -> bool:
	""" Logo's EQUALP: numbers by value, words ignoring case, lists item by item. """
	if isinstance(a, (Number, String)) and isinstance(b, (Number, String)):
		try: return as_number(a, "EQUALP") == as_number(b, "EQUALP")
		except TypeMismatch: pass
		return as_word(a, "EQUALP").casefold() == as_word(b, "EQUALP").casefold()
	if isinstance(a, List) and isinstance(b, List):
		return len(a.items) == len(b.items) and all(map(equal, a.items, b.items))
	return a == b

@primitive("EQUALP", shapes=[ANY, ANY], outputs=True, category=Category.LOGIC)
def _equal_p(ctx, a, b):
	""" Are the two inputs equal? """
	return flag(equal(resolve(ctx, a), resolve(ctx, b)))

@primitive("NOT", shapes=[ANY], outputs=True, category=Category.LOGIC)
def _not(ctx, a):
	""" Logical negation """
	return flag(not is_true(resolve(ctx, a), "NOT"))

@primitive("AND", shapes=[ANY, ANY], outputs=True, category=Category.LOGIC)
def _and(ctx, a, b):
	""" True if both inputs are true """
	return flag(is_true(resolve(ctx, a), "AND") and is_true(resolve(ctx, b), "AND"))

@primitive("OR", shapes=[ANY, ANY], outputs=True, category=Category.LOGIC)
def _or(ctx, a, b):
	""" True if either input is true """
	return flag(is_true(resolve(ctx, a), "OR") or is_true(resolve(ctx, b), "OR"))

@primitive("NUMBERP", shapes=[ANY], outputs=True, category=Category.LOGIC)
def _number_p(ctx, a):
	""" Is the input a number? """
	value = resolve(ctx, a)
	try: as_number(value, "NUMBERP")
	except TypeMismatch: return FALSE
	return flag(not isinstance(value, Boolean))

@primitive("WORDP", shapes=[ANY], outputs=True, category=Category.LOGIC)
def _word_p(ctx, a):
	""" Is the input a word? """
	return flag(isinstance(resolve(ctx, a), (String, Number)))

@primitive("LISTP", shapes=[ANY], outputs=True, category=Category.LOGIC)
def _list_p(ctx, a):
	""" Is the input a list? """
	return flag(isinstance(resolve(ctx, a), List))

@primitive("EMPTYP", shapes=[ANY], outputs=True, category=Category.LOGIC)
def _empty_p(ctx, a):
	""" Is the input the empty word or the empty list? """
	value = resolve(ctx, a)
	if isinstance(value, List): return flag(not value.items)
	if isinstance(value, String): return flag(not value.text)
	return FALSE

###############################################################################
#  Words and lists

def _sequence(ctx, raw, who):
	""" Either a tuple of list items, or a word to be taken apart character by character. """
	value = resolve(ctx, raw)
	if isinstance(value, List):
		items = value.items
	else:
		items = as_word(value, who)
	if not items:
		raise EmptyInput("%s doesn't like %s as input" % (who, describe(value)))
	return items

def _rebuild(items):
	if isinstance(items, str): return String(items)
	return List(tuple(items))

def _element(item):
	if isinstance(item, str): return String(item)
	return item

@primitive("FIRST", "FT", shapes=[ANY], outputs=True, category=Category.LISTS)
def _first(ctx, thing):
	""" First item of a list, or first character of a word """
	return _element(_sequence(ctx, thing, "FIRST")[0])

@primitive("BUTFIRST", "BF", shapes=[ANY], outputs=True, category=Category.LISTS)
def _butfirst(ctx, thing):
	""" All but the first item """
	return _rebuild(_sequence(ctx, thing, "BUTFIRST")[1:])

@primitive("LAST", "LA", shapes=[ANY], outputs=True, category=Category.LISTS)
def _last(ctx, thing):
	""" Last item of a list, or last character of a word """
	return _element(_sequence(ctx, thing, "LAST")[-1])

@primitive("BUTLAST", "BL", shapes=[ANY], outputs=True, category=Category.LISTS)
def _butlast(ctx, thing):
	""" All but the last item """
	return _rebuild(_sequence(ctx, thing, "BUTLAST")[:-1])

@primitive("ITEM", shapes=[NUMBER, ANY], outputs=True, category=Category.LISTS)
def _item(ctx, index, thing):
	""" The item at a (one-based) position """
	i = as_integer(resolve(ctx, index), "ITEM")
	items = _sequence(ctx, thing, "ITEM")
	if not 1 <= i <= len(items):
		raise EmptyInput("ITEM doesn't like %d as input; there are only %d items" % (i, len(items)))
	return _element(items[i-1])

@primitive("COUNT", shapes=[ANY], outputs=True, category=Category.LISTS)
def _count(ctx, thing):
	""" How many items (or characters) """
	value = resolve(ctx, thing)
	if isinstance(value, List): return Number(len(value.items))
	return Number(len(as_word(value, "COUNT")))

@primitive("FPUT", shapes=[ANY, LIST], outputs=True, category=Category.LISTS)
def _fput(ctx, item, lst):
	""" A new list with the item in front """
	return List((resolve(ctx, item), *as_list(resolve(ctx, lst), "FPUT")))

@primitive("LPUT", shapes=[ANY, LIST], outputs=True, category=Category.LISTS)
def _lput(ctx, item, lst):
	""" A new list with the item at the end """
	return List((*as_list(resolve(ctx, lst), "LPUT"), resolve(ctx, item)))

@primitive("LIST", shapes=[ANY, ANY], outputs=True, category=Category.LISTS)
def _list(ctx, a, b):
	""" A list of the two inputs """
	return List((resolve(ctx, a), resolve(ctx, b)))

@primitive("SENTENCE", "SE", shapes=[ANY, ANY], outputs=True, category=Category.LISTS)
def _sentence(ctx, a, b):
	""" Join the inputs into one flat list """
	items = []
	for raw in (a, b):
		value = resolve(ctx, raw)
		if isinstance(value, List): items.extend(value.items)
		else: items.append(value)
	return List(tuple(items))

@primitive("WORD", shapes=[ANY, ANY], outputs=True, category=Category.LISTS)
def _word(ctx, a, b):
	""" Join two words into one """
	return String(as_word(resolve(ctx, a), "WORD") + as_word(resolve(ctx, b), "WORD"))

###############################################################################
#  Output

@primitive("PRINT", "PR", shapes=[ANY], category=Category.IO)
def _print(ctx, value):
	""" Print to the output, leaving off a list's outer brackets """
	ctx.output(as_text(resolve(ctx, value)) + "\n")

@primitive("SHOW", shapes=[ANY], category=Category.IO)
def _show(ctx, value):
	""" Print to the output, brackets and all """
	ctx.output(as_text(resolve(ctx, value), True) + "\n")

@primitive("TYPE", shapes=[ANY], category=Category.IO)
def _type(ctx, value):
	""" Print without adding a newline """
	ctx.output(as_text(resolve(ctx, value)))

###############################################################################

def catalogue() -> str:
	""" Every built-in, grouped by category, for the --commands option. """
	lines = []
	for category in Category:
		specs = [spec for spec in SPECS if spec.category is category]
		if not specs: continue
		lines.append(category.value + ":")
		for spec in specs:
			usage = " ".join([spec.name, *(shape.value for shape in spec.shapes)])
			also = " (also %s)" % ", ".join(spec.aliases) if spec.aliases else ""
			lines.append("  %-32s %s%s" % (usage, spec.description, also))
		lines.append("")
	return "\n".join(lines)
