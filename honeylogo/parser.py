"""
Recursive descent from tokens to a Program.

Every production takes the index of its first token and returns the node it
built along with how many tokens it consumed. A production that cannot make
sense of its input raises ParseError. That aborts only the statement being
built: The driver records a diagnostic, skips one token, and tries again,
so a single pass can report several mistakes.

Binary operators have no precedence; chains nest to the right, so that
  1 + 2 * 3
means 1 + (2 * 3), and likewise 10 - 2 - 3 means 10 - (2 - 3).

Procedure calls need to know how many inputs to take. Once the parser has seen
the TO line for a procedure, it knows the arity, so calls after that point
(including recursive calls in the body) take exactly that many. A call to a
procedure defined further down (or never) takes inputs greedily instead.
"""
from typing import Optional, Sequence

from . import primitive
from .primitive import Shape
from .lexer import Kind, Token, tokenize
from .values import (
	Value, Number, String, List, Block, VariableRef, Operation, CommandRef, describe,
)
from .syntax import Command, Primitive, DefineProcedure, CallProcedure, ParseIssue, Program

class ParseError(Exception):
	def __init__(self, message:str, token:Optional[Token], fatal=False):
		super().__init__(message)
		self.message = message
		self.token = token
		self.fatal = fatal

# Tokens which can begin an input to a procedure called in greedy mode.
_CAN_START_VALUE = {Kind.NUMBER, Kind.STRING, Kind.VARIABLE, Kind.OPEN_BRACKET, Kind.OPEN_PAREN}
_CLOSERS = {Kind.CLOSE_BRACKET, Kind.CLOSE_PAREN, Kind.END}
_NEGATABLE = (Kind.NUMBER, Kind.VARIABLE, Kind.OPEN_PAREN)

def parse(text:str, tokens:Sequence[Token]=None) -> Program:
	if tokens is None:
		tokens = tokenize(text)
	return Parser(text, tokens).program()

class Parser:
	def __init__(self, text:str, tokens:Sequence[Token]):
		self.text = text
		self.tokens = list(tokens)
		self.arity : dict[str, int] = {}
		self.errors : list[ParseIssue] = []

	def program(self) -> Program:
		commands = []
		i = 0
		while i < len(self.tokens):
			try:
				command, consumed = self.statement(i)
			except ParseError as pe:
				self.errors.append(ParseIssue(pe.message, pe.token))
				if pe.fatal: break
				i += 1
			else:
				commands.append(command)
				i += consumed
		return Program(commands, self.text, self.errors)

	def _token(self, i:int, context:str) -> Token:
		if i < len(self.tokens):
			return self.tokens[i]
		last = self.tokens[-1] if self.tokens else None
		raise ParseError("Unexpected end of input while parsing %s" % context, last)

	###########################################################################
	#  Statements

	def statement(self, i:int) -> tuple[Command, int]:
		token = self.tokens[i]
		kind = token.kind
		if kind is Kind.COMMAND:
			return self.invocation(i)
		if kind is Kind.PROCEDURE:
			return self.call(i, as_expression=False)
		if kind is Kind.TO:
			return self.definition(i)
		if kind is Kind.END:
			raise ParseError("END without a matching TO", token)
		if kind is Kind.CLOSE_BRACKET:
			raise ParseError("Unexpected ] with no matching [", token)
		raise ParseError("I don't know what to do with %s" % token.text, token)

	def invocation(self, i:int) -> tuple[Primitive, int]:
		token = self.tokens[i]
		spec = primitive.lookup(token.text)
		j = i + 1
		args = []
		for shape in spec.shapes:
			if j >= len(self.tokens) or self.tokens[j].kind in _CLOSERS:
				raise ParseError("Not enough inputs to %s, expected %d" % (spec.name, spec.arity), token)
			arg, consumed = self.argument(j, shape, spec.name)
			args.append(arg)
			j += consumed
		return Primitive(spec, args, token), j - i

	def argument(self, j:int, shape:Shape, who:str) -> tuple[Value, int]:
		token = self.tokens[j]
		if shape is Shape.BLOCK:
			if token.kind is not Kind.OPEN_BRACKET:
				raise ParseError("%s expected a block of commands in [brackets], got %s" % (who, token.text), token)
			return self.block(j)
		value, consumed = self.expression(j)
		_check_shape(value, shape, who, token)
		return value, consumed

	def block(self, j:int) -> tuple[Block, int]:
		opener = self.tokens[j]
		commands = []
		k = j + 1
		while True:
			if k >= len(self.tokens):
				raise ParseError("Missing closing bracket for block", opener)
			if self.tokens[k].kind is Kind.CLOSE_BRACKET:
				return Block(tuple(commands)), k + 1 - j
			command, consumed = self.statement(k)
			commands.append(command)
			k += consumed

	def definition(self, i:int) -> tuple[DefineProcedure, int]:
		to = self.tokens[i]
		name_token = self._token(i + 1, "a procedure definition")
		if name_token.kind is Kind.COMMAND:
			raise ParseError("%s is a primitive, so it can't be redefined" % name_token.text, name_token)
		if name_token.kind is not Kind.PROCEDURE:
			raise ParseError("TO needs a procedure name, got %s" % name_token.text, name_token)
		name = name_token.text
		k = i + 2
		params = []
		while k < len(self.tokens) and self.tokens[k].kind is Kind.VARIABLE:
			params.append(self.tokens[k].text)
			k += 1
		self.arity[name] = len(params)
		body = []
		while True:
			if k >= len(self.tokens):
				raise ParseError("TO %s has no END" % name, to, fatal=True)
			token = self.tokens[k]
			if token.kind is Kind.END:
				return DefineProcedure(name, params, body, to), k + 1 - i
			if token.kind is Kind.TO:
				raise ParseError("Can't define a procedure inside TO %s; is an END missing?" % name, token, fatal=True)
			# Mistakes in the body get reported one by one, without losing the rest of the definition.
			try:
				command, consumed = self.statement(k)
			except ParseError as pe:
				if pe.fatal: raise
				self.errors.append(ParseIssue(pe.message, pe.token))
				k += 1
			else:
				body.append(command)
				k += consumed

	def call(self, i:int, as_expression:bool) -> tuple[CallProcedure, int]:
		token = self.tokens[i]
		name = token.text
		j = i + 1
		args = []
		if name in self.arity:
			for _ in range(self.arity[name]):
				if j >= len(self.tokens) or self.tokens[j].kind in _CLOSERS:
					raise ParseError("Not enough inputs to %s, expected %d" % (name, self.arity[name]), token)
				arg, consumed = self.expression(j)
				args.append(arg)
				j += consumed
		else:
			while j < len(self.tokens) and self._could_be_input(self.tokens[j]):
				try: arg, consumed = self.expression(j)
				except ParseError: break
				args.append(arg)
				j += consumed
		return CallProcedure(name, args, as_expression, token), j - i

	def _could_be_input(self, token:Token) -> bool:
		if token.kind in _CAN_START_VALUE:
			return True
		if token.kind is Kind.OPERATOR:
			return token.text in ("-", "+")
		if token.kind is Kind.COMMAND:
			return primitive.lookup(token.text).outputs
		return False

	###########################################################################
	#  Expressions

	def expression(self, j:int) -> tuple[Value, int]:
		left, consumed = self.primary(j)
		k = j + consumed
		if k < len(self.tokens) and self.tokens[k].kind is Kind.OPERATOR and not self._starts_negative(k):
			op_token = self.tokens[k]
			if k + 1 >= len(self.tokens):
				raise ParseError("Nothing after the %s operator" % op_token.text, op_token)
			right, more = self.expression(k + 1)
			_check_operand(left, op_token, self.tokens[j])
			_check_operand(right, op_token, self.tokens[k+1])
			return Operation(op_token.text, left, right), consumed + 1 + more
		return left, consumed

	def primary(self, j:int) -> tuple[Value, int]:
		token = self._token(j, "an expression")
		kind = token.kind
		if kind is Kind.NUMBER:
			return Number(float(token.text)), 1
		if kind is Kind.STRING:
			return String(token.text), 1
		if kind is Kind.VARIABLE:
			return VariableRef(token.text), 1
		if kind is Kind.OPEN_BRACKET:
			return self.list_literal(j)
		if kind is Kind.OPEN_PAREN:
			inner, consumed = self.expression(j + 1)
			k = j + 1 + consumed
			if k >= len(self.tokens) or self.tokens[k].kind is not Kind.CLOSE_PAREN:
				raise ParseError("Missing closing parenthesis", token)
			return inner, consumed + 2
		if kind is Kind.OPERATOR and token.text in ("-", "+"):
			operand, consumed = self.primary(j + 1)
			_check_operand(operand, token, self.tokens[j+1])
			if token.text == "+":
				return operand, consumed + 1
			if isinstance(operand, Number):
				return Number(-operand.value), consumed + 1
			return Operation("-", Number(0.0), operand), consumed + 1
		if kind is Kind.COMMAND:
			spec = primitive.lookup(token.text)
			if not spec.outputs:
				raise ParseError("%s does not output a value, so it can't be used as an input" % spec.name, token)
			command, consumed = self.invocation(j)
			return CommandRef(command), consumed
		if kind is Kind.PROCEDURE:
			command, consumed = self.call(j, as_expression=True)
			return CommandRef(command), consumed
		raise ParseError("Unexpected %s in an expression" % token.text, token)

	def list_literal(self, j:int) -> tuple[List, int]:
		"""
		Words inside a list are data, not code: They are kept just as written,
		except that numbers (including negative ones) become numbers.
		"""
		opener = self.tokens[j]
		items = []
		k = j + 1
		while True:
			if k >= len(self.tokens):
				raise ParseError("Missing closing bracket for list", opener)
			token = self.tokens[k]
			if token.kind is Kind.CLOSE_BRACKET:
				return List(tuple(items)), k + 1 - j
			if token.kind is Kind.OPEN_BRACKET:
				sub, consumed = self.list_literal(k)
				items.append(sub)
				k += consumed
				continue
			if token.kind is Kind.NUMBER:
				items.append(Number(float(token.text)))
			elif token.text == "-" and self._glued(k, (Kind.NUMBER,)):
				items.append(Number(-float(self.tokens[k+1].text)))
				k += 1
			else:
				items.append(String(self.text[token.start:token.stop]))
			k += 1

	def _starts_negative(self, k:int) -> bool:
		"""
		In "SETXY 10 -20" the minus sign is stuck to the 20 but not to the 10,
		so it begins a new (negative) input rather than subtracting.
		"""
		minus = self.tokens[k]
		return minus.text == "-" and self._glued(k, _NEGATABLE) and self.tokens[k-1].stop < minus.start

	def _glued(self, k:int, kinds) -> bool:
		""" Is the next token one of these kinds, with no space before it? """
		if k + 1 >= len(self.tokens): return False
		after = self.tokens[k + 1]
		return after.kind in kinds and after.start == self.tokens[k].stop

def _is_numeric_word(value:Value) -> bool:
	if not isinstance(value, String): return False
	try: float(value.text)
	except ValueError: return False
	return True

def _check_operand(value:Value, op_token:Token, token:Token):
	if isinstance(value, (List, Block)) or (isinstance(value, String) and not _is_numeric_word(value)):
		raise ParseError("The %s operator needs numbers, not %s" % (op_token.text, describe(value)), token)

def _check_shape(value:Value, shape:Shape, who:str, token:Token):
	""" Only literals can be checked this early. Anything else waits for run-time. """
	if shape is Shape.NUMBER:
		ok = not isinstance(value, (List, Block, String)) or _is_numeric_word(value)
	elif shape is Shape.WORD:
		ok = not isinstance(value, (List, Block))
	elif shape is Shape.LIST:
		ok = not isinstance(value, (Number, String, Block))
	else:
		ok = True
	if not ok:
		raise ParseError("%s doesn't like %s as input" % (who, describe(value)), token)
