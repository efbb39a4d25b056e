"""
The scanner for HoneyLogo.

Logo words are mostly separated by whitespace, so the scanner is deliberately simple:
Brackets, parentheses, and operator glyphs get separated from whatever they touch,
then each resulting word is classified by its shape. There is no error state.
Anything unrecognized becomes a procedure-name and it's up to the parser
(or the run-time) to complain if that name never gets defined.

Tokens remember where they came from so that diagnostics can point at them.
"""
import re
import sys
from enum import Enum
from typing import NamedTuple

from . import primitive

class Kind(Enum):
	COMMAND = "command"
	NUMBER = "number"
	STRING = "string"
	VARIABLE = "variable"
	OPERATOR = "operator"
	OPEN_BRACKET = "["
	CLOSE_BRACKET = "]"
	OPEN_PAREN = "("
	CLOSE_PAREN = ")"
	TO = "TO"
	END = "END"
	PROCEDURE = "procedure"

class Token(NamedTuple):
	kind: Kind
	text: str
	start: int
	stop: int
	def __repr__(self): return "<%s %r>" % (self.kind.name, self.text)

OPERATORS = frozenset(["+", "-", "*", "/", "<", ">", "<=", ">=", "==", "!="])
STRUCTURE = {"[": Kind.OPEN_BRACKET, "]": Kind.CLOSE_BRACKET, "(": Kind.OPEN_PAREN, ")": Kind.CLOSE_PAREN}
RESERVED = {"TO": Kind.TO, "END": Kind.END}

_COMMENT = re.compile(r";[^\n]*")
_NUMBER = re.compile(r"-?\d+(\.\d+)?")
# Longest glyphs first, so that "<=" is never seen as "<" followed by "=".
_GLYPH = r"<=|>=|==|!=|[\[\]()<>+\-*/]"
_WORD = re.compile(r"(%s)|((?:(?!==|!=)[^\s\[\]()<>+\-*/])+)" % _GLYPH)

def _blank_comments(text:str) -> str:
	# Blanks keep the length, so offsets still line up with the source text.
	return _COMMENT.sub(lambda m: " " * len(m.group()), text)

def tokenize(text:str) -> list[Token]:
	tokens = []
	for match in _WORD.finditer(_blank_comments(text)):
		word = match.group()
		tokens.append(_classify(word, match.start(), match.end()))
	return tokens

def _classify(word:str, start:int, stop:int) -> Token:
	if _NUMBER.fullmatch(word):
		return Token(Kind.NUMBER, word, start, stop)
	if word.startswith('"'):
		return Token(Kind.STRING, word[1:], start, stop)
	if word.startswith(':'):
		return Token(Kind.VARIABLE, word[1:], start, stop)
	if word in OPERATORS:
		return Token(Kind.OPERATOR, word, start, stop)
	if word in STRUCTURE:
		return Token(STRUCTURE[word], word, start, stop)
	upper = word.upper()
	if upper in RESERVED:
		return Token(RESERVED[upper], upper, start, stop)
	spec = primitive.lookup(word)
	if spec is not None:
		return Token(Kind.COMMAND, spec.name, start, stop)
	return Token(Kind.PROCEDURE, sys.intern(upper), start, stop)
