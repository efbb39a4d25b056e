import unittest

from honeylogo.lexer import tokenize, Kind

def kinds(text): return [t.kind for t in tokenize(text)]
def texts(text): return [t.text for t in tokenize(text)]

class LexerTests(unittest.TestCase):

	def test_aliases_become_canonical(self):
		self.assertEqual(["FORWARD", "100", "RIGHT", "90"], texts("fd 100 rt 90"))
		self.assertEqual([Kind.COMMAND, Kind.NUMBER, Kind.COMMAND, Kind.NUMBER], kinds("fd 100 rt 90"))

	def test_brackets_come_apart_from_words(self):
		self.assertEqual(
			[Kind.COMMAND, Kind.NUMBER, Kind.OPEN_BRACKET, Kind.COMMAND, Kind.NUMBER, Kind.CLOSE_BRACKET],
			kinds("REPEAT 4 [FD 10]"),
		)

	def test_operators_come_apart_from_words(self):
		self.assertEqual(["X", "<=", "5"], texts(":X<=5"))
		self.assertEqual([Kind.VARIABLE, Kind.OPERATOR, Kind.NUMBER], kinds(":X<=5"))
		self.assertEqual(["A", "==", "B"], texts("a==b"))
		self.assertEqual([Kind.OPEN_PAREN, Kind.NUMBER, Kind.OPERATOR, Kind.NUMBER, Kind.CLOSE_PAREN], kinds("(1+2)"))

	def test_quoted_words_and_variables_lose_their_prefix(self):
		tokens = tokenize('MAKE "size :Side')
		self.assertEqual(Kind.STRING, tokens[1].kind)
		self.assertEqual("size", tokens[1].text)
		self.assertEqual(Kind.VARIABLE, tokens[2].kind)
		self.assertEqual("Side", tokens[2].text)

	def test_numbers(self):
		for text in ["0", "42", "3.25"]:
			with self.subTest(text):
				self.assertEqual([Kind.NUMBER], kinds(text))
		self.assertEqual([Kind.OPERATOR, Kind.NUMBER], kinds("-5"))

	def test_reserved_words_ignore_case(self):
		self.assertEqual([Kind.TO, Kind.PROCEDURE, Kind.END], kinds("to square End"))
		self.assertEqual("SQUARE", tokenize("to square end")[1].text)

	def test_unknown_words_are_procedure_names(self):
		self.assertEqual([Kind.PROCEDURE], kinds("flower"))

	def test_comments_vanish_but_offsets_survive(self):
		text = "FD 10 ; go forward\nRT 90"
		tokens = tokenize(text)
		self.assertEqual(["FORWARD", "10", "RIGHT", "90"], [t.text for t in tokens])
		self.assertEqual(text.index("RT"), tokens[2].start)

	def test_offsets_cover_the_source_word(self):
		text = 'print  "Hello\n  [a b]'
		for token in tokenize(text):
			with self.subTest(token):
				self.assertTrue(text[token.start:token.stop])
				self.assertFalse(text[token.start:token.stop].isspace())
		self.assertEqual('"Hello', text[tokenize(text)[1].start:tokenize(text)[1].stop])

	def test_nothing_is_a_lexical_error(self):
		self.assertEqual([], tokenize(""))
		self.assertEqual(5, len(tokenize("@#$ %^& ]] ?")))
