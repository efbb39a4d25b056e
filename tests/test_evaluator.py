import unittest

from honeylogo.parser import parse
from honeylogo.turtle import Turtle
from honeylogo.values import Number, String, Boolean, List, VariableRef, Operation, as_text, format_number
from honeylogo import evaluator
from honeylogo.evaluator import (
	Context, resolve, Bye,
	UndefinedVariable, UndefinedProcedure, TypeMismatch, DivisionByZero,
	EmptyInput, NoOutput, StrayOutput, TooBig,
)

def run(text):
	""" Run a program straight through; answer with whatever it printed. """
	program = parse(text)
	assert program.ok(), program.messages
	out = []
	program.execute(Context(Turtle(), out.append))
	return "".join(out)

def context():
	return Context(Turtle(), lambda text: None)

class ResolveTests(unittest.TestCase):

	def test_concrete_values_resolve_to_themselves(self):
		ctx = context()
		for value in [Number(1.0), String("x"), Boolean(True), List((Number(2.0),))]:
			with self.subTest(value):
				self.assertIs(value, resolve(ctx, value))

	def test_arithmetic(self):
		ctx = context()
		for op, expect in [("+", 8.0), ("-", 4.0), ("*", 12.0), ("/", 3.0)]:
			with self.subTest(op):
				self.assertEqual(Number(expect), resolve(ctx, Operation(op, Number(6.0), Number(2.0))))

	def test_comparisons_give_one_or_zero(self):
		ctx = context()
		for op, expect in [("<", 0.0), (">", 1.0), ("<=", 0.0), (">=", 1.0), ("==", 0.0), ("!=", 1.0)]:
			with self.subTest(op):
				self.assertEqual(Number(expect), resolve(ctx, Operation(op, Number(6.0), Number(2.0))))

	def test_division_by_zero(self):
		with self.assertRaises(DivisionByZero):
			resolve(context(), Operation("/", Number(1.0), Number(0.0)))

	def test_operands_must_be_numbers(self):
		with self.assertRaises(TypeMismatch):
			resolve(context(), Operation("+", String("abc"), Number(1.0)))
		self.assertEqual(Number(6.0), resolve(context(), Operation("+", String("5"), Number(1.0))))

	def test_overflow(self):
		with self.assertRaises(TooBig):
			resolve(context(), Operation("*", Number(1e300), Number(1e300)))
		self.assertEqual(Number(1.0), resolve(context(), Operation("<", Number(1.0), Number(1e308))))

	def test_only_finite_numbers_count_as_numbers(self):
		with self.assertRaises(TooBig):
			evaluator.as_number(Number(float("inf")), "FORWARD")
		for word in ["inf", "nan", "-Infinity"]:
			with self.subTest(word):
				with self.assertRaises(TypeMismatch):
					evaluator.as_number(String(word), "FORWARD")

	def test_nested_operations_resolve_inside_out(self):
		ctx = context()
		ctx.assign("x", Number(4.0))
		expr = Operation("-", Number(10.0), Operation("-", VariableRef("X"), Number(1.0)))
		self.assertEqual(Number(7.0), resolve(ctx, expr))

	def test_undefined_variable(self):
		with self.assertRaises(UndefinedVariable) as cm:
			resolve(context(), VariableRef("nope"))
		self.assertEqual("nope has no value", str(cm.exception))

	def test_variables_ignore_case(self):
		ctx = context()
		ctx.assign("Size", Number(3.0))
		self.assertEqual(Number(3.0), resolve(ctx, VariableRef("SIZE")))

	def test_variant_aware_equality(self):
		self.assertNotEqual(Number(1.0), Boolean(True))
		self.assertNotEqual(String("1"), Number(1.0))

class TextTests(unittest.TestCase):

	def test_numbers_print_without_needless_decimals(self):
		self.assertEqual("5", format_number(5.0))
		self.assertEqual("2.5", format_number(2.5))
		self.assertEqual("-3", format_number(-3.0))

	def test_print_and_show_differ_on_brackets(self):
		value = List((String("a"), List((String("b"), String("c")))))
		self.assertEqual("a [b c]", as_text(value))
		self.assertEqual("[a [b c]]", as_text(value, True))

class ProgramTests(unittest.TestCase):

	def test_make_then_print(self):
		self.assertEqual("5\n", run('MAKE "X 5 PRINT :X'))

	def test_thing(self):
		self.assertEqual("5\n", run('MAKE "X 5 PRINT THING "X'))

	def test_repcount(self):
		self.assertEqual("1\n2\n3\n", run("REPEAT 3 [PRINT REPCOUNT]"))

	def test_if_and_truthiness(self):
		self.assertEqual("1\n", run('IF "true [PRINT 1] IF 0 [PRINT 2]'))
		self.assertEqual("big\n", run('IFELSE 3 > 2 [PRINT "big] [PRINT "small]'))
		with self.assertRaises(TypeMismatch):
			run('IF "maybe [PRINT 1]')

	def test_while_and_until(self):
		self.assertEqual("3\n", run('MAKE "I 0 WHILE :I < 3 [MAKE "I :I + 1] PRINT :I'))
		self.assertEqual("3\n", run('MAKE "I 0 UNTIL :I == 3 [MAKE "I :I + 1] PRINT :I'))

	def test_arithmetic_commands(self):
		self.assertEqual("3\n", run("PRINT SUM 1 2"))
		self.assertEqual("-1\n", run("PRINT REMAINDER -7 2"))
		self.assertEqual("3\n-3\n", run("PRINT ROUND 2.5 PRINT ROUND -2.5"))
		self.assertEqual("4\n", run("PRINT SQRT 16"))
		self.assertEqual("3\n", run("PRINT INT 3.9"))
		with self.assertRaises(DivisionByZero):
			run("PRINT QUOTIENT 1 0")

	def test_random_stays_in_range(self):
		for _ in range(20):
			self.assertIn(run("PRINT RANDOM 3"), ["0\n", "1\n", "2\n"])

	def test_logic(self):
		self.assertEqual("true\n", run('PRINT EQUALP "abc "ABC'))
		self.assertEqual("true\n", run('PRINT EQUALP 5 "5'))
		self.assertEqual("false\n", run("PRINT NOT 1"))
		self.assertEqual("true\n", run("PRINT AND 1 > 0 2 > 1"))
		self.assertEqual("1\n", run("PRINT 3 > 2"))

	def test_words_and_lists(self):
		self.assertEqual("a\n", run("PRINT FIRST [a b c]"))
		self.assertEqual("b c\n", run("PRINT BUTFIRST [a b c]"))
		self.assertEqual("c\n", run("PRINT LAST [a b c]"))
		self.assertEqual("h\n", run('PRINT FIRST "hello'))
		self.assertEqual("ell\n", run('PRINT BUTLAST BUTFIRST "hello'))
		self.assertEqual("5\n", run('PRINT COUNT "hello'))
		self.assertEqual("b\n", run("PRINT ITEM 2 [a b c]"))
		self.assertEqual("[1 2 3]\n", run("SHOW FPUT 1 [2 3]"))
		self.assertEqual("[2 3 1]\n", run("SHOW LPUT 1 [2 3]"))
		self.assertEqual("[a b c]\n", run('SHOW SENTENCE "a [b c]'))
		self.assertEqual("[a [b c]]\n", run('SHOW LIST "a [b c]'))
		self.assertEqual("honeybee\n", run('PRINT WORD "honey "bee'))
		with self.assertRaises(EmptyInput):
			run("PRINT FIRST []")

	def test_type_does_not_end_the_line(self):
		self.assertEqual("ab\n", run('TYPE "a PRINT "b'))

class ProcedureTests(unittest.TestCase):

	def test_output(self):
		self.assertEqual("42\n", run("TO DOUBLE :N OUTPUT :N * 2 END PRINT DOUBLE 21"))

	def test_stop_ends_only_the_procedure(self):
		self.assertEqual("0\n1\n2\ndone\n", run('TO T :N IF :N > 2 [STOP] PRINT :N T :N + 1 END T 0 PRINT "done'))

	def test_procedure_without_output_in_value_position(self):
		with self.assertRaises(NoOutput) as cm:
			run("TO F FD 10 END PRINT F")
		self.assertEqual("Procedure 'F' does not output a value", str(cm.exception))

	def test_same_procedure_as_a_statement_is_fine(self):
		self.assertEqual("", run("TO F FD 10 END F"))

	def test_globals_are_invisible_inside_procedures(self):
		with self.assertRaises(UndefinedVariable):
			run('MAKE "X 5 TO F PRINT :X END F')

	def test_locals_do_not_leak_out(self):
		with self.assertRaises(UndefinedVariable):
			run('TO F MAKE "Y 1 END F PRINT :Y')

	def test_parameters_shadow_nothing_outside(self):
		self.assertEqual("1\n5\n", run('MAKE "X 5 TO F :X PRINT :X END F 1 PRINT :X'))

	def test_missing_inputs_draw_a_warning(self):
		text = "TO G F 1 END TO F :A :B PRINT :A END G"
		self.assertEqual("Warning: F got no value for :B\n1\n", run(text))

	def test_surplus_inputs_are_ignored(self):
		self.assertEqual("1\n", run("TO G F 1 2 3 END TO F :A PRINT :A END G"))

	def test_undefined_procedure(self):
		with self.assertRaises(UndefinedProcedure) as cm:
			run("WIBBLE")
		self.assertEqual("I don't know how to WIBBLE", str(cm.exception))

	def test_definitions_are_shared_with_callees(self):
		text = "TO OUTER INNER END TO INNER PRINT 7 END OUTER"
		self.assertEqual("7\n", run(text))

	def test_bye_from_inside_an_expression(self):
		program = parse("TO F BYE END PRINT F PRINT 2")
		out = []
		result = program.execute(Context(Turtle(), out.append))
		self.assertIsInstance(result, Bye)
		self.assertEqual([], out)

	def test_stop_hands_back_the_last_result(self):
		ctx = context()
		definition, call = parse("TO F SUM 1 2 STOP PRINT 3 END F").commands
		definition.execute(ctx)
		self.assertEqual(Number(3.0), call.execute(ctx))

	def test_stop_before_anything_else_results_in_nothing(self):
		ctx = context()
		definition, call = parse("TO F STOP END F").commands
		definition.execute(ctx)
		self.assertIsNone(call.execute(ctx))

	def test_output_at_top_level_is_an_error(self):
		with self.assertRaises(StrayOutput):
			run("OUTPUT 5")

	def test_every_error_is_a_logo_error(self):
		for cls in [UndefinedVariable, UndefinedProcedure, TypeMismatch, DivisionByZero, EmptyInput, NoOutput, StrayOutput, TooBig]:
			with self.subTest(cls.__name__):
				self.assertTrue(issubclass(cls, evaluator.LogoError))
