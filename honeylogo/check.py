"""
A static pass over a parsed program, for the --check option.

The run-time is forgiving: It complains about an undefined procedure only if
a call to it actually happens, and it quietly ignores surplus inputs. This pass
is stricter. It looks at every call anywhere in the program, even in
branches that might never run, and checks it against the definitions.
"""
from boozetools.support.foundation import Visitor

from .syntax import Program, Primitive, DefineProcedure, CallProcedure
from .values import Block, Operation, CommandRef
from .diagnostics import Report

class CallChecker(Visitor):
	def __init__(self, report:Report):
		self._report = report
		self._arity = {}
		self._calls = []

	def check_program(self, program:Program):
		self._program = program
		for command in program:
			self.visit(command)
		for call in self._calls:
			key = call.name.casefold()
			if key not in self._arity:
				self._report.undefined_procedure(program, call)
			elif len(call.args) != self._arity[key]:
				self._report.wrong_arity(program, call, self._arity[key])

	def visit_Primitive(self, it:Primitive):
		for arg in it.args:
			self.visit(arg)

	def visit_DefineProcedure(self, it:DefineProcedure):
		self._arity[it.procedure.name.casefold()] = len(it.procedure.params)
		for command in it.procedure.body:
			self.visit(command)

	def visit_CallProcedure(self, it:CallProcedure):
		self._calls.append(it)
		for arg in it.args:
			self.visit(arg)

	def visit_Block(self, it:Block):
		for command in it.commands:
			self.visit(command)

	def visit_CommandRef(self, it:CommandRef):
		self.visit(it.command)

	def visit_Operation(self, it:Operation):
		self.visit(it.left)
		self.visit(it.right)

	# Plain data holds no calls.
	def visit_Number(self, it): pass
	def visit_String(self, it): pass
	def visit_Boolean(self, it): pass
	def visit_List(self, it): pass
	def visit_VariableRef(self, it): pass
