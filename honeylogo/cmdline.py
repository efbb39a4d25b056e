"""
This is an interpreter for the HoneyLogo turtle-graphics language.

{0}

For example:

    honeylogo square.logo

will draw whatever square.logo says to draw, or else try to explain why not.

    honeylogo -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

parser = argparse.ArgumentParser(
	prog="honeylogo",
	description="Interpreter for the HoneyLogo turtle-graphics language.",
)
parser.add_argument("program", nargs="?", help="a file of HoneyLogo source code")
parser.add_argument('-c', "--check", action="store_true", help="Check the program thoroughly but do not actually run it.")
parser.add_argument('-s', "--speed", type=int, default=50, help="How fast the turtle goes, from 0 to 100. Default is 50.")
parser.add_argument("--headless", action="store_true", help="Don't open a window. Run the program straight through, as fast as possible.")
parser.add_argument('-o', "--save", metavar="IMAGE", help="After the program finishes, save the picture to this file (e.g. picture.png).")
parser.add_argument('-v', "--verbose", action="count", help="Say more about what's going on.")
parser.add_argument("--commands", action="store_true", help="List every built-in command, then quit.")

def run(args):
	if args.commands:
		from .primitive import catalogue
		print(catalogue())
		return 0
	if args.program is None:
		parser.error("Which program should I run?")
	from .diagnostics import Report, TooManyIssues
	path = Path.cwd() / args.program
	report = Report(verbose=args.verbose or args.check, path=path)
	try:
		try: text = path.read_text(encoding="utf-8")
		except OSError:
			report.no_such_file(path)
			report.complain_to_console()
			return 1
		from .parser import parse
		program = parse(text)
		report.info("Parsed %d top-level command(s) from %s" % (len(program), path))
		report.parse_issues(program)
		if report.ok() and args.check:
			from .check import CallChecker
			CallChecker(report).check_program(program)
		if report.sick():
			report.complain_to_console()
			return 1
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if args.check:
		print("Looks plausible to me.", file=sys.stderr)
		return 0
	return execute(program, args, report)

def execute(program, args, report):
	import pygame
	from .canvas import WIDTH, HEIGHT
	from .executive import Session
	session = Session(pygame.Surface((WIDTH, HEIGHT)), _console, args.speed)
	if args.headless:
		session.start(program)
		session.run_to_end()
	else:
		from .adapters.display_adapter import play
		play(session, program, title="HoneyLogo - %s" % Path(args.program).name)
	if args.save:
		pygame.image.save(session.canvas.surface, args.save)
		report.info("Saved the picture to", args.save)
	if session.error is not None:
		report.run_time_error(program, session.failed, session.error)
		report.complain_to_console()
		return 1
	report.info("Done.")
	return 0

def _console(text:str):
	sys.stdout.write(text)
	sys.stdout.flush()

def main():
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
