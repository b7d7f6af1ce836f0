"""Lox CLI: run .lox files or an interactive prompt."""

from __future__ import annotations

import sys
from typing import TextIO

from . import parse, run, to_source
from .errors import Reporter
from .runtime import Interpreter
from .tokens import tokenize


USAGE: str = """\
lox [OPTIONS] [FILE]

Run a Lox program, or start a prompt when FILE is omitted.

Options:
  --ast      Print the parsed program instead of running it
  --tokens   Print the token stream instead of running it
  --help     Show this help message
"""

# sysexits.h
EXIT_USAGE = 64
EXIT_DATAERR = 65
EXIT_NOINPUT = 66
EXIT_SOFTWARE = 70


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    mode = "run"
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--ast":
            mode = "ast"
            i += 1
        elif arg == "--tokens":
            mode = "tokens"
            i += 1
        elif arg.startswith("-"):
            print("lox: unknown flag '" + arg + "'", file=sys.stderr)
            print(USAGE, end="", file=sys.stderr)
            return EXIT_USAGE
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("lox: unexpected argument '" + arg + "'", file=sys.stderr)
            print(USAGE, end="", file=sys.stderr)
            return EXIT_USAGE

    if filepath == "":
        return run_prompt(sys.stdin, sys.stdout, sys.stderr, mode=mode)

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("lox: " + filepath + ": No such file or directory", file=sys.stderr)
        return EXIT_NOINPUT
    except OSError as e:
        print("lox: " + filepath + ": " + str(e), file=sys.stderr)
        return EXIT_NOINPUT
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("lox: " + filepath + ": invalid utf-8", file=sys.stderr)
        return EXIT_DATAERR

    reporter = Reporter(err=sys.stderr)
    _run_source(source, Interpreter(out=sys.stdout), reporter, sys.stdout, mode=mode)
    if reporter.had_error:
        return EXIT_DATAERR
    if reporter.had_runtime_error:
        return EXIT_SOFTWARE
    return 0


def run_prompt(
    stdin: TextIO, stdout: TextIO, stderr: TextIO, *, mode: str = "run"
) -> int:
    """Read-eval-print loop. Globals persist between lines; errors do not end it."""
    interpreter = Interpreter(out=stdout)
    while True:
        stdout.write("> ")
        stdout.flush()
        line = stdin.readline()
        if line == "":
            stdout.write("\n")
            return 0
        _run_source(line, interpreter, Reporter(err=stderr), stdout, mode=mode)


def _run_source(
    source: str,
    interpreter: Interpreter,
    reporter: Reporter,
    stdout: TextIO,
    *,
    mode: str,
) -> None:
    if mode == "tokens":
        for tok in tokenize(source, reporter):
            stdout.write(str(tok) + "\n")
        return
    if mode == "ast":
        statements = parse(source, reporter)
        if not reporter.had_error:
            text = to_source(statements)
            if text:
                stdout.write(text + "\n")
        return
    run(source, interpreter=interpreter, reporter=reporter)


if __name__ == "__main__":
    sys.exit(main())
