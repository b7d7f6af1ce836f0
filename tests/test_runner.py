"""Table-driven tests for the Lox parser and interpreter.

Test cases live in parser/*.tests and programs/*.tests. Format:

    === test name
    source code here
    ---
    expected
    ---

Expected section for parser tests: the emitted AST, one statement per line,
or `error: <message>` lines.

Expected section for program tests: the exact stdout, optionally followed by
`runtime error: <message>`; or only `error: <message>` lines for programs
that must not run. Each `error:` line must match one reported static error,
and the number of static errors must match the number of lines.
"""

import io
import signal
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from lox import Interpreter, Reporter, parse, run, to_source

PARSE_TIMEOUT = 5
TESTS_DIR = Path(__file__).parent

TESTS = {
    "lox_parse": "parser",
    "lox_program": "programs",
}


# ---------------------------------------------------------------------------
# Timeout
# ---------------------------------------------------------------------------


def _timeout_handler(signum, frame):
    raise TimeoutError("lox run timed out")


signal.signal(signal.SIGALRM, _timeout_handler)


# ---------------------------------------------------------------------------
# Test file parsing
# ---------------------------------------------------------------------------


def parse_case_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_cases(test_dir: Path) -> list[tuple[str, str, str]]:
    """Glob *.tests in test_dir, return (test_id, input, expected) tuples."""
    results = []
    for test_file in sorted(test_dir.glob("*.tests")):
        for name, input_code, expected in parse_case_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


# ---------------------------------------------------------------------------
# Phase result + assertion checker
# ---------------------------------------------------------------------------


@dataclass
class PhaseResult:
    output: str = ""
    errors: list[str] = field(default_factory=list)
    runtime_errors: list[str] = field(default_factory=list)


def split_expected(expected: str) -> tuple[str, list[str], list[str]]:
    """Split an expected block into (output, static errors, runtime errors)."""
    output_lines: list[str] = []
    errors: list[str] = []
    runtime_errors: list[str] = []
    for line in expected.split("\n"):
        if line.startswith("error:"):
            errors.append(line[6:].strip())
        elif line.startswith("runtime error:"):
            runtime_errors.append(line[14:].strip())
        else:
            output_lines.append(line)
    return "\n".join(output_lines).strip(), errors, runtime_errors


def check_expected(expected: str, result: PhaseResult, phase: str) -> None:
    output, errors, runtime_errors = split_expected(expected)
    if errors:
        if len(result.errors) != len(errors):
            pytest.fail(f"Expected {len(errors)} error(s), got: {result.errors}")
        for msg in errors:
            if not any(msg in e for e in result.errors):
                pytest.fail(f"Expected error containing '{msg}', got: {result.errors}")
    elif result.errors:
        pytest.fail(f"{phase} failed: {result.errors[0]}")
    if runtime_errors:
        if not result.runtime_errors:
            pytest.fail(f"Expected runtime error '{runtime_errors[0]}', got none")
        if runtime_errors[0] not in result.runtime_errors[0]:
            pytest.fail(
                f"Expected runtime error containing '{runtime_errors[0]}', "
                f"got: {result.runtime_errors[0]}"
            )
    elif result.runtime_errors:
        pytest.fail(f"Unexpected runtime error: {result.runtime_errors[0]}")
    actual = result.output.strip()
    if actual != output:
        pytest.fail(
            f"Output mismatch\n  expected: {output!r}\n  actual:   {actual!r}"
        )


# ---------------------------------------------------------------------------
# Phase runners
# ---------------------------------------------------------------------------


def run_lox_parse(source: str) -> PhaseResult:
    reporter = Reporter()
    try:
        signal.alarm(PARSE_TIMEOUT)
        statements = parse(source, reporter)
    finally:
        signal.alarm(0)
    if reporter.had_error:
        return PhaseResult(errors=[str(e) for e in reporter.static_errors])
    return PhaseResult(output=to_source(statements))


def run_lox_program(source: str) -> PhaseResult:
    out = io.StringIO()
    try:
        signal.alarm(PARSE_TIMEOUT)
        reporter = run(source, interpreter=Interpreter(out=out))
    finally:
        signal.alarm(0)
    return PhaseResult(
        output=out.getvalue(),
        errors=[str(e) for e in reporter.static_errors],
        runtime_errors=[str(e) for e in reporter.runtime_errors],
    )


# ---------------------------------------------------------------------------
# Parametrization
# ---------------------------------------------------------------------------


def pytest_generate_tests(metafunc):
    for name, subdir in TESTS.items():
        fixture = f"{name}_input"
        if fixture in metafunc.fixturenames:
            cases = discover_cases(TESTS_DIR / subdir)
            params = [pytest.param(inp, exp, id=tid) for tid, inp, exp in cases]
            metafunc.parametrize(f"{fixture},{name}_expected", params)


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------


def test_lox_parse(lox_parse_input, lox_parse_expected):
    check_expected(lox_parse_expected, run_lox_parse(lox_parse_input), "lox_parse")


def test_lox_program(lox_program_input, lox_program_expected):
    check_expected(
        lox_program_expected, run_lox_program(lox_program_input), "lox_program"
    )
