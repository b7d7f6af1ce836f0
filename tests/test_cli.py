"""CLI tests for the lox entry point.

Test cases live in cli/*.tests files. Format:

    === test name
    args: --ast {file}
    source code here
    ---
    exit: 0
    stdout: exact output
    stderr-contains: some message
    ---

Special directives in the input section:
    args:           CLI arguments (first line, required). `{file}` is replaced by
                    the path of a script holding the rest of the input; without
                    `{file}` the rest of the input is fed to stdin instead.

Assertion directives in the expected section:
    exit:             exact exit code
    stdout:           exact stdout content (trailing newline added)
    stdout-contains:  stdout must contain substring
    stdout-empty:     stdout must be empty
    stderr-contains:  stderr must contain substring
    stderr-empty:     stderr must be empty
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

CLI_DIR = Path(__file__).parent / "cli"
SRC_DIR = Path(__file__).parent.parent / "src"
CLI_TIMEOUT = 30


def parse_cli_test_file(path: Path) -> list[tuple[str, dict]]:
    """Parse a .tests file into (name, case) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, dict]] = []
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
            result.append((test_name, _parse_case(input_lines, expected_lines)))
        else:
            i += 1
    return result


def _parse_case(input_lines: list[str], expected_lines: list[str]) -> dict:
    """Parse input + expected lines into a test case dict."""
    case: dict = {"args": [], "body": "", "assertions": []}
    body_start = 0
    if input_lines and input_lines[0].startswith("args:"):
        args_str = input_lines[0][5:].strip()
        case["args"] = args_str.split() if args_str else []
        body_start = 1
    case["body"] = "\n".join(input_lines[body_start:])

    for line in expected_lines:
        line = line.strip()
        if not line:
            continue
        if line.startswith("exit:"):
            case["assertions"].append(("exit", int(line[5:].strip())))
        elif line.startswith("stdout:"):
            case["assertions"].append(("stdout", line[7:].strip()))
        elif line.startswith("stdout-contains:"):
            case["assertions"].append(("stdout-contains", line[16:].strip()))
        elif line.startswith("stdout-empty:"):
            case["assertions"].append(("stdout-empty", None))
        elif line.startswith("stderr-contains:"):
            case["assertions"].append(("stderr-contains", line[16:].strip()))
        elif line.startswith("stderr-empty:"):
            case["assertions"].append(("stderr-empty", None))
    return case


def discover_cli_tests() -> list[tuple[str, dict]]:
    """Find all CLI tests across .tests files."""
    results = []
    for test_file in sorted(CLI_DIR.glob("*.tests")):
        for name, case in parse_cli_test_file(test_file):
            results.append((f"{test_file.stem}/{name}", case))
    return results


def run_cli(case: dict, tmp_path: Path) -> subprocess.CompletedProcess[str]:
    """Run the lox CLI from a test case."""
    args: list[str] = case["args"]
    stdin_data = case["body"]
    if "{file}" in args:
        script = tmp_path / "script.lox"
        script.write_text(case["body"])
        args = [str(script) if a == "{file}" else a for a in args]
        stdin_data = ""
    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC_DIR)
    return subprocess.run(
        [sys.executable, "-m", "lox", *args],
        input=stdin_data,
        capture_output=True,
        text=True,
        env=env,
        cwd=tmp_path,
        timeout=CLI_TIMEOUT,
    )


def check_assertions(
    result: subprocess.CompletedProcess[str], assertions: list[tuple]
) -> None:
    """Check all assertions against a CLI result."""
    for kind, value in assertions:
        if kind == "exit":
            assert result.returncode == value, (
                f"expected exit {value}, got {result.returncode}"
                f"\nstderr: {result.stderr}"
            )
        elif kind == "stdout":
            assert result.stdout == value + "\n", (
                f"expected stdout {value!r}, got {result.stdout!r}"
            )
        elif kind == "stdout-contains":
            assert value in result.stdout, (
                f"expected stdout to contain {value!r}, got {result.stdout!r}"
            )
        elif kind == "stdout-empty":
            assert result.stdout == "", f"expected empty stdout, got {result.stdout!r}"
        elif kind == "stderr-contains":
            assert value in result.stderr, (
                f"expected stderr to contain {value!r}, got {result.stderr!r}"
            )
        elif kind == "stderr-empty":
            assert result.stderr == "", f"expected empty stderr, got {result.stderr!r}"


def pytest_generate_tests(metafunc):
    """Parametrize test_cli over all .tests files."""
    if "cli_case" in metafunc.fixturenames:
        tests = discover_cli_tests()
        params = [pytest.param(case, id=test_id) for test_id, case in tests]
        metafunc.parametrize("cli_case", params)


def test_cli(cli_case: dict, tmp_path: Path) -> None:
    """Run a single CLI test case from .tests file."""
    result = run_cli(cli_case, tmp_path)
    check_assertions(result, cli_case["assertions"])
