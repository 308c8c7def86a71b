"""DevOps tasks for torrentprune.

Usage: uv run devops.py <task>
Tasks: fmt, lint, test, clean
"""

import subprocess
import sys


def _run(commands: list[list[str]]) -> None:
    """Execute a sequence of shell commands, exiting on first failure."""
    for cmd in commands:
        try:
            subprocess.run(cmd, check=True)  # nosec: B603, B607
        except subprocess.CalledProcessError as e:
            print(f"Command failed: {' '.join(e.cmd)}", file=sys.stderr)
            sys.exit(e.returncode)


def format_code() -> None:
    """Format the codebase with Ruff."""
    _run(
        [
            ["echo", "[fmt] Formatting with Ruff...\n"],
            ["ruff", "format", "."],
            ["ruff", "check", "--fix", "."],
        ]
    )


def lint() -> None:
    """Check style without modifying files."""
    _run(
        [
            ["echo", "[lint] Checking with Ruff...\n"],
            ["ruff", "format", "--check", "."],
            ["ruff", "check", "."],
        ]
    )


def test() -> None:
    """Run tests with PyTest."""
    _run(
        [
            ["echo", "[test] Testing with PyTest...\n"],
            ["uv", "run", "pytest", "-q"],
        ]
    )


def clean() -> None:
    """Remove caches and build artifacts."""
    _run(
        [
            ["echo", "[clean] Removing caches and artifacts...\n"],
            ["find", ".", "-type", "d", "-name", "__pycache__", "-exec", "rm", "-rf", "{}", "+"],
            ["find", ".", "-type", "f", "-name", "*.pyc", "-delete"],
            ["rm", "-rf", ".pytest_cache", ".ruff_cache", "dist", "build"],
        ]
    )


TASKS = {
    "fmt": format_code,
    "lint": lint,
    "test": test,
    "clean": clean,
}


if __name__ == "__main__":
    if len(sys.argv) != 2 or sys.argv[1] not in TASKS:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    TASKS[sys.argv[1]]()
