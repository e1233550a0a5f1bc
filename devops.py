"""DevOps tasks for wsclean.

Usage: uv run devops.py <task>
Tasks: fmt, lint, test, clean
"""

import subprocess
import sys

# Caches and build artifacts removed by `clean`, using wsclean itself
_CLEAN_PATTERNS = (
    "**/__pycache__/",
    "**/*.pyc",
    ".pytest_cache/",
    ".ruff_cache/",
    "build/",
    "dist/",
    "**/*.egg-info/",
)


def _run(commands: list[list[str]]) -> None:
    """Execute a sequence of commands, exiting on first failure."""
    for cmd in commands:
        try:
            subprocess.run(cmd, check=True)  # nosec: B603, B607
        except subprocess.CalledProcessError as e:
            print(f"Command failed: {' '.join(e.cmd)}", file=sys.stderr)
            sys.exit(e.returncode)


def format_code() -> None:
    """Format the codebase with Ruff."""
    _run([["ruff", "format", "."], ["ruff", "check", "--fix", "."]])


def lint() -> None:
    """Check formatting and lint rules without changing files."""
    _run([["ruff", "format", "--check", "."], ["ruff", "check", "."]])


def test() -> None:
    """Run tests with PyTest."""
    _run([["uv", "run", "pytest", "-q"]])


def clean() -> None:
    """Remove caches and build artifacts from the project tree."""
    cmd = ["uv", "run", "wsclean", "run", "--workspace", ".", "--delete-dirs", "--phase", "pre"]
    for pattern in _CLEAN_PATTERNS:
        cmd += ["--include", pattern]
    _run([cmd])


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
