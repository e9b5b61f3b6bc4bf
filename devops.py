"""DevOps tasks for brewsync.

Usage: python devops.py <task>
Tasks: fmt, lint, test, clean, check
"""

import shutil
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SOURCES = ["app", "tests", "devops.py"]


def _run(*commands: list[str]) -> None:
    """Run commands in order from the project root, stopping at the first failure."""
    for cmd in commands:
        print(f"$ {' '.join(cmd)}")
        result = subprocess.run(cmd, cwd=ROOT)  # nosec: B603
        if result.returncode != 0:
            print(f"Task step failed: {cmd[0]} (exit {result.returncode})", file=sys.stderr)
            sys.exit(result.returncode)


def fmt() -> None:
    """Format sources and apply safe lint fixes."""
    _run(["ruff", "format", *SOURCES], ["ruff", "check", "--fix", *SOURCES])


def lint() -> None:
    """Check formatting and lint rules without touching files."""
    _run(["ruff", "format", "--check", *SOURCES], ["ruff", "check", *SOURCES])


def test() -> None:
    """Run the unit tests."""
    _run([sys.executable, "-m", "pytest", "-q", *sys.argv[2:]])


def clean() -> None:
    """Remove caches and build output."""
    for cache in ROOT.rglob("__pycache__"):
        shutil.rmtree(cache, ignore_errors=True)
    for name in (".pytest_cache", ".ruff_cache", "dist", "build"):
        shutil.rmtree(ROOT / name, ignore_errors=True)
    print("Removed caches and build output.")


def check() -> None:
    """Lint, then test."""
    lint()
    test()


TASKS: dict[str, Callable[[], None]] = {
    "fmt": fmt,
    "lint": lint,
    "test": test,
    "clean": clean,
    "check": check,
}


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in TASKS:
        print(__doc__.strip(), file=sys.stderr)
        sys.exit(2)
    TASKS[sys.argv[1]]()
