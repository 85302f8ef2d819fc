"""Local CI runner: lint, format check, type check, then tests with coverage."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

CHECKS = (
    ["-m", "ruff", "check", "src", "tests"],
    ["-m", "black", "--check", "src", "tests"],
    ["-m", "mypy", "src"],
)


def _run(command: list[str], cwd: Path) -> None:
    subprocess.run(command, check=True, cwd=cwd)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="nutrifacts-ci")
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Skip the editable install of the package and its dev extra.",
    )
    parser.add_argument(
        "--tests-only",
        action="store_true",
        help="Run pytest without ruff, black and mypy.",
    )
    args = parser.parse_args(argv)

    cwd = Path.cwd()
    python = sys.executable

    if not args.skip_install:
        _run([python, "-m", "pip", "install", "-e", ".[dev]"], cwd)

    if not args.tests_only:
        for command in CHECKS:
            _run([python, *command], cwd)

    _run(
        [
            python,
            "-m",
            "pytest",
            "--cov=src/nutrifacts",
            "--cov-report=term-missing",
        ],
        cwd,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
