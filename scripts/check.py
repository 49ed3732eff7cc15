#!/usr/bin/env python3
"""Composite quality checks for the loader, for local and CI use."""

from __future__ import annotations

import argparse
import os
import subprocess
from pathlib import Path


def _run_checked(*, label: str, command: list[str], env: dict[str, str]) -> None:
    print(label, flush=True)
    completed = subprocess.run(command, env=env, check=False)
    if completed.returncode != 0:
        raise SystemExit(f"{label} failed with exit code {completed.returncode}.")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run loader quality checks.")
    parser.add_argument("--skip-typecheck", action="store_true")
    parser.add_argument("--skip-unit-tests", action="store_true")
    parser.add_argument("--skip-integration-tests", action="store_true")
    args = parser.parse_args()

    root = Path(__file__).resolve().parent.parent
    os.chdir(root)

    env = os.environ.copy()
    env["PYTHONPATH"] = "."
    env.setdefault("APPLOADER_SKIP_CAPABILITY_PROBE", "1")

    if not args.skip_typecheck:
        _run_checked(label="Running mypy...", command=["uv", "run", "mypy"], env=env)

    if not args.skip_unit_tests:
        _run_checked(
            label="Running loader unit tests with coverage gate...",
            command=[
                "uv",
                "run",
                "pytest",
                "tests/apploader/unit",
                "--cov=apploader",
                "--cov-report=term-missing",
                "--cov-fail-under=75",
            ],
            env=env,
        )

    if not args.skip_integration_tests:
        _run_checked(
            label="Running lifecycle critical coverage gate...",
            command=[
                "uv",
                "run",
                "pytest",
                "tests/apploader/integration",
                "tests/apploader/unit/runtime",
                "--cov=apploader.runtime.lifecycle",
                "--cov=apploader.runtime.restart",
                "--cov=apploader.runtime.display",
                "--cov-report=term-missing",
                "--cov-fail-under=90",
            ],
            env=env,
        )

    print("All selected checks passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
