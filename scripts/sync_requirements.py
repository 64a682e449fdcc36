#!/usr/bin/env python3
"""Keep requirements.txt in step with the runtime dependencies in pyproject.toml."""

from __future__ import annotations

import argparse
import sys
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PYPROJECT = ROOT / "pyproject.toml"
REQUIREMENTS = ROOT / "requirements.txt"

HEADER = (
    "# Generated from pyproject.toml via scripts/sync_requirements.py",
    "# Do not edit manually; re-run the script after modifying dependencies.",
    "",
)


def declared_dependencies(with_dev: bool) -> list[str]:
    project = tomllib.loads(PYPROJECT.read_text())["project"]
    deps = list(project.get("dependencies", []))
    if with_dev:
        deps.extend(project.get("optional-dependencies", {}).get("dev", []))
    return sorted(deps, key=str.lower)


def render(with_dev: bool) -> str:
    return "\n".join([*HEADER, *declared_dependencies(with_dev)]) + "\n"


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--with-dev", action="store_true", help="Also pin the dev extra (pytest).")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit non-zero when requirements.txt is stale instead of rewriting it.",
    )
    args = parser.parse_args()

    expected = render(args.with_dev)
    current = REQUIREMENTS.read_text() if REQUIREMENTS.exists() else ""
    if args.check:
        if current != expected:
            print("requirements.txt is out of date; run scripts/sync_requirements.py", file=sys.stderr)
            return 1
        return 0
    REQUIREMENTS.write_text(expected)
    return 0


if __name__ == "__main__":
    sys.exit(main())
