"""Validate trail event YAML files for structure and weights."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Sequence, Tuple

import yaml

from ..config import DEFAULT_EVENTS_PATH, get_settings
from ..events import validate_catalog_data

DEFAULT_FILES = [DEFAULT_EVENTS_PATH]


def _load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        raise ValueError(f"Failed to load {path}: {exc}") from exc


def validate_files(paths: Sequence[Path]) -> Tuple[List[str], List[str]]:
    """Return ``(errors, warnings)`` across every file, prefixed by path."""

    resource_keys = get_settings().resource_keys
    errors: List[str] = []
    warnings: List[str] = []
    for path in paths:
        if not path.exists():
            errors.append(f"{path}: file not found")
            continue
        try:
            data = _load_yaml(path)
        except ValueError as exc:
            errors.append(str(exc))
            continue
        file_errors, file_warnings = validate_catalog_data(data, resource_keys)
        errors.extend(f"{path}: {message}" for message in file_errors)
        warnings.extend(f"{path}: {message}" for message in file_warnings)
    return errors, warnings


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate trail event YAML files for structure and weights."
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Event YAML files to validate (defaults to the bundled catalog)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings such as unknown resource keys as errors",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING)

    targets: List[Path] = list(args.paths) or list(DEFAULT_FILES)
    errors, warnings = validate_files(targets)
    for message in warnings:
        print(f"warning: {message}", file=sys.stderr)
    if errors or (args.strict and warnings):
        for message in errors:
            print(message, file=sys.stderr)
        return 1

    print("Event catalog validation passed for", len(targets), "file(s).")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
