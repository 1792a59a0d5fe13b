"""Command-line export of a machine definition to Graphviz DOT.

Reads a YAML (or JSON) file with the same ``initial``/``events`` shape the
:class:`~eventfsm.state_machine.StateMachine` constructor accepts and prints
the DOT source of its transition table.  Log lines go to stderr, rendered
according to ``EVENTFSM_PRODUCTION``.

Usage::

    python -m eventfsm.cli machines/traffic_light.yaml
    python -m eventfsm.cli machines/approval.yaml --output approval.dot
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import yaml

from eventfsm.config import get_settings
from eventfsm.domain.errors import ConfigurationError
from eventfsm.observability.logging import configure_logging
from eventfsm.state_machine.machine import StateMachine


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for DOT export.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(description="Render a state machine definition as DOT")

    parser.add_argument(
        "definition",
        type=Path,
        help="Path to a YAML or JSON machine definition",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the DOT source to this file instead of stdout",
    )

    return parser


def load_definition(path: Path) -> dict[str, Any]:
    """Load a machine definition file.

    JSON is a subset of YAML, so both formats go through ``yaml.safe_load``.

    Args:
        path: Path to the definition file.

    Returns:
        The parsed ``{"initial": ..., "events": {...}}`` mapping.

    Raises:
        ConfigurationError: If the file cannot be parsed or is not a mapping.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(raw).__name__}")
    return raw


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, build the machine, and print or write its DOT source."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    configure_logging(settings.production)

    if not args.definition.exists():
        print(f"Definition file not found: {args.definition}", file=sys.stderr)
        return 1

    try:
        machine = StateMachine.from_config(load_definition(args.definition))
    except ConfigurationError as exc:
        print(f"Invalid machine definition: {exc}", file=sys.stderr)
        return 1

    dot = machine.to_dot()
    if dot is None:
        print("No events declared.", file=sys.stderr)
        return 1

    if args.output is None:
        print(dot)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(dot + "\n", encoding="utf-8")
    return 0


if __name__ == "__main__":
    sys.exit(main())
