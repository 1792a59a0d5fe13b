"""Graphviz DOT export of a transition table."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from eventfsm.domain.models import TransitionDefinition

Replacer = Callable[[dict[str, Any]], Mapping[str, Any]]

_ACCEPTING_NODE_STYLE = "node [shape=doublecircle fixedsize=true width=1];"
_NODE_STYLE = "node [shape=circle fixedsize=true width=1];"


def _identity(data: dict[str, Any]) -> dict[str, Any]:
    return data


def find_accepting_states(table: Mapping[str, TransitionDefinition]) -> list[Any]:
    """Return states reached by some event but never used as a source.

    States are listed once each, in the order their first inbound event was
    declared.
    """
    sources = {state for definition in table.values() for state in definition.sources}
    accepting: dict[Any, None] = {}
    for definition in table.values():
        if definition.target not in sources:
            accepting.setdefault(definition.target, None)
    return list(accepting)


def to_dot(
    table: Mapping[str, TransitionDefinition],
    replacer: Replacer | None = None,
) -> str | None:
    """Render a transition table as a Graphviz ``digraph``.

    One edge is drawn per (event, source state) pair, labelled with the event
    name.  Accepting states are drawn as double circles.  The result depends
    only on the table, never on a machine's current state.

    Args:
        table: Mapping of event name to :class:`TransitionDefinition`.
        replacer: Called with ``{"from", "to", "label"}`` for every edge and
                  with ``{"to"}`` for every accepting state; the returned
                  mapping is rendered instead.  Identity by default.

    Returns:
        The DOT source, or ``None`` if *table* declares no events.
    """
    replace = replacer or _identity

    rows: list[str] = []
    for event_name, definition in table.items():
        for source in definition.sources:
            data = replace({"from": source, "to": definition.target, "label": event_name})
            rows.append(f'{data["from"]} -> {data["to"]} [label="{data["label"]}"]')

    if not rows:
        return None

    accepting = [replace({"to": state})["to"] for state in find_accepting_states(table)]

    lines = ["digraph G {", "    rankdir=LR;", ""]
    if accepting:
        lines.append(f"    {_ACCEPTING_NODE_STYLE} {' '.join(str(s) for s in accepting)};")
    lines.append(f"    {_NODE_STYLE}")
    lines.append("")
    lines.append("    " + ";\n    ".join(rows) + ";")
    lines.append("}")
    return "\n".join(lines)
