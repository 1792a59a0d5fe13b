"""Transition table: validated, immutable mapping of event name -> definition."""

from __future__ import annotations

import keyword
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

import structlog
from pydantic import ValidationError

from eventfsm.domain.errors import ConfigurationError
from eventfsm.domain.models import TransitionDefinition

logger = structlog.get_logger()

# Channel every transition is announced on before its own event channel.
TRANSITION_CHANNEL = "transition"


class TransitionTable(Mapping[str, TransitionDefinition]):
    """Read-only mapping of event names to their transition definitions.

    Built once by :func:`build_transition_table` and never mutated; callers
    that want a different table build a new machine.
    """

    def __init__(self, definitions: Mapping[str, TransitionDefinition]) -> None:
        self._definitions: Mapping[str, TransitionDefinition] = MappingProxyType(
            dict(definitions)
        )

    def __getitem__(self, event: str) -> TransitionDefinition:
        return self._definitions[event]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"TransitionTable({dict(self._definitions)!r})"

    @property
    def states(self) -> tuple[Any, ...]:
        """Every state named as a source or target, in declaration order."""
        seen: dict[Any, None] = {}
        for definition in self._definitions.values():
            for state in definition.sources:
                seen.setdefault(state, None)
            seen.setdefault(definition.target, None)
        return tuple(seen)

    def events_from(self, state: Any) -> list[str]:
        """Return the names of events that may fire from *state*, in declaration order."""
        return [name for name, definition in self._definitions.items() if definition.allows(state)]


def _coerce_definition(name: str, raw: Any) -> TransitionDefinition:
    if isinstance(raw, TransitionDefinition):
        return raw
    try:
        return TransitionDefinition.model_validate(raw)
    except ValidationError as exc:
        logger.error("invalid_transition_definition", event_name=name, errors=exc.errors())
        raise ConfigurationError(
            f"Invalid definition for event \"{name}\": {exc.error_count()} validation error(s)",
            event_name=name,
        ) from exc


def build_transition_table(
    events: Mapping[str, Any],
    reserved: Iterable[str] = (),
) -> TransitionTable:
    """Validate a declarative event map and build an immutable transition table.

    Args:
        events: Mapping of event name to ``{"from": state | [states], "to": state}``
                (or an already-built :class:`TransitionDefinition`).
        reserved: Names already taken on the machine's fixed surface.

    Returns:
        A :class:`TransitionTable` preserving the declaration order of *events*.

    Raises:
        ConfigurationError: If an event name collides with a reserved name,
            is not a usable identifier, or its definition is malformed.
    """
    taken = frozenset(reserved)
    definitions: dict[str, TransitionDefinition] = {}

    for name, raw in events.items():
        if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
            logger.error("illegal_event_name", event_name=name)
            raise ConfigurationError.illegal_event_name(str(name))
        if name in taken or name == TRANSITION_CHANNEL:
            logger.error("illegal_event_name", event_name=name)
            raise ConfigurationError.illegal_event_name(name)
        definitions[name] = _coerce_definition(name, raw)

    return TransitionTable(definitions)
