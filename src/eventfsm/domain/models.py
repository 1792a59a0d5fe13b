"""Pydantic v2 models for machine definitions."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransitionDefinition(BaseModel):
    """One declared event: the states it may fire from and the state it leads to.

    Accepts the declarative shape ``{"from": state | [states], "to": state}``.
    A single source state is normalized to a one-element tuple; duplicate
    sources are dropped, keeping declaration order.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sources: tuple[Hashable, ...] = Field(alias="from")
    target: Hashable = Field(alias="to")

    @field_validator("sources", mode="before")
    @classmethod
    def normalize_sources(cls, v: Any) -> tuple[Any, ...]:
        """Wrap a single state and drop duplicates."""
        if not isinstance(v, (list, tuple, set, frozenset)):
            return (v,)
        try:
            states = tuple(dict.fromkeys(v))
        except TypeError:
            raise ValueError("states must be hashable") from None
        if not states:
            raise ValueError("from must name at least one state")
        return states

    def allows(self, state: Any) -> bool:
        """Return True if the event may fire while the machine is in *state*."""
        return state in self.sources


class MachineConfig(BaseModel):
    """Construction options for a state machine.

    Mirrors the ``{"initial": ..., "events": {...}}`` configuration object.
    Any hashable token is a legal state; there is no closed state set.
    """

    model_config = ConfigDict(frozen=True)

    initial: Hashable = None
    events: dict[str, TransitionDefinition] = Field(default_factory=dict)
