"""Shared pytest fixtures for the eventfsm test suite."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
import structlog

from eventfsm.config import get_settings
from eventfsm.state_machine import StateMachine

APPROVAL_EVENTS: dict[str, dict[str, Any]] = {
    "approve": {"from": "pending", "to": "approved"},
    "reject": {"from": ["pending", "approved"], "to": "rejected"},
    "pend": {"from": ["approved", "rejected"], "to": "pending"},
}

TRAFFIC_LIGHT_EVENTS: dict[str, dict[str, Any]] = {
    "warn": {"from": "green", "to": "yellow"},
    "panic": {"from": "yellow", "to": "red"},
    "calm": {"from": "red", "to": "yellow"},
    "clear": {"from": "yellow", "to": "green"},
}


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Clear get_settings lru_cache before each test."""
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after tests that configure logging."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def approval_fsm() -> StateMachine:
    """A pending/approved/rejected machine starting in ``pending``."""
    return StateMachine(initial="pending", events=APPROVAL_EVENTS)


@pytest.fixture
def traffic_light() -> StateMachine:
    """A four-event traffic light starting in ``green``."""
    return StateMachine(initial="green", events=TRAFFIC_LIGHT_EVENTS)
