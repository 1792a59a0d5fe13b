"""Tests for the awaitable listener registry."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from eventfsm.state_machine.emitter import ListenerRegistry


class TestRegistration:
    """on/once/remove bookkeeping."""

    def test_listeners_in_registration_order(self) -> None:
        registry = ListenerRegistry()
        first, second = MagicMock(), MagicMock()
        registry.on("ping", first)
        registry.once("ping", second)
        assert registry.listeners("ping") == [first, second]
        assert registry.listener_count("ping") == 2

    def test_on_returns_the_listener(self) -> None:
        registry = ListenerRegistry()
        handler = MagicMock()
        assert registry.on("ping", handler) is handler

    def test_rejects_non_callable(self) -> None:
        registry = ListenerRegistry()
        with pytest.raises(TypeError):
            registry.on("ping", "not callable")  # type: ignore[arg-type]

    def test_remove_listener_removes_latest_registration(self) -> None:
        registry = ListenerRegistry()
        handler = MagicMock()
        other = MagicMock()
        registry.on("ping", handler)
        registry.on("ping", other)
        registry.on("ping", handler)

        assert registry.remove_listener("ping", handler) is True
        assert registry.listeners("ping") == [handler, other]

    def test_remove_unknown_listener_returns_false(self) -> None:
        registry = ListenerRegistry()
        assert registry.remove_listener("ping", MagicMock()) is False

    def test_remove_all_listeners_for_channel(self) -> None:
        registry = ListenerRegistry()
        registry.on("ping", MagicMock())
        registry.on("pong", MagicMock())
        registry.remove_all_listeners("ping")
        assert registry.listener_count("ping") == 0
        assert registry.listener_count("pong") == 1

    def test_remove_all_listeners(self) -> None:
        registry = ListenerRegistry()
        registry.on("ping", MagicMock())
        registry.on("pong", MagicMock())
        registry.remove_all_listeners()
        assert registry.listener_count("ping") == 0
        assert registry.listener_count("pong") == 0

    def test_listeners_returns_a_copy(self) -> None:
        registry = ListenerRegistry()
        registry.on("ping", MagicMock())
        registry.listeners("ping").clear()
        assert registry.listener_count("ping") == 1


class TestEmit:
    """Concurrent broadcast with ordered results."""

    @pytest.mark.anyio()
    async def test_emit_without_listeners(self) -> None:
        assert await ListenerRegistry().emit("ping") == []

    @pytest.mark.anyio()
    async def test_emit_passes_arguments(self) -> None:
        registry = ListenerRegistry()
        handler = AsyncMock(return_value="pong")
        registry.on("ping", handler)

        assert await registry.emit("ping", 1, 2, key="value") == ["pong"]
        handler.assert_awaited_once_with(1, 2, key="value")

    @pytest.mark.anyio()
    async def test_listeners_run_concurrently(self) -> None:
        registry = ListenerRegistry()
        started: list[str] = []
        release = asyncio.Event()

        async def waiter(*_: Any) -> str:
            started.append("waiter")
            await release.wait()
            return "waiter"

        async def releaser(*_: Any) -> str:
            started.append("releaser")
            release.set()
            return "releaser"

        registry.on("ping", waiter)
        registry.on("ping", releaser)

        # A sequential broadcast would block forever on the waiter.
        results = await asyncio.wait_for(registry.emit("ping"), timeout=1)

        assert started == ["waiter", "releaser"]
        assert results == ["waiter", "releaser"]

    @pytest.mark.anyio()
    async def test_once_listener_removed_before_invocation(self) -> None:
        registry = ListenerRegistry()
        counts: list[int] = []

        def handler(*_: Any) -> None:
            counts.append(registry.listener_count("ping"))

        registry.once("ping", handler)
        registry.on("ping", MagicMock())

        await registry.emit("ping")
        await registry.emit("ping")

        assert counts == [1]
        assert registry.listener_count("ping") == 1

    @pytest.mark.anyio()
    async def test_once_removal_keeps_other_registrations_of_same_listener(self) -> None:
        registry = ListenerRegistry()
        handler = MagicMock()
        registry.on("ping", handler)
        registry.once("ping", handler)

        await registry.emit("ping")
        await registry.emit("ping")

        assert handler.call_count == 3

    @pytest.mark.anyio()
    async def test_first_failure_propagates(self) -> None:
        registry = ListenerRegistry()
        registry.on("ping", AsyncMock(return_value="ok"))
        registry.on("ping", AsyncMock(side_effect=ConnectionError("lost")))

        with pytest.raises(ConnectionError, match="lost"):
            await registry.emit("ping")
