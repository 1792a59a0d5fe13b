"""Logging setup for eventfsm."""

from eventfsm.observability.logging import configure_logging

__all__ = ["configure_logging"]
