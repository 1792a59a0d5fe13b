"""Diagnostic graph export for transition tables."""

from eventfsm.graph.dot import find_accepting_states, to_dot

__all__ = ["find_accepting_states", "to_dot"]
