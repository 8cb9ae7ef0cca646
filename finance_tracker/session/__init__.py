"""Session gate."""

from finance_tracker.session.gate import SessionGate

__all__ = ["SessionGate"]
