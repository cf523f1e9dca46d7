"""Data store: in-memory safety_incidents table with change notifications."""

from store.memory import ChangeEvent, IncidentStore

__all__ = ["ChangeEvent", "IncidentStore"]
