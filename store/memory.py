"""
In-memory safety_incidents table with change subscriptions.

Stands in for the managed data store: rows are selected ordered by
incident_date descending, and every insert/delete notifies subscribers.
Reads and writes hold a lock; subscribers are called after it is released.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger("safety_api.store.memory")

TABLE_NAME = "safety_incidents"


@dataclass(frozen=True)
class ChangeEvent:
    event: str  # INSERT | DELETE
    table: str
    row: dict


class IncidentStore:
    def __init__(self):
        self._rows: dict[str, dict] = {}
        self._lock = threading.Lock()
        self._subscribers: list[Callable[[ChangeEvent], None]] = []

    def __len__(self):
        with self._lock:
            return len(self._rows)

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """Register callback for change events. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, event: str, row: dict) -> None:
        change = ChangeEvent(event=event, table=TABLE_NAME, row=dict(row))
        for callback in list(self._subscribers):
            callback(change)

    def insert(self, row: dict) -> dict:
        """Store a copy of row with generated id/created_at; notify subscribers."""
        stored = dict(row)
        stored.setdefault("id", uuid.uuid4().hex)
        stored.setdefault("created_at", datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"))
        with self._lock:
            self._rows[stored["id"]] = stored
        logger.info("row inserted id=%s incident_type=%s", stored["id"], stored.get("incident_type"))
        self._emit("INSERT", stored)
        return dict(stored)

    def delete(self, row_id: str) -> Optional[dict]:
        """Remove a row; returns it, or None if unknown."""
        with self._lock:
            row = self._rows.pop(row_id, None)
        if row is None:
            return None
        logger.info("row deleted id=%s", row_id)
        self._emit("DELETE", row)
        return dict(row)

    def get(self, row_id: str) -> Optional[dict]:
        with self._lock:
            row = self._rows.get(row_id)
        return dict(row) if row is not None else None

    def select_all(self) -> list[dict]:
        """All rows, newest incident_date first; insertion order breaks ties."""
        with self._lock:
            rows = [dict(r) for r in self._rows.values()]
        rows.sort(key=lambda r: str(r.get("incident_date") or ""), reverse=True)
        return rows

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
