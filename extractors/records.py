"""
Convert data-store rows into Incident objects.

Rows look like the safety_incidents table: incident_type, incident_date,
latitude, longitude and an optional police_station. Malformed rows are
filtered here so the clustering pass only ever sees finite, in-range
coordinates and a real calendar date.
"""

import logging
import math
from datetime import date, datetime
from typing import Iterable

from core.models import GeoPoint, Incident

logger = logging.getLogger("safety_api.extractors.records")

KNOWN_NATURES = ("furto", "roubo", "homicidio", "lesao_corporal", "outros")

REQUIRED_FIELDS = ("incident_type", "incident_date", "latitude", "longitude")


class InvalidIncidentRecord(ValueError):
    """Row cannot be turned into an Incident."""


def _parse_coordinate(name: str, raw, limit: float) -> float:
    if isinstance(raw, bool):
        raise InvalidIncidentRecord(f"{name} must be numeric")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidIncidentRecord(f"{name} must be numeric") from None
    if not math.isfinite(value):
        raise InvalidIncidentRecord(f"{name} must be finite")
    if abs(value) > limit:
        raise InvalidIncidentRecord(f"{name} out of range")
    return value


def parse_incident_date(raw) -> date:
    """Accept a date, a datetime, 'YYYY-MM-DD' or an ISO timestamp; keep the calendar date."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidIncidentRecord("incident_date is required")
    s = raw.strip().replace("Z", "+00:00")
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        raise InvalidIncidentRecord(f"invalid incident_date: {raw!r}") from None


def incident_from_row(row: dict) -> Incident:
    """Build an Incident from a store row. Raises InvalidIncidentRecord."""
    missing = [f for f in REQUIRED_FIELDS if row.get(f) is None or row.get(f) == ""]
    if missing:
        raise InvalidIncidentRecord("missing required fields: " + ", ".join(missing))
    nature = str(row["incident_type"]).strip()
    if not nature:
        raise InvalidIncidentRecord("incident_type is required")
    lat = _parse_coordinate("latitude", row["latitude"], 90.0)
    lng = _parse_coordinate("longitude", row["longitude"], 180.0)
    return Incident(
        nature=nature,
        occurred_at=parse_incident_date(row["incident_date"]),
        location=GeoPoint(lat=lat, lng=lng),
        police_station=str(row.get("police_station") or ""),
    )


def incidents_from_rows(rows: Iterable[dict]) -> list[Incident]:
    """Convert rows in order, dropping (and logging) any that fail validation."""
    out = []
    for row in rows:
        try:
            out.append(incident_from_row(row))
        except InvalidIncidentRecord as e:
            logger.warning("skipping row id=%s: %s", row.get("id"), e)
    return out
