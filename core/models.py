"""Incident and cluster models for the safety map."""

from dataclasses import dataclass, field
from datetime import date

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class GeoPoint:
    lat: float  # degrees
    lng: float  # degrees

    def to_dict(self):
        return {"lat": round(self.lat, 6), "lng": round(self.lng, 6)}


@dataclass(frozen=True)
class Incident:
    """A single public-safety occurrence, as supplied by the data store."""
    nature: str
    occurred_at: date
    location: GeoPoint
    police_station: str = ""

    def to_dict(self):
        return {
            "nature": self.nature,
            "occurred_at": self.occurred_at.isoformat(),
            "location": self.location.to_dict(),
            "police_station": self.police_station,
        }


@dataclass
class NatureCount:
    nature: str
    count: int

    def to_dict(self):
        return {"nature": self.nature, "count": self.count}


@dataclass
class RecentIncident:
    nature: str
    occurred_at: date

    def to_dict(self):
        return {
            "nature": self.nature,
            "date": self.occurred_at.isoformat(),
            "date_display": self.occurred_at.strftime(DISPLAY_DATE_FORMAT),
        }


@dataclass
class Cluster:
    center: GeoPoint  # pinned to the first member's location
    year: int
    police_station: str
    members: list = field(default_factory=list)  # list of Incident, assignment order
    total_count: int = 0
    top_natures: list = field(default_factory=list)  # list of NatureCount
    recent_incidents: list = field(default_factory=list)  # list of RecentIncident
