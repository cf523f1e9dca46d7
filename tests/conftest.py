"""Pytest fixtures for safety map clustering tests."""

from datetime import date

import pytest

from core.models import GeoPoint, Incident

# Metres per degree of latitude on the 6,371 km sphere
M_PER_DEG_LAT = 6_371_000 * 3.141592653589793 / 180


def north_of(point: GeoPoint, metres: float) -> GeoPoint:
    return GeoPoint(lat=point.lat + metres / M_PER_DEG_LAT, lng=point.lng)


@pytest.fixture
def origin():
    """São José dos Campos city centre."""
    return GeoPoint(lat=-23.2237, lng=-45.9009)


@pytest.fixture
def make_incident(origin):
    """Factory: incident `metres` north of origin."""
    def _make(nature="roubo", day="2025-01-01", metres=0.0, station="1º DP"):
        return Incident(
            nature=nature,
            occurred_at=date.fromisoformat(day),
            location=north_of(origin, metres),
            police_station=station,
        )
    return _make


@pytest.fixture
def scenario_a(make_incident):
    """Two incidents 100 m apart."""
    return [
        make_incident("roubo", "2025-01-01", 0),
        make_incident("furto", "2025-01-02", 100),
    ]


@pytest.fixture
def scenario_b(scenario_a, make_incident):
    """Scenario A plus one incident 5 km away."""
    return scenario_a + [make_incident("roubo", "2025-01-03", 5000)]


@pytest.fixture
def sample_row():
    """Row as stored in the safety_incidents table."""
    return {
        "incident_type": "roubo",
        "incident_date": "2025-01-01",
        "latitude": -23.2237,
        "longitude": -45.9009,
        "police_station": "1º DP",
    }

