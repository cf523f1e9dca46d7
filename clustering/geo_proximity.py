"""Great-circle distance between incident locations."""

import math

from core.models import GeoPoint

# Earth radius in metres (mean)
EARTH_RADIUS_M = 6_371_000


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in metres between two (lat, lng) points."""
    a = math.radians(lat2 - lat1)
    b = math.radians(lng2 - lng1)
    x = math.sin(a / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(b / 2) ** 2
    x = min(1.0, x)  # rounding can push antipodal points just past 1
    c = 2 * math.atan2(math.sqrt(x), math.sqrt(1 - x))
    return EARTH_RADIUS_M * c


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Distance in metres between two points."""
    return haversine_m(a.lat, a.lng, b.lat, b.lng)
