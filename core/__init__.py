"""Core incident/cluster models. Clustering pass in core.engine, sequenced refresh in core.refresh."""

from core.models import GeoPoint, Incident, Cluster, NatureCount, RecentIncident

__all__ = [
    "GeoPoint",
    "Incident",
    "Cluster",
    "NatureCount",
    "RecentIncident",
]
