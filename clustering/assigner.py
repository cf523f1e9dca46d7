"""
Assign an incident to the first existing cluster within radius, or start a new one.

First-fit, not nearest: clusters are scanned in creation order and the first
one whose center is within CLUSTER_RADIUS_M wins, even if a later cluster's
center is closer. Boundaries therefore depend on input order. Centers stay
pinned to the incident that opened the cluster.
"""

import logging

from clustering.geo_proximity import distance_m
from clustering.stats import TOP_K, record_member
from core.models import Cluster, GeoPoint, Incident

logger = logging.getLogger("safety_api.clustering.assigner")

CLUSTER_RADIUS_M = 200.0


def find_first_cluster(clusters: list[Cluster], point: GeoPoint, radius_m: float = CLUSTER_RADIUS_M) -> Cluster | None:
    """Return the first cluster (creation order) whose center is within radius_m of point."""
    for cluster in clusters:
        if distance_m(cluster.center, point) <= radius_m:
            return cluster
    return None


def new_cluster(incident: Incident) -> Cluster:
    """Empty cluster centered on the incident; stats are filled by record_member."""
    return Cluster(
        center=incident.location,
        year=incident.occurred_at.year,
        police_station=incident.police_station,
    )


def assign_incident(
    clusters: list[Cluster],
    incident: Incident,
    *,
    radius_m: float = CLUSTER_RADIUS_M,
    top_k: int = TOP_K,
) -> tuple[Cluster, bool]:
    """
    Place incident into clusters (mutated in place). Return (cluster, created)
    where created is True when a new cluster was appended.
    """
    cluster = find_first_cluster(clusters, incident.location, radius_m)
    created = cluster is None
    if created:
        cluster = new_cluster(incident)
        clusters.append(cluster)
        logger.debug("cluster opened #%d at %.6f,%.6f", len(clusters), incident.location.lat, incident.location.lng)
    record_member(cluster, incident, top_k=top_k)
    return cluster, created
