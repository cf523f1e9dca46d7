"""Clustering pass over an incident sequence, and cluster serialization for the map."""

import logging
from typing import Iterable

from clustering.assigner import CLUSTER_RADIUS_M, assign_incident
from clustering.stats import TOP_K
from core.models import Cluster, Incident

logger = logging.getLogger("safety_api.core.engine")

# (min total_count exclusive, fill colour); first match wins
SEVERITY_COLORS = (
    (10, "#ff0000"),
    (5, "#ff4444"),
)
DEFAULT_FILL_COLOR = "#ff8888"


def cluster_incidents(
    incidents: Iterable[Incident],
    *,
    radius_m: float = CLUSTER_RADIUS_M,
    top_k: int = TOP_K,
) -> list[Cluster]:
    """
    Group incidents into clusters, in the order given. Always starts from an
    empty list; returns clusters in creation order. Same input order, same output.
    """
    clusters: list[Cluster] = []
    n = 0
    for incident in incidents:
        assign_incident(clusters, incident, radius_m=radius_m, top_k=top_k)
        n += 1
    logger.info("clustered incidents=%d clusters=%d radius_m=%s", n, len(clusters), radius_m)
    return clusters


def fill_color(total_count: int) -> str:
    for threshold, color in SEVERITY_COLORS:
        if total_count > threshold:
            return color
    return DEFAULT_FILL_COLOR


def get_cluster_state_dict(cluster: Cluster, radius_m: float = CLUSTER_RADIUS_M, include_members: bool = False) -> dict:
    """Serialize cluster for API/map popup (center, circle radius, counts, top lists)."""
    d = {
        "center": cluster.center.to_dict(),
        "radius_m": radius_m,
        "total_count": cluster.total_count,
        "year": cluster.year,
        "police_station": cluster.police_station,
        "fill_color": fill_color(cluster.total_count),
        "top_natures": [n.to_dict() for n in cluster.top_natures],
        "recent_incidents": [r.to_dict() for r in cluster.recent_incidents],
    }
    if include_members:
        d["members"] = [m.to_dict() for m in cluster.members]
    return d
