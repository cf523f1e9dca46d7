"""Clustering: haversine distance + first-fit radius assignment + per-cluster top lists."""

from clustering.geo_proximity import haversine_m, distance_m
from clustering.stats import record_member, update_top_natures, update_recent_incidents
from clustering.assigner import (
    CLUSTER_RADIUS_M,
    find_first_cluster,
    assign_incident,
)

__all__ = [
    "haversine_m",
    "distance_m",
    "record_member",
    "update_top_natures",
    "update_recent_incidents",
    "CLUSTER_RADIUS_M",
    "find_first_cluster",
    "assign_incident",
]
