"""
Per-cluster running statistics: member count, most frequent natures and most
recent occurrences.

Both lists are re-sorted and re-truncated on every insertion rather than kept
in a heap; K is 5 and clusters are small. Python's sort is stable, so ties keep
the order in which entries were first added.
"""

from core.models import Cluster, Incident, NatureCount, RecentIncident

TOP_K = 5


def update_top_natures(cluster: Cluster, nature: str, top_k: int = TOP_K) -> None:
    existing = next((n for n in cluster.top_natures if n.nature == nature), None)
    if existing is not None:
        existing.count += 1
    else:
        cluster.top_natures.append(NatureCount(nature=nature, count=1))
    cluster.top_natures.sort(key=lambda n: n.count, reverse=True)
    del cluster.top_natures[top_k:]


def update_recent_incidents(cluster: Cluster, incident: Incident, top_k: int = TOP_K) -> None:
    cluster.recent_incidents.append(RecentIncident(nature=incident.nature, occurred_at=incident.occurred_at))
    cluster.recent_incidents.sort(key=lambda r: r.occurred_at, reverse=True)
    del cluster.recent_incidents[top_k:]


def record_member(cluster: Cluster, incident: Incident, top_k: int = TOP_K) -> None:
    """Add incident to cluster and refresh its count, top natures and recent list."""
    cluster.members.append(incident)
    cluster.total_count += 1
    update_top_natures(cluster, incident.nature, top_k=top_k)
    update_recent_incidents(cluster, incident, top_k=top_k)
