"""
Refresh trigger: fetch incident rows, recluster, publish a sequenced snapshot.

Each refresh takes a monotonic sequence number before fetching. A snapshot
that finishes after a newer one has been published is discarded, so a slow
fetch can no longer overwrite fresher clusters.
"""

import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from clustering.assigner import CLUSTER_RADIUS_M
from clustering.stats import TOP_K
from core.engine import cluster_incidents, get_cluster_state_dict
from core.models import Cluster
from extractors.records import incidents_from_rows

logger = logging.getLogger("safety_api.core.refresh")


@dataclass
class ClusterSnapshot:
    sequence: int
    clusters: list  # list of Cluster
    incident_count: int
    computed_at: str
    radius_m: float = CLUSTER_RADIUS_M

    def to_dict(self):
        return {
            "sequence": self.sequence,
            "computed_at": self.computed_at,
            "incident_count": self.incident_count,
            "cluster_count": len(self.clusters),
            "radius_m": self.radius_m,
            "clusters": [get_cluster_state_dict(c, radius_m=self.radius_m) for c in self.clusters],
        }


class ClusterRefresher:
    def __init__(
        self,
        fetch_rows: Callable[[], list[dict]],
        *,
        radius_m: float = CLUSTER_RADIUS_M,
        top_k: int = TOP_K,
    ):
        self._fetch_rows = fetch_rows
        self._sequence = itertools.count(1)
        self.radius_m = radius_m
        self.top_k = top_k
        self.latest: Optional[ClusterSnapshot] = None
        self._publish_lock = threading.Lock()

    def compute(self) -> ClusterSnapshot:
        """Fetch and cluster without publishing."""
        sequence = next(self._sequence)
        incidents = incidents_from_rows(self._fetch_rows())
        clusters: list[Cluster] = cluster_incidents(incidents, radius_m=self.radius_m, top_k=self.top_k)
        return ClusterSnapshot(
            sequence=sequence,
            clusters=clusters,
            incident_count=len(incidents),
            computed_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            radius_m=self.radius_m,
        )

    def publish(self, snapshot: ClusterSnapshot) -> bool:
        """Make snapshot the displayed one unless a newer one is already shown."""
        with self._publish_lock:
            current = self.latest
            if current is not None and snapshot.sequence < current.sequence:
                logger.info("discarding stale snapshot seq=%d (showing seq=%d)", snapshot.sequence, current.sequence)
                return False
            self.latest = snapshot
        logger.info("snapshot published seq=%d clusters=%d", snapshot.sequence, len(snapshot.clusters))
        return True

    def refresh(self) -> ClusterSnapshot:
        """One full pass: fetch, cluster, publish. Returns the computed snapshot."""
        snapshot = self.compute()
        self.publish(snapshot)
        return snapshot


_STOP = object()


class RefreshWorker:
    """Single consumer: one refresh per change signal, strictly in arrival order."""

    def __init__(self, refresher: ClusterRefresher):
        self.refresher = refresher
        self._queue: asyncio.Queue = asyncio.Queue()
        self.processed = 0

    def notify(self, event=None) -> None:
        """Change-notification callback; safe to pass to IncidentStore.subscribe."""
        self._queue.put_nowait(event)

    async def stop(self) -> None:
        await self._queue.put(_STOP)

    async def run(self) -> None:
        while True:
            event = await self._queue.get()
            if event is _STOP:
                logger.debug("refresh worker stopped after %d refreshes", self.processed)
                return
            reason = getattr(event, "event", None) or "initial"
            try:
                self.refresher.refresh()
            except Exception:
                # Keep consuming; the previous snapshot stays on display.
                logger.exception("refresh failed (trigger=%s)", reason)
            else:
                self.processed += 1
                logger.debug("refresh done trigger=%s", reason)
