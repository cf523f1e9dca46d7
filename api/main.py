"""
FastAPI backend: upload safety incidents, serve map clusters.
Store changes are pushed to a single refresh worker that reclusters once per change.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from dotenv import load_dotenv

from clustering.assigner import CLUSTER_RADIUS_M
from clustering.stats import TOP_K
from core.refresh import ClusterRefresher, RefreshWorker
from extractors.records import KNOWN_NATURES, InvalidIncidentRecord, incident_from_row
from store.memory import IncidentStore

load_dotenv(override=True)

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("safety_api")


# -----------------------------------------------------------------------------
# Config (env, with safe fallbacks)
# -----------------------------------------------------------------------------
def _cluster_radius_m() -> float:
    v = os.environ.get("CLUSTER_RADIUS_M")
    if v is None or v.strip() == "":
        return CLUSTER_RADIUS_M
    try:
        r = float(v.strip())
        return r if r > 0 else CLUSTER_RADIUS_M
    except ValueError:
        return CLUSTER_RADIUS_M


def _cluster_top_k() -> int:
    v = os.environ.get("CLUSTER_TOP_K")
    if v is None or v.strip() == "":
        return TOP_K
    try:
        k = int(v.strip())
        return k if k > 0 else TOP_K
    except ValueError:
        return TOP_K


# -----------------------------------------------------------------------------
# Store + refresh pipeline (in-memory)
# -----------------------------------------------------------------------------
store = IncidentStore()
refresher = ClusterRefresher(store.select_all, radius_m=_cluster_radius_m(), top_k=_cluster_top_k())


@asynccontextmanager
async def lifespan(app: FastAPI):
    worker = RefreshWorker(refresher)
    unsubscribe = store.subscribe(worker.notify)
    task = asyncio.create_task(worker.run())
    worker.notify()  # initial data load
    app.state.refresh_worker = worker
    logger.info("refresh worker started radius_m=%s top_k=%s", refresher.radius_m, refresher.top_k)
    yield
    unsubscribe()
    await worker.stop()
    await task


app = FastAPI(title="Safety Map API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------------------------------------------------------
# Request models
# -----------------------------------------------------------------------------
class IncidentUpload(BaseModel):
    latitude: Optional[Union[float, str]] = None
    longitude: Optional[Union[float, str]] = None
    nature: Optional[str] = None
    date: Optional[str] = None
    police_station: Optional[str] = None


NO_CACHE_HEADERS = {"Cache-Control": "no-store, no-cache, must-revalidate", "Pragma": "no-cache"}


def _bad_request(detail: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": detail}, headers=NO_CACHE_HEADERS)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.post("/incidents")
async def upload_incident(body: IncidentUpload):
    """Validate and store one incident. The store change triggers a recluster."""
    row = {
        "incident_type": (body.nature or "").strip(),
        "incident_date": body.date,
        "latitude": body.latitude,
        "longitude": body.longitude,
        "police_station": (body.police_station or "").strip(),
    }
    try:
        incident = incident_from_row(row)
    except InvalidIncidentRecord as e:
        logger.warning("upload rejected: %s", e)
        return _bad_request(str(e))
    if incident.nature not in KNOWN_NATURES:
        logger.warning("upload rejected: unknown nature %r", incident.nature)
        return _bad_request(f"unknown nature: {incident.nature}")

    row.update(
        incident_date=incident.occurred_at.isoformat(),
        latitude=incident.location.lat,
        longitude=incident.location.lng,
    )
    stored = store.insert(row)
    return JSONResponse(content={"success": True, "data": stored}, headers=NO_CACHE_HEADERS)


@app.delete("/incidents/{incident_id}")
async def delete_incident(incident_id: str):
    row = store.delete(incident_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Incident not found")
    return JSONResponse(content={"success": True, "data": row}, headers=NO_CACHE_HEADERS)


@app.get("/incidents")
async def list_incidents():
    """Raw rows, newest incident_date first."""
    rows = store.select_all()
    return JSONResponse(content={"count": len(rows), "incidents": rows}, headers=NO_CACHE_HEADERS)


@app.post("/refresh")
async def refresh_clusters():
    """Recluster now and return the snapshot computed by this call."""
    snapshot = refresher.refresh()
    return JSONResponse(content=snapshot.to_dict(), headers=NO_CACHE_HEADERS)


@app.get("/clusters")
async def get_clusters():
    """Latest published clusters (computed on demand if nothing has been published yet)."""
    snapshot = refresher.latest
    if snapshot is None:
        snapshot = refresher.refresh()
    return JSONResponse(content=snapshot.to_dict(), headers=NO_CACHE_HEADERS)


@app.get("/health")
async def health():
    return JSONResponse(
        content={"status": "ok", "incidents": len(store)},
        headers=NO_CACHE_HEADERS,
    )
