"""
Seed demo safety incidents by POSTing them to the /incidents API.

Run with the API already running (python run_api.py). Optionally set SAFETY_API_URL in env.
Incidents are dated over the last ~60 days around central São José dos Campos, with a few
tight groups so the map shows multi-incident clusters next to isolated ones.
Usage: python seed_demo_incidents.py
"""

import os
import time
from datetime import date, timedelta

import httpx

SAFETY_API_URL = (os.environ.get("SAFETY_API_URL") or "http://localhost:8000").rstrip("/")

# Demo incidents: (nature, lat, lng, police_station)
DEMO_INCIDENTS = [
    # Group 1: city centre (within ~100 m)
    ("roubo", -23.2237, -45.9009, "1º DP"),
    ("furto", -23.2240, -45.9012, "1º DP"),
    ("roubo", -23.2232, -45.9005, "1º DP"),
    ("furto", -23.2238, -45.9015, "1º DP"),
    ("lesao_corporal", -23.2235, -45.9003, "1º DP"),
    ("roubo", -23.2241, -45.9008, "1º DP"),
    ("outros", -23.2236, -45.9010, "1º DP"),
    # Group 2: ~2 km east
    ("furto", -23.2190, -45.8820, "2º DP"),
    ("furto", -23.2193, -45.8824, "2º DP"),
    ("roubo", -23.2188, -45.8818, "2º DP"),
    # Isolated
    ("homicidio", -23.1900, -45.8700, "3º DP"),
    ("outros", -23.2500, -45.9300, "4º DP"),
]


def _incident_date_for_index(i: int) -> str:
    """Spread incidents over the last ~60 days."""
    days_ago = (i * 7) % 60
    return (date.today() - timedelta(days=days_ago)).isoformat()


def main():
    print(f"Seeding demo incidents via {SAFETY_API_URL}/incidents")
    client = httpx.Client(timeout=30.0)
    try:
        for i, (nature, lat, lng, station) in enumerate(DEMO_INCIDENTS):
            payload = {
                "nature": nature,
                "latitude": lat,
                "longitude": lng,
                "date": _incident_date_for_index(i),
                "police_station": station,
            }
            r = client.post(f"{SAFETY_API_URL}/incidents", json=payload)
            if r.is_success:
                row = r.json().get("data", {})
                print(f"  [{i+1}/{len(DEMO_INCIDENTS)}] id={row.get('id')} {nature} {payload['date']}")
            else:
                print(f"  [{i+1}/{len(DEMO_INCIDENTS)}] FAILED {r.status_code} {r.text[:200]}")
            time.sleep(0.1)
        r = client.get(f"{SAFETY_API_URL}/clusters")
        if r.is_success:
            data = r.json()
            print(f"Done. {data.get('incident_count')} incidents in {data.get('cluster_count')} clusters (seq {data.get('sequence')}).")
    finally:
        client.close()


if __name__ == "__main__":
    main()
