#!/usr/bin/env python3
"""
Run the Safety Map API.
CLUSTER_RADIUS_M / CLUSTER_TOP_K / LOG_LEVEL can be set in environment (or .env).
"""
import os

from dotenv import load_dotenv

load_dotenv()

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.environ.get("RELOAD", "0") == "1",
    )
