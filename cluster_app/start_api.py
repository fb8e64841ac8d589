#!/usr/bin/env python3
"""
Convenience script to start the FastAPI service.
"""

from __future__ import annotations

import logging
import os

from cluster_app.shared.config import load_env

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    import uvicorn

    load_env()
    port = int(os.getenv("PORT", 8000))
    reload = os.getenv("API_RELOAD", "").lower() in {"1", "true", "yes"}
    logger.info("Starting API server on port %d...", port)
    uvicorn.run("cluster_app.api.app:app", host="0.0.0.0", port=port, reload=reload)


if __name__ == "__main__":
    main()
