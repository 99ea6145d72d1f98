#!/usr/bin/env python3
# backend/run.py
"""
Local development server for the driving-school booking API.

Reads settings from backend/.env like the app itself; set DATABASE_URL to
point at Postgres, otherwise a local SQLite file is used.
"""
import logging
import os
from pathlib import Path
import sys

backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

from app.core.config import settings

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    backend = "sqlite" if settings.is_sqlite else "postgres"
    logger.info(f"Starting development server (environment={settings.environment}, db={backend})")
    logger.info("API docs at http://localhost:8000/docs")

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        reload_delay=0.5,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=5,
    )
