# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: main.py
# -----------------------------------------------------------------------------
import logging
import os

from fastapi import FastAPI
import uvicorn

from api.routers import health, pipelines, records, reprocess, search

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",)
app = FastAPI(title="Record Vector Index API")
app.include_router(health.router)
app.include_router(pipelines.router)
app.include_router(records.router)
app.include_router(reprocess.router)
app.include_router(search.router)


if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=os.getenv("RVI_API_HOST", "127.0.0.1"),
        port=int(os.getenv("RVI_API_PORT", "8000")),
    )
