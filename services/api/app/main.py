"""Household chores API service entrypoint."""

import logging
import os

from fastapi import FastAPI

from services.api.app.db.init_db import init_db
from services.api.app.routers.assignees import router as assignees_router
from services.api.app.routers.categories import router as categories_router
from services.api.app.routers.chores import router as chores_router
from services.api.app.routers.households import router as households_router

app = FastAPI(title="Household Chores API")

app.include_router(households_router)
app.include_router(assignees_router)
app.include_router(categories_router)
app.include_router(chores_router)


@app.on_event("startup")
def _startup() -> None:
    logging.basicConfig(level=os.getenv("CHORES_LOG_LEVEL", "INFO").strip().upper())
    init_db()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
