# warplan/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from sqlalchemy import text

from warplan.config import LOG_LEVEL
from warplan.database import engine
from warplan.routes.alliance import router as alliance_router
from warplan.routes.auth import router as auth_router
from warplan.routes.planner import router as planner_router
from warplan.routes.resources import router as resources_router
from warplan.routes.units import router as units_router
from warplan.routes.villages import router as villages_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
)

app = FastAPI(title="Travian Legends Planner", version="0.3.0")

app.include_router(auth_router)
app.include_router(units_router)
app.include_router(planner_router)
app.include_router(resources_router)
app.include_router(villages_router)
app.include_router(alliance_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/db-ping")
def db_ping() -> dict:
    with engine.connect() as conn:
        result = conn.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "select_1": result}
