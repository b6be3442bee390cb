# etcdtxn/main.py
from __future__ import annotations

"""
FastAPI application for browsing recorded test runs.

This module depends on:
- etcdtxn.config.get_settings for configuration
- etcdtxn.db.session.Base and engine for DB initialization
- etcdtxn.api.api_router for route registration

Run with `uvicorn etcdtxn.main:app`.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from etcdtxn.api import api_router
from etcdtxn.config import configure_logging, get_settings
from etcdtxn.db.session import Base, engine
from etcdtxn.services.telemetry import get_telemetry

settings = get_settings()
configure_logging(settings)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
)


# ---- CORS ----

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o).rstrip("/") for o in settings.allowed_origins],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ---- Routes ----

app.include_router(api_router, prefix="/api")


# ---- Lifecycle ----


@app.on_event("startup")
def on_startup() -> None:
    """Create the history tables if they do not exist yet."""
    Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
def on_shutdown() -> None:
    get_telemetry().shutdown()


# ---- Healthcheck ----


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}
