"""
IronLog API
===========
FastAPI application entry point. Mount routers here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.routers import exercises, friends, history, sessions, workouts
from app.services.session_registry import get_session_registry

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Stop any rest countdowns still running
    get_session_registry().close_all()


app = FastAPI(
    title="IronLog API",
    description="Workout tracking — active sessions, workouts, exercise library, history and friends",
    version="0.1.0",
    docs_url="/api/docs" if settings.environment != "production" else None,
    redoc_url="/api/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions.router)
app.include_router(workouts.router)
app.include_router(exercises.router)
app.include_router(history.router)
app.include_router(friends.router)


@app.get("/api/v1/health")
async def health_check() -> dict:
    return {"status": "ok", "service": "ironlog-api"}
