"""
Task Intake - FastAPI Application

Turns free-form text into Vikunja tasks:
- builds a prompt from the live projects/labels
- asks the LLM for a JSON task list and recovers it from messy output
- reconciles ids against the task store and creates each task independently
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from task_intake import __version__
from task_intake.api.errors import register_exception_handlers
from task_intake.api.middleware import RequestIDMiddleware
from task_intake.api.routes import health, tasks
from task_intake.config import get_settings
from task_intake.logging_config import configure_logging
from task_intake.vikunja.client import close_vikunja_client

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()

    logger.info(
        "Starting Task Intake",
        version=__version__,
        environment=settings.environment,
        vikunja_base_url=settings.vikunja_base_url,
        model=settings.together_model,
    )

    yield

    logger.info("Shutting down Task Intake")
    await close_vikunja_client()


app = FastAPI(
    title="Task Intake API",
    description="Free text to Vikunja tasks via LLM extraction",
    version=__version__,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Request ID tracking
app.add_middleware(RequestIDMiddleware)

cors_origins = get_settings().cors_origins
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

# Prometheus metrics endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(tasks.router, tags=["Tasks"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Task Intake API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
    }
