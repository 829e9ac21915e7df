"""
PolicyTree FastAPI application entrypoint.

Run with: uvicorn policytree.main:app --reload
"""

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from policytree.domains import register_builtin_domains
from policytree.routes import api_router
from policytree.services.registry import default_registry
from policytree.utils.logging import configure_logging

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("POLICYTREE_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and register the built-in domains on startup."""
    configure_logging()
    register_builtin_domains(default_registry)
    logger.info("PolicyTree started with domains: %s", ", ".join(default_registry.list_domains()))
    yield


app = FastAPI(
    title="PolicyTree API",
    description="""Authoring API for branching business policies.

Domains (payment routing, fulfillment, ...) expose field catalogs; the API
resolves operators and value shapes for conditions and validates whole trees.
Nothing is stored: persistence and evaluation live with the calling service.
""",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for the visual editor (Vite default port 5173)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency for /api/* requests."""

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith("/api/"):
            return await call_next(request)
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
        logger.debug("%s %s -> %s (%.2f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response


app.add_middleware(RequestTimingMiddleware)
app.include_router(api_router)


@app.get("/")
def root():
    return {"service": "PolicyTree", "docs": "/docs", "api": "/api"}
