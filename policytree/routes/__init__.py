"""API routes for PolicyTree."""

from fastapi import APIRouter

from policytree.routes import domains, health, trees

api_router = APIRouter(prefix="/api", tags=["api"])

api_router.include_router(health.router)
api_router.include_router(domains.router, prefix="/domains", tags=["domains"])
api_router.include_router(trees.router, tags=["trees"])
