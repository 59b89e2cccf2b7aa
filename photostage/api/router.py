"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from photostage.api import health, placement, presets, render, segment

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(presets.router)
api_router.include_router(segment.router)
api_router.include_router(placement.router)
api_router.include_router(render.router)
