"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photostage.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.photostage_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="PhotoStage",
        description="Photo composition engine — subject cut-out, themed compositing, preview/export rendering",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import all stage modules to trigger registration
    _register_stages()

    from photostage.api.router import api_router

    app.include_router(api_router)

    return app


def _register_stages() -> None:
    """Import all render stage modules so @render_stage decorators fire."""
    from photostage.engine.stages import load_stages

    load_stages()


app = create_app()
