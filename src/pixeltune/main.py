"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import AsyncIterator

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.errors import register_error_handlers
from .config import AppConfig
from .dependencies import include_routers
from .lifecycle import run_periodic_sweep
from .logging import configure_logging
from .security.rate_limit import enforce_rate_limit

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config: AppConfig = app.state.config
    if not config.sweep_enabled:
        logger.info("Retention sweep startup skipped: disabled via config")
        yield
        return

    shutdown_event = asyncio.Event()
    task = asyncio.create_task(
        run_periodic_sweep(
            store=app.state.media_store,
            retention=timedelta(hours=config.retention_hours),
            shutdown_event=shutdown_event,
            interval_seconds=config.sweep_interval_seconds,
            include_incoming=config.sweep_incoming,
        ),
        name="pixeltune-retention-sweep",
    )
    app.state.sweep_task = task
    try:
        yield
    finally:
        shutdown_event.set()
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        app.state.sweep_task = None


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or AppConfig.build_default()
    configure_logging(cfg.log_level, json=cfg.log_json)
    app = FastAPI(
        title="PixelTune",
        version=__version__,
        lifespan=lifespan,
        dependencies=[Depends(enforce_rate_limit)],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )
    register_error_handlers(app)
    include_routers(app, cfg)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    config = AppConfig.build_default()
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    run()
