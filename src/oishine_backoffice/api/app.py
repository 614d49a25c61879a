"""
oishine_backoffice.api.app

FastAPI app factory for the Oishine back-office service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Own process-wide state: settings, DB engine/session factory, broadcaster.
- Initialize and dispose shared infrastructure in the lifespan.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from oishine_backoffice import __version__
from oishine_backoffice.api.errors import install_error_handlers
from oishine_backoffice.api.routers.admin_auth import router as admin_auth_router
from oishine_backoffice.api.routers.admin_settings import router as admin_settings_router
from oishine_backoffice.api.routers.admins import router as admins_router
from oishine_backoffice.api.routers.drivers import router as drivers_router
from oishine_backoffice.api.routers.health import router as health_router
from oishine_backoffice.api.routers.orders import router as orders_router
from oishine_backoffice.api.routers.realtime import router as realtime_router
from oishine_backoffice.api.routers.setup import router as setup_router
from oishine_backoffice.db.init_db import init_db
from oishine_backoffice.db.session import create_engine, create_sessionmaker
from oishine_backoffice.observability.logging import configure_logging, get_logger
from oishine_backoffice.observability.middleware import RequestContextMiddleware
from oishine_backoffice.realtime.broadcaster import Broadcaster
from oishine_backoffice.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # One engine per process; routers obtain sessions via `api.deps.db_session`.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod runs Alembic migrations instead.
            await init_db(engine)
        try:
            yield
        finally:
            await app.state.broadcaster.close()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Oishine Back-office",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.broadcaster = Broadcaster(outbox_size=settings.realtime_outbox_size)

    install_error_handlers(app)
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(setup_router)
    app.include_router(admin_auth_router)
    app.include_router(admin_settings_router)
    app.include_router(admins_router)
    app.include_router(orders_router)
    app.include_router(drivers_router)
    app.include_router(realtime_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Composition only; request handling lives in routers and services.
