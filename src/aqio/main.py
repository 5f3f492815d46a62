"""
Application factory.

`create_app()` wires the ambient pieces together: logging, request ids,
domain-error handlers and the shared `RepositoryFactory`. Routers are mounted
by the HTTP layer on top of this app.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from aqio.api.error_handlers import register_exception_handlers
from aqio.config.settings import Settings, get_settings
from aqio.core.logging import RequestIDMiddleware, setup_logging, stop_queue_logging
from aqio.database.schema import create_schema
from aqio.repositories.factory import RepositoryFactory
from aqio.utils.logging import get_project_version

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        factory = RepositoryFactory.from_settings(settings)
        try:
            await create_schema(factory.engine, seed=settings.SEED_DEFAULT_CATEGORIES)
            app.state.repositories = factory
            logger.info("app.startup", extra={"env": settings.ENV})
            yield
        finally:
            app.state.repositories = None
            await factory.dispose()
            logger.info("app.shutdown")
            stop_queue_logging()

    app = FastAPI(title="aqio", version=get_project_version(), lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    return app


__all__ = ["create_app"]
