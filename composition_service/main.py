# composition_service/main.py

"""
Application entry point.

create_app() builds every long-lived component once from Settings and
stores it on app.state; the lifespan connects and releases them.

Run with: uvicorn composition_service.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from composition_service.adapters.configuration.config import Settings, get_settings
from composition_service.adapters.inbound.api.v1.endpoints import health_endpoint
from composition_service.adapters.inbound.api.v1.router import api_router
from composition_service.adapters.outbound.cache.redis_client import RedisClient
from composition_service.adapters.outbound.cache.session_store import RedisSessionStore
from composition_service.adapters.outbound.calculator.calculation_dispatcher import CalculationDispatcher
from composition_service.adapters.outbound.persistence import database
from composition_service.adapters.outbound.security.token_codec import TokenCodec
from composition_service.application.use_cases.auth_gate import AuthGate
from composition_service.shared.middleware import AsyncRequestLoggingMiddleware, ErrorHandlerMiddleware
from composition_service.shared.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: reach the session store. Shutdown: release everything."""
    state = app.state
    await state.session_store.connect()
    logger.info(f"{state.settings.PROJECT_NAME} {state.settings.VERSION} started ({state.settings.ENVIRONMENT})")
    try:
        yield
    finally:
        await state.calculation_dispatcher.shutdown()
        await state.session_store.close()
        if state.db_manager is not None:
            await state.db_manager.dispose()
        logger.info("Shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.DEBUG)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Composition ordering service: catalog, draft workflow and moderation.",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Componentes da aplicação
    token_codec = TokenCodec.from_settings(settings)
    session_store = RedisSessionStore(RedisClient.from_settings(settings))

    app.state.settings = settings
    app.state.token_codec = token_codec
    app.state.session_store = session_store
    app.state.auth_gate = AuthGate(token_codec, session_store)
    app.state.calculation_dispatcher = CalculationDispatcher.from_settings(settings)
    app.state.db_manager = database.init_db(settings.DATABASE_URL, echo=settings.DEBUG)

    # Middlewares (o último adicionado é o mais externo)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(AsyncRequestLoggingMiddleware, environment=settings.ENVIRONMENT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_endpoint.router)
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
