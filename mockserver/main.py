"""
Main FastAPI application entry point.

This module builds the mock server application: configuration, logging,
the rule set store, admin and health endpoints, and the catch-all route
that mocks or forwards every other request.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from mockserver import __version__
from mockserver.api import admin, health, proxy
from mockserver.config import MockServerConfig, get_logger, load_config_from_environment, setup_logging
from mockserver.config.settings_file import load_settings_document
from mockserver.core.exceptions import (
    RuleSetCompileError,
    SettingsDocumentError,
    SettingsWriteError,
    UpstreamError,
    UpstreamTimeout,
)
from mockserver.core.middleware import RequestLoggingMiddleware
from mockserver.proxy import UpstreamHTTPClient
from mockserver.routing.dispatcher import MockDispatcher
from mockserver.routing.rules import compile_rule_set
from mockserver.routing.store import ConfigStore
from mockserver.services.configuration import ConfigurationService

logger = get_logger(__name__)


def install_store(app: FastAPI, store: ConfigStore) -> None:
    """Wire a store and everything that depends on it into app state."""
    config: MockServerConfig = app.state.config
    settings_file = config.settings_file if config.admin.persist_updates else None

    app.state.config_store = store
    app.state.configuration_service = ConfigurationService(store, settings_file)
    app.state.dispatcher = MockDispatcher(store, app.state.upstream_client)


def load_store(config: MockServerConfig) -> ConfigStore:
    """Build the initial store from the settings file.

    Raises:
        SettingsDocumentError: The settings file is missing or invalid
        RuleSetCompileError: An endpoint path failed to compile
    """
    document = load_settings_document(config.settings_file)
    return ConfigStore(compile_rule_set(document))


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses."""

    @app.exception_handler(SettingsDocumentError)
    async def settings_document_error_handler(request: Request, exc: SettingsDocumentError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.message, "errors": exc.errors}
        )

    @app.exception_handler(RuleSetCompileError)
    async def compile_error_handler(request: Request, exc: RuleSetCompileError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=exc.to_dict()
        )

    @app.exception_handler(SettingsWriteError)
    async def settings_write_error_handler(request: Request, exc: SettingsWriteError):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Failed to write settings to file"}
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        if isinstance(exc, UpstreamTimeout):
            status_code = status.HTTP_504_GATEWAY_TIMEOUT
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
        return JSONResponse(status_code=status_code, content={"detail": exc.message})


def create_app(
    config: Optional[MockServerConfig] = None,
    store: Optional[ConfigStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    configure_logging: bool = True
) -> FastAPI:
    """
    Create the mock server application.

    Args:
        config: Server configuration; loaded from the environment when None
        store: Initial rule set store; loaded from the settings file at
            startup when None
        transport: Optional httpx transport for upstream forwarding
        configure_logging: Whether startup installs the logging configuration

    Returns:
        The FastAPI application
    """
    if config is None:
        config = load_config_from_environment()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(
                log_level=config.server.log_level,
                log_format=config.server.log_format,
                log_file=config.server.log_file,
                enable_access_log=config.server.access_log
            )

        if getattr(app.state, "config_store", None) is None:
            install_store(app, load_store(config))

        snapshot = app.state.config_store.snapshot()
        logger.info(
            f"Mock server ready with {len(snapshot.rule_set)} endpoints, "
            f"forwarding unmatched requests to {snapshot.rule_set.default_endpoint}"
        )

        yield

    app = FastAPI(
        title="Mock Server",
        description="Intercepting HTTP mock server with templated responses and upstream forwarding",
        version=__version__,
        lifespan=lifespan
    )

    app.state.config = config
    app.state.config_store = None
    app.state.upstream_client = UpstreamHTTPClient(config.upstream, transport=transport)
    if store is not None:
        install_store(app, store)

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    if config.admin.enabled:
        app.include_router(admin.router, prefix=config.admin.prefix)
    app.include_router(health.router)

    # Catch-all, must be last
    app.include_router(proxy.router)

    return app


# For ``uvicorn mockserver.main:app``
app = create_app()
