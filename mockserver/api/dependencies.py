"""
FastAPI dependencies resolving shared components from application state.
"""

from fastapi import Request

from mockserver.routing.dispatcher import MockDispatcher
from mockserver.routing.store import ConfigStore
from mockserver.services.configuration import ConfigurationService


def get_config_store(request: Request) -> ConfigStore:
    """Dependency to get the configuration store from app state."""
    return request.app.state.config_store


def get_configuration_service(request: Request) -> ConfigurationService:
    """Dependency to get the hot-edit configuration service from app state."""
    return request.app.state.configuration_service


def get_dispatcher(request: Request) -> MockDispatcher:
    """Dependency to get the request dispatcher from app state."""
    return request.app.state.dispatcher
