"""Test fixtures for mock server tests."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from mockserver.config import AdminConfig, MockServerConfig
from mockserver.main import create_app
from mockserver.models.settings import SettingsDocument
from mockserver.routing.rules import RuleSet, compile_rule_set
from mockserver.routing.store import ConfigStore

DEFAULT_ENDPOINT = "https://localhost:5003"


def make_endpoint(
    path: str,
    method: str = "GET",
    status: int = 200,
    content_type: str = "application/json",
    payload: Any = "{}"
) -> Dict[str, Any]:
    """Build one endpoint entry of a settings document."""
    return {
        "method": method,
        "path": path,
        "status": status,
        "content_type": content_type,
        "payload": payload,
    }


def make_document(
    endpoints: List[Dict[str, Any]],
    default_endpoint: str = DEFAULT_ENDPOINT
) -> Dict[str, Any]:
    """Build a settings document as decoded JSON."""
    return {"default_endpoint": default_endpoint, "endpoints": endpoints}


def build_rule_set(document: Dict[str, Any]) -> RuleSet:
    """Validate and compile a decoded settings document."""
    return compile_rule_set(SettingsDocument.model_validate(document))


class UpstreamRecorder:
    """httpx.MockTransport handler that records forwarded requests."""

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self.handler = handler or self.default_handler

    @staticmethod
    def default_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"upstream": True, "method": request.method, "path": request.url.path},
            headers={"X-Upstream": "yes"}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def sample_document() -> Dict[str, Any]:
    """A settings document covering literal, variable and mixed patterns."""
    return make_document([
        make_endpoint(
            "/api/v1/endpoint/{id}",
            payload="{\"result\":\"Data created.\"}"
        ),
        make_endpoint(
            "/api/v1/message/{name}",
            content_type="text/plain",
            payload="Hello, {{name}}!"
        ),
        make_endpoint(
            "/api/v1/users/{user_id}/orders/{order_id}",
            method="POST",
            status=201,
            payload={"user": "{{user_id}}", "order": "{{order_id}}"}
        ),
        make_endpoint(
            "/api/v1/health",
            content_type="text/plain",
            payload="ok"
        ),
    ])


@pytest.fixture
def sample_rule_set(sample_document) -> RuleSet:
    """The sample document compiled into a rule set."""
    return build_rule_set(sample_document)


@pytest.fixture
def config_store(sample_rule_set) -> ConfigStore:
    """A store holding the sample rule set."""
    return ConfigStore(sample_rule_set)


@pytest.fixture
def settings_path(temp_directory, sample_document):
    """A settings file containing the sample document."""
    path = temp_directory / "settings.json"
    path.write_text(json.dumps(sample_document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def server_config(settings_path) -> MockServerConfig:
    """Server configuration pointing at the temporary settings file."""
    return MockServerConfig(
        admin=AdminConfig(persist_updates=True),
        settings_file=settings_path
    )


@pytest.fixture
def upstream() -> UpstreamRecorder:
    """Recording upstream served through httpx.MockTransport."""
    return UpstreamRecorder()


@pytest.fixture
def app(server_config, config_store, upstream):
    """Mock server app wired to the sample store and the recording upstream."""
    return create_app(
        config=server_config,
        store=config_store,
        transport=httpx.MockTransport(upstream),
        configure_logging=False
    )


@pytest.fixture
def test_client(app):
    """Create a test client for the mock server app."""
    return TestClient(app)
