"""Integration tests for the hot-edit admin endpoints."""

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from mockserver.config import AdminConfig, MockServerConfig
from mockserver.core.exceptions import SettingsWriteError
from mockserver.main import create_app
from tests.fixtures import make_document, make_endpoint

ADMIN = "/mockserver/admin"


class TestAdminRead:
    """Tests for reading the active configuration."""

    def test_get_config(self, test_client, sample_document):
        response = test_client.get(f"{ADMIN}/config")

        assert response.status_code == 200
        data = response.json()
        assert data["default_endpoint"] == sample_document["default_endpoint"]
        assert data["endpoints"] == sample_document["endpoints"]
        assert data["version"] == 1
        assert "updated_at" in data

    def test_get_endpoints(self, test_client, sample_document):
        response = test_client.get(f"{ADMIN}/endpoints")

        assert response.status_code == 200
        assert response.json() == sample_document["endpoints"]


class TestAdminUpdate:
    """Tests for replacing the active configuration."""

    def test_update_replaces_endpoints(self, test_client, upstream):
        document = make_document([
            make_endpoint("/v2/{thing}", content_type="text/plain", payload="new {{thing}}")
        ])

        response = test_client.post(f"{ADMIN}/update", json=document)

        assert response.status_code == 200
        assert response.json() == {"status": "updated", "version": 2, "endpoints": 1}
        assert test_client.get("/v2/widget").text == "new widget"

        # Old rules are gone, so the request is forwarded
        test_client.get("/api/v1/message/Ada")
        assert upstream.last.url.path == "/api/v1/message/Ada"

    def test_update_with_put(self, test_client):
        document = make_document([make_endpoint("/put", content_type="text/plain", payload="put")])

        response = test_client.put(f"{ADMIN}/config", json=document)

        assert response.status_code == 200
        assert test_client.get("/put").text == "put"

    def test_update_bare_endpoint_list(self, test_client, sample_document):
        response = test_client.post(
            f"{ADMIN}/update",
            json=[make_endpoint("/bare", content_type="text/plain", payload="bare")]
        )

        assert response.status_code == 200
        config = test_client.get(f"{ADMIN}/config").json()
        assert config["default_endpoint"] == sample_document["default_endpoint"]
        assert test_client.get("/bare").text == "bare"

    def test_update_persists_settings_file(self, test_client, settings_path):
        document = make_document([make_endpoint("/saved")], default_endpoint="http://saved:1")

        test_client.post(f"{ADMIN}/update", json=document)

        assert json.loads(settings_path.read_text(encoding="utf-8")) == document

    def test_update_duplicate_variable_rejected(self, test_client, settings_path):
        """A rejected edit keeps serving the previous endpoints unchanged."""
        original = settings_path.read_text(encoding="utf-8")
        document = make_document([
            make_endpoint("/fine"),
            make_endpoint("/bad/{x}/{x}"),
        ])

        response = test_client.post(f"{ADMIN}/update", json=document)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "duplicate_variable"
        assert data["endpoint_index"] == 1
        assert data["path"] == "/bad/{x}/{x}"

        assert test_client.get("/api/v1/message/Ada").text == "Hello, Ada!"
        assert test_client.get(f"{ADMIN}/config").json()["version"] == 1
        assert settings_path.read_text(encoding="utf-8") == original

    def test_update_validation_error(self, test_client):
        document = make_document([make_endpoint("/a", status=700)])

        response = test_client.post(f"{ADMIN}/update", json=document)

        assert response.status_code == 422
        data = response.json()
        assert data["detail"] == "Invalid configuration document"
        assert data["errors"][0]["loc"] == ["endpoints", 0, "status"]

    def test_update_invalid_json(self, test_client):
        response = test_client.post(
            f"{ADMIN}/update",
            content=b"{not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert "not valid JSON" in response.json()["detail"]

    def test_update_non_utf8_body(self, test_client):
        response = test_client.post(
            f"{ADMIN}/update",
            content=b'{"a": "\xff"}',
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert "not valid JSON" in response.json()["detail"]
        assert test_client.get(f"{ADMIN}/config").json()["version"] == 1

    @pytest.mark.parametrize("path,code", [
        ("/a/{x", "malformed_variable"),
        ("/a/pre{x}", "malformed_variable"),
        ("/a/{}", "malformed_variable"),
        ("/a//b", "empty_segment"),
    ])
    def test_update_malformed_variable_rejected(self, test_client, settings_path, path, code):
        original = settings_path.read_text(encoding="utf-8")
        document = make_document([make_endpoint("/fine"), make_endpoint(path)])

        response = test_client.post(f"{ADMIN}/update", json=document)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == code
        assert data["endpoint_index"] == 1
        assert data["path"] == path

        assert test_client.get("/api/v1/message/Ada").text == "Hello, Ada!"
        assert test_client.get(f"{ADMIN}/config").json()["version"] == 1
        assert settings_path.read_text(encoding="utf-8") == original

    def test_update_relative_path_rejected_before_compiling(self, test_client):
        document = make_document([make_endpoint("relative/{x}")])

        response = test_client.post(f"{ADMIN}/update", json=document)

        assert response.status_code == 422
        assert response.json()["errors"][0]["loc"] == ["endpoints", 0, "path"]
        assert test_client.get(f"{ADMIN}/config").json()["version"] == 1

    def test_update_applies_off_the_event_loop(self, app):
        service = app.state.configuration_service
        original_apply = service.apply
        calls = []

        def apply(payload):
            try:
                asyncio.get_running_loop()
                calls.append("event loop")
            except RuntimeError:
                calls.append("worker thread")
            return original_apply(payload)

        client = TestClient(app)
        with patch.object(service, "apply", side_effect=apply):
            response = client.post(
                f"{ADMIN}/update",
                json=make_document([make_endpoint("/threaded")])
            )

        assert response.status_code == 200
        assert calls == ["worker thread"]
        assert response.json()["version"] == 2

    def test_update_write_failure(self, test_client):
        document = make_document([make_endpoint("/unsaved")])

        with patch(
            "mockserver.services.configuration.write_settings_document",
            side_effect=SettingsWriteError("disk full")
        ):
            response = test_client.post(f"{ADMIN}/update", json=document)

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to write settings to file"}
        assert test_client.get(f"{ADMIN}/config").json()["version"] == 1
        assert test_client.get("/api/v1/message/Ada").text == "Hello, Ada!"


class TestAdminConfiguration:
    """Tests for admin interface settings."""

    def test_admin_disabled(self, settings_path, config_store, upstream):
        config = MockServerConfig(admin=AdminConfig(enabled=False), settings_file=settings_path)
        client = TestClient(create_app(
            config=config,
            store=config_store,
            transport=httpx.MockTransport(upstream),
            configure_logging=False
        ))

        client.get(f"{ADMIN}/config")

        assert upstream.last.url.path == f"{ADMIN}/config"

    def test_admin_custom_prefix(self, settings_path, config_store, upstream):
        config = MockServerConfig(admin=AdminConfig(prefix="/_admin/"), settings_file=settings_path)
        client = TestClient(create_app(
            config=config,
            store=config_store,
            transport=httpx.MockTransport(upstream),
            configure_logging=False
        ))

        response = client.get("/_admin/endpoints")

        assert response.status_code == 200
        assert len(response.json()) == 4

    def test_admin_persistence_disabled(self, settings_path, config_store, upstream):
        original = settings_path.read_text(encoding="utf-8")
        config = MockServerConfig(
            admin=AdminConfig(persist_updates=False),
            settings_file=settings_path
        )
        client = TestClient(create_app(
            config=config,
            store=config_store,
            transport=httpx.MockTransport(upstream),
            configure_logging=False
        ))

        response = client.post(f"{ADMIN}/update", json=make_document([make_endpoint("/a")]))

        assert response.status_code == 200
        assert settings_path.read_text(encoding="utf-8") == original
