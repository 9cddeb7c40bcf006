"""
Pytest configuration and shared fixtures.

This file contains pytest configuration and fixtures that are available
to all test modules in the project.
"""

import io
import logging
import os
import tempfile
from pathlib import Path
import pytest

# Import all fixtures from the fixtures module
from tests.fixtures import *


def pytest_configure(config):
    """Configure pytest settings."""
    # Register custom markers
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise the HTTP surface"
    )
    config.addinivalue_line(
        "markers", "routing: Pattern compilation, matching and templating tests"
    )
    config.addinivalue_line(
        "markers", "admin: Hot-edit admin interface tests"
    )
    config.addinivalue_line(
        "markers", "proxy: Upstream forwarding tests"
    )
    config.addinivalue_line(
        "markers", "config: Configuration-related tests"
    )
    config.addinivalue_line(
        "markers", "concurrency: Tests that run readers and writers in parallel"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location and content."""
    for item in items:
        # Mark tests based on file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        # Mark tests based on function name patterns
        if any(word in item.name for word in ("pattern", "match", "template", "rule")):
            item.add_marker(pytest.mark.routing)

        if "admin" in item.name or "update" in item.name:
            item.add_marker(pytest.mark.admin)

        if "forward" in item.name or "upstream" in item.name or "proxy" in item.name:
            item.add_marker(pytest.mark.proxy)

        if "config" in item.name or "settings" in item.name:
            item.add_marker(pytest.mark.config)

        if "concurrent" in item.name or "thread" in item.name:
            item.add_marker(pytest.mark.concurrency)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up the test environment before any tests run."""
    os.environ["MOCKSERVER_ENVIRONMENT"] = "test"

    yield

    os.environ.pop("MOCKSERVER_ENVIRONMENT", None)


@pytest.fixture
def temp_directory():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def capture_logs():
    """Capture log output during tests."""
    log_buffer = io.StringIO()

    handler = logging.StreamHandler(log_buffer)
    handler.setLevel(logging.DEBUG)

    # The mockserver logger may have propagate disabled after setup_logging
    loggers = [logging.getLogger(), logging.getLogger("mockserver")]
    original_levels = [logger.level for logger in loggers]
    for logger in loggers:
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

    yield log_buffer

    for logger, level in zip(loggers, original_levels):
        logger.removeHandler(handler)
        logger.setLevel(level)
