"""Shared test fixtures for playback metrics."""

from __future__ import annotations

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def env_override() -> Generator[None, None, None]:
    """Override environment variables for test isolation."""
    overrides = {
        "APP_ENV": "development",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "INCLUDE_PROCESS_METRICS": "false",
    }
    for key, val in overrides.items():
        os.environ[key] = val
    os.environ.pop("API_KEY", None)
    yield
    for key in overrides:
        os.environ.pop(key, None)


@pytest.fixture
def config() -> "Settings":
    """Create a test Settings instance."""
    from playback_metrics.config import Settings
    return Settings()


@pytest.fixture
def metrics_registry() -> "PlaybackMetricsRegistry":
    """A fresh registry backed by its own CollectorRegistry."""
    from playback_metrics.metrics.registry import PlaybackMetricsRegistry
    return PlaybackMetricsRegistry()


@pytest.fixture
def recorder(metrics_registry) -> "PlaybackMetricsRecorder":
    """Recorder bound to the fresh registry."""
    from playback_metrics.metrics.recorder import PlaybackMetricsRecorder
    return PlaybackMetricsRecorder(metrics_registry)


@pytest.fixture
def app(config):
    """Full application built from the test settings."""
    from playback_metrics.main import create_app
    return create_app(config)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Test client that runs the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client
