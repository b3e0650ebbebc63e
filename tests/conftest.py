import logging

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_enrichment_pipeline
from app.main import app
from app.observability.telemetry import PipelineLogger, TelemetryConfig


@pytest.fixture
def client():
    """Test client without lifespan; pipelines are injected per test via overrides."""
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.pop(get_enrichment_pipeline, None)


@pytest.fixture
def pipeline_log(caplog: pytest.LogCaptureFixture) -> PipelineLogger:
    caplog.set_level(logging.DEBUG, logger="enrichment")
    return PipelineLogger(TelemetryConfig(format="text", logger_name="enrichment"))


def event_names(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [record.event["message"] for record in caplog.records if hasattr(record, "event")]


@pytest.fixture
def events(caplog: pytest.LogCaptureFixture):
    return lambda: event_names(caplog)
