"""Tests for structlog configuration."""

from collections.abc import Iterator

import pytest
import structlog

from herd_health.config import LoggingConfig
from herd_health.log import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


@pytest.mark.parametrize("fmt", ["json", "console"])
def test_configure_logging_selects_renderer(fmt: str) -> None:
    configure_logging(LoggingConfig(level="DEBUG", format=fmt))

    processors = structlog.get_config()["processors"]
    expected = structlog.processors.JSONRenderer if fmt == "json" else structlog.dev.ConsoleRenderer
    assert isinstance(processors[-1], expected)


def test_configured_logger_emits_events(caplog: pytest.LogCaptureFixture) -> None:
    configure_logging(LoggingConfig(level="INFO", format="json"))

    with caplog.at_level("INFO"):
        structlog.get_logger("herd_health.test").info("notification_added", notification_id="n1")

    assert any("notification_added" in record.getMessage() for record in caplog.records)
