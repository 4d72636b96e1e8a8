"""Unit tests for macvendor.events and macvendor.logging_config."""

from __future__ import annotations

import structlog
from structlog.testing import capture_logs

from macvendor.config import LoggingSettings
from macvendor.events import EventCode, EventLevel, StructlogEventSink
from macvendor.logging_config import configure_logging


class TestStructlogEventSink:
    def test_levels_map_to_log_methods(self) -> None:
        sink = StructlogEventSink(structlog.get_logger())
        with capture_logs() as logs:
            sink.emit(EventLevel.DEBUG, EventCode.CYCLE_STARTED, "started")
            sink.emit(EventLevel.WARN, EventCode.LOCK_UNAVAILABLE, "busy")
            sink.emit(EventLevel.FATAL, EventCode.LOAD_FAILED, "dead")
        assert [entry["log_level"] for entry in logs] == ["debug", "warning", "critical"]
        assert logs[0]["code"] == 1000
        assert logs[1]["detail"] == "busy"

    def test_cause_attached(self) -> None:
        sink = StructlogEventSink(structlog.get_logger())
        error = RuntimeError("boom")
        with capture_logs() as logs:
            sink.emit(EventLevel.ERROR, EventCode.DOWNLOAD_FAILED, "failed", error)
        assert logs[0]["exc_info"] is error
        assert logs[0]["code"] == 2000


class TestConfigureLogging:
    def test_json_and_text(self) -> None:
        try:
            configure_logging(LoggingSettings(level="DEBUG", format="json"))
            assert structlog.is_configured()
            configure_logging(LoggingSettings(level="ERROR", format="text"))
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()
