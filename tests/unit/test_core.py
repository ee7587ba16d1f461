import json
import logging
import sys
from unittest.mock import MagicMock, patch

from fastapi import FastAPI

from rankfeed.config.logging import JsonFormatter
from rankfeed.core.exceptions import (
    DependencyUnavailableError,
    NotFoundError,
    ValidationError,
)
from rankfeed.core.telemetry import setup_telemetry


class TestExceptions:
    def test_validation_error_names_field(self):
        exc = ValidationError("userId is required", details={"field": "userId"})

        assert exc.status_code == 400
        assert exc.to_dict() == {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "userId is required",
                "details": {"field": "userId"},
            }
        }

    def test_not_found(self):
        exc = NotFoundError("Feed", "f1")
        assert exc.status_code == 404
        assert exc.to_dict()["error"]["details"] == {"resource": "Feed", "identifier": "f1"}

    def test_dependency_error_hides_cause(self):
        exc = DependencyUnavailableError("user-service", "HTTP 503 on /users/u/following")
        exc.with_operation("feed generation")

        body = json.dumps(exc.to_dict())
        assert exc.status_code == 500
        assert "user-service" not in body
        assert "503" not in body
        assert exc.to_dict()["error"]["message"] == "Failed to process feed generation"
        # Logs get the full picture
        assert "user-service" in str(exc)
        assert "HTTP 503" in str(exc)


class TestJsonFormatter:
    def make_record(self, **extra):
        record = logging.LogRecord(
            name="rankfeed.test",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg="Feed generation aborted",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_context_fields(self):
        output = JsonFormatter().format(
            self.make_record(dependency="content-service", user_id="u1")
        )

        data = json.loads(output)
        assert data["level"] == "ERROR"
        assert data["message"] == "Feed generation aborted"
        assert data["dependency"] == "content-service"
        assert data["user_id"] == "u1"
        assert "cluster" not in data

    def test_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = self.make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestTelemetry:
    @patch("rankfeed.core.telemetry.get_settings")
    @patch("rankfeed.core.telemetry.Instrumentator")
    def test_setup_telemetry_prometheus_enabled(self, mock_instrumentator, mock_get_settings):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = True
        mock_settings.ENABLE_OTEL = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_instrumentator.assert_called_once()
        mock_instrumentator.return_value.instrument.assert_called_once_with(app)

    @patch("rankfeed.core.telemetry.get_settings")
    @patch("rankfeed.core.telemetry.trace")
    @patch("rankfeed.core.telemetry.BatchSpanProcessor")
    @patch("rankfeed.core.telemetry.OTLPSpanExporter")
    @patch("rankfeed.core.telemetry.FastAPIInstrumentor")
    def test_setup_telemetry_otel_enabled(
        self, mock_fastapi_instr, mock_exporter, mock_processor, mock_trace, mock_get_settings
    ):
        mock_settings = MagicMock()
        mock_settings.ENABLE_PROMETHEUS = False
        mock_settings.ENABLE_OTEL = True
        mock_settings.APP_NAME = "test"
        mock_settings.APP_VERSION = "1.0"
        mock_settings.DEBUG = False
        mock_get_settings.return_value = mock_settings

        app = FastAPI()
        setup_telemetry(app)

        mock_fastapi_instr.instrument_app.assert_called_once()
        mock_processor.assert_called_once_with(mock_exporter.return_value)
        mock_trace.set_tracer_provider.assert_called_once()
