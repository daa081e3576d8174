import io
import json
import logging

import pytest

from config.startup_settings import StartupSettings
from observability.logging_config import REDACTED, StructuredFormatter, get_logger
from observability.metrics import (
    NullMetricsClient,
    RegistryMetricsClient,
    StdoutMetricsClient,
    get_metrics_client,
    reset_metrics_client,
)
from observability.timing import timed
from shiftreport.infra.safe_logging import mask_email, safe_log_text


def test_timed_records_ok_and_error_status(metrics):
    with timed("render"):
        pass
    with pytest.raises(RuntimeError):
        with timed("render"):
            raise RuntimeError("x")

    exported = metrics.export_prometheus()
    assert 'shift_report_stage_duration_ms_count{stage="render",status="ok"} 1' in exported
    assert 'shift_report_stage_duration_ms_count{stage="render",status="error"} 1' in exported
    assert 'shift_report_stage_duration_ms_bucket{stage="render",status="ok",le="+Inf"} 1' in exported


def test_stdout_client_writes_json_lines():
    stream = io.StringIO()
    StdoutMetricsClient(stream=stream).incr("requests", {"outcome": "sent"})

    line = json.loads(stream.getvalue())

    assert line["name"] == "shift_report.requests"
    assert line["tags"] == {"outcome": "sent"}


def test_counter_export(metrics):
    metrics.incr("requests", {"outcome": "sent"})
    metrics.incr("requests", {"outcome": "sent"})

    assert metrics.counter_value("requests", {"outcome": "sent"}) == 2
    assert 'shift_report_requests_total{outcome="sent"} 2.0' in metrics.export_prometheus()


def test_backend_selected_from_env(monkeypatch):
    reset_metrics_client()
    assert isinstance(get_metrics_client(), NullMetricsClient)

    reset_metrics_client()
    monkeypatch.setenv("METRICS_BACKEND", "prometheus")
    assert isinstance(get_metrics_client(), RegistryMetricsClient)
    reset_metrics_client()


def test_structured_formatter_merges_extra_fields():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.extra_fields = {"recipient": "j***@example.org"}

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["message"] == "hello world"
    assert payload["service"] == "shift_report"
    assert payload["recipient"] == "j***@example.org"


def test_logger_adapter_wraps_extra():
    logger = get_logger("shiftreport.test", component="tests")
    _, kwargs = logger.process("msg", {"extra": {"field": "email"}})
    assert kwargs["extra"] == {"extra_fields": {"component": "tests", "field": "email"}}


def test_safe_logging_helpers():
    assert mask_email("jefe@example.org") == "j***@example.org"
    assert mask_email("broken") == "<invalid>"
    assert safe_log_text("") == "<empty>"
    assert "Paciente" not in safe_log_text("Paciente en box 3")


class TestStartupSettings:
    def test_development_needs_nothing(self):
        StartupSettings().validate_runtime_contract()

    def test_unknown_environment_is_rejected(self):
        with pytest.raises(RuntimeError, match="SHIFTREPORT_ENV"):
            StartupSettings(SHIFTREPORT_ENV="staging").validate_runtime_contract()

    def test_production_requires_token(self):
        with pytest.raises(RuntimeError, match="SHIFTREPORT_API_TOKEN"):
            StartupSettings(SHIFTREPORT_ENV="production").validate_runtime_contract()

    def test_production_with_token_boots_without_mail(self):
        StartupSettings(SHIFTREPORT_ENV="production", SHIFTREPORT_API_TOKEN="t").validate_runtime_contract()


def test_credential_like_fields_are_redacted():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "login", (), None)
    record.extra_fields = {"smtp_password": "s3cret", "api_token": "t", "recipient": "j***@x.org"}

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["smtp_password"] == REDACTED
    assert payload["api_token"] == REDACTED
    assert payload["recipient"] == "j***@x.org"
