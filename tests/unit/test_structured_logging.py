"""Tests for structured pipeline logging."""

import logging

import pytest

from backend.app.utils.logging import StructuredPipelineLogger


def test_successful_attempt_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="backend.app.utils.logging"):
        StructuredPipelineLogger().log_provider_attempt("otp_transmodel", "success", 123.456, result_count=3)

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.structured == {
        "provider": "otp_transmodel",
        "outcome": "success",
        "latency_ms": 123.46,
        "result_count": 3,
    }


def test_failed_attempt_logged_at_warning_with_detail(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="backend.app.utils.logging"):
        StructuredPipelineLogger().log_provider_attempt("otp_plan", "http_status", 40.0, detail="HTTP 502")

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.structured["detail"] == "HTTP 502"


def test_search_outcome(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="backend.app.utils.logging"):
        StructuredPipelineLogger().log_search_outcome("Ibirapuera Park", "static_fallback", 3, "fastest")

    assert caplog.records[-1].structured["provenance"] == "static_fallback"
    assert "static_fallback" in caplog.text
