"""gocancel log pipeline unit tests."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator
from typing import Any

import httpx
import pytest
import respx

from gocancel import ApiError, ClientConfig, HttpClient, configure_logging, get_logger, log
from gocancel.webhooks import WebhookError, generate_header, validate_payload

SECRET = "wh_sig_test_secret"


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger(log.ROOT_LOGGER)
    handlers = list(root.handlers)
    level = root.level
    renderer = log._PROCESSORS[-1]
    handler = log._handler
    yield
    root.handlers = handlers
    root.setLevel(level)
    log._PROCESSORS[-1] = renderer
    log._handler = handler


def _events(caplog: pytest.LogCaptureFixture) -> list[dict[str, Any]]:
    return [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name.startswith(log.ROOT_LOGGER)
    ]


def test_webhook_rejection_logs_error_code(caplog: pytest.LogCaptureFixture) -> None:
    """A rejected delivery is logged as JSON carrying its error code."""
    caplog.set_level(logging.DEBUG, logger=log.ROOT_LOGGER)
    with pytest.raises(WebhookError):
        validate_payload(b"{}", "t=", SECRET)

    events = _events(caplog)
    assert len(events) == 1
    assert events[0]["event"] == "webhook_rejected"
    assert events[0]["code"] == "INVALID_HEADER"
    assert events[0]["level"] == "debug"
    assert events[0]["logger"] == "gocancel.webhooks.payload"
    assert "timestamp" in events[0]


def test_webhook_rejection_log_omits_secret_material(caplog: pytest.LogCaptureFixture) -> None:
    """A signature mismatch logs the candidate count, never secrets or signatures."""
    caplog.set_level(logging.DEBUG, logger=log.ROOT_LOGGER)
    header = generate_header(b"{}", "other_secret")
    with pytest.raises(WebhookError):
        validate_payload(b"{}", header, SECRET)

    (event,) = _events(caplog)
    assert event["code"] == "NO_VALID_SIGNATURE"
    assert event["candidates"] == 1
    rendered = caplog.records[-1].getMessage()
    assert SECRET not in rendered
    assert header.split("v1=")[1] not in rendered


def test_stale_webhook_logs_signing_time(caplog: pytest.LogCaptureFixture) -> None:
    """A stale delivery logs TOO_OLD with the signing time from the header."""
    caplog.set_level(logging.DEBUG, logger=log.ROOT_LOGGER)
    with pytest.raises(WebhookError):
        validate_payload(b"{}", generate_header(b"{}", SECRET, timestamp=12345), SECRET)

    (event,) = _events(caplog)
    assert event["code"] == "TOO_OLD"
    assert event["signed_at"] == 12345


def test_successful_validation_logs_nothing(caplog: pytest.LogCaptureFixture) -> None:
    """Accepted deliveries produce no log events."""
    caplog.set_level(logging.DEBUG, logger=log.ROOT_LOGGER)
    validate_payload(b"{}", generate_header(b"{}", SECRET), SECRET)
    assert _events(caplog) == []


@respx.mock
async def test_api_error_logs_status_and_code(caplog: pytest.LogCaptureFixture) -> None:
    """An API error response is logged with its status and API error code."""
    caplog.set_level(logging.DEBUG, logger=log.ROOT_LOGGER)
    respx.get("https://app.gocxl.com/api/v1/letters/missing").mock(
        return_value=httpx.Response(404, json={"error": {"code": "not_found", "message": "x"}})
    )
    client = HttpClient(ClientConfig())
    with pytest.raises(ApiError):
        await client.do(client.new_request("GET", "api/v1/letters/missing"))

    request_event, error_event = _events(caplog)
    assert request_event["event"] == "api_request"
    assert request_event["method"] == "GET"
    assert error_event["event"] == "api_error"
    assert error_event["code"] == "API_ERROR"
    assert error_event["status_code"] == 404
    assert error_event["api_code"] == "not_found"


def test_configure_logging_json_stream() -> None:
    """configure_logging writes JSON lines for gocancel events to the given stream."""
    stream = io.StringIO()
    configure_logging(level="DEBUG", format="json", stream=stream)
    with pytest.raises(WebhookError):
        validate_payload(b"{}", "", SECRET)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["code"] == "NOT_SIGNED"


def test_configure_logging_text_stream() -> None:
    """The text format renders key=value pairs."""
    stream = io.StringIO()
    configure_logging(level="DEBUG", format="text", stream=stream)
    with pytest.raises(WebhookError):
        validate_payload(b"{}", "", SECRET)

    output = stream.getvalue()
    assert "webhook_rejected" in output
    assert "code=NOT_SIGNED" in output


def test_configure_logging_level_filters_debug_events() -> None:
    """At INFO level the DEBUG rejection events are dropped."""
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)
    with pytest.raises(WebhookError):
        validate_payload(b"{}", "", SECRET)
    assert stream.getvalue() == ""


def test_configure_logging_replaces_previous_handler() -> None:
    """Calling configure_logging twice leaves a single gocancel handler."""
    first, second = io.StringIO(), io.StringIO()
    configure_logging(level="DEBUG", stream=first)
    configure_logging(level="DEBUG", stream=second)
    with pytest.raises(WebhookError):
        validate_payload(b"{}", "", SECRET)
    assert first.getvalue() == ""
    assert "NOT_SIGNED" in second.getvalue()


def test_configure_logging_rejects_unknown_format() -> None:
    """An unknown format is rejected with ValueError."""
    with pytest.raises(ValueError):
        configure_logging(format="xml")


def test_application_logger_shares_pipeline(caplog: pytest.LogCaptureFixture) -> None:
    """Loggers from get_logger render bound context through the same pipeline."""
    caplog.set_level(logging.INFO, logger=log.ROOT_LOGGER)
    get_logger("gocancel.receiver").bind(endpoint="ep_1").info("delivery_accepted")

    (event,) = _events(caplog)
    assert event == {
        "event": "delivery_accepted",
        "endpoint": "ep_1",
        "logger": "gocancel.receiver",
        "level": "info",
        "timestamp": event["timestamp"],
    }
