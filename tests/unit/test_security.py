"""Unit tests for redaction and secure logging."""

import io
import logging

import pytest

from meta_adlib.utils import security
from meta_adlib.utils.security import (
    DiagnosticFormatter,
    SanitizingFormatter,
    mask_token,
    sanitize_string,
    sanitize_url,
    setup_secure_logging,
)

TOKEN = "EAABsbCS1iHgBAKZCZBZAexampleexampleexample"


def test_sanitize_url_redacts_credentials():
    url = (
        "https://graph.facebook.com/v23.0/oauth/access_token?grant_type=fb_exchange_token"
        f"&client_id=123&client_secret=abc&fb_exchange_token={TOKEN}"
    )
    safe = sanitize_url(url)
    assert "abc" not in safe.split("client_secret=")[1]
    assert TOKEN not in safe
    assert "client_id=123" in safe
    assert "grant_type=fb_exchange_token" in safe


def test_sanitize_string_catches_bare_tokens():
    text = f"token {TOKEN} rejected"
    assert TOKEN not in sanitize_string(text)
    assert sanitize_string(text).startswith("token <meta_token:REDACTED>")


def test_mask_token():
    assert mask_token(None) == "(not set)"
    assert mask_token("short") == "***"
    assert mask_token("EAAB1234567890wxyz") == "EAAB...wxyz"


def test_sanitizing_formatter_covers_args():
    formatter = SanitizingFormatter("%(message)s")
    record = logging.LogRecord(
        "meta_adlib", logging.DEBUG, __file__, 1, "GET %s", (f"/me?access_token={TOKEN}",), None
    )
    assert TOKEN not in formatter.format(record)


def test_diagnostic_formatter_prefixes_level():
    record = logging.LogRecord(
        "meta_adlib", logging.WARNING, __file__, 1, "token expires in %d day(s)", (3,), None
    )
    assert DiagnosticFormatter().format(record) == "warning: token expires in 3 day(s)"
    assert record.levelname == "WARNING"


@pytest.fixture
def fresh_logging(monkeypatch):
    """Allow setup_secure_logging to run and restore the root logger afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    monkeypatch.setattr(security, "_LOGGING_CONFIGURED", False)
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_setup_secure_logging_writes_sanitized_diagnostics(fresh_logging):
    stream = io.StringIO()
    setup_secure_logging(level="WARNING", stream=stream)

    log = logging.getLogger("meta_adlib.test")
    log.info("hidden")
    log.warning("request failed for access_token=%s", TOKEN)

    output = stream.getvalue()
    assert "hidden" not in output
    assert output.startswith("warning: request failed")
    assert TOKEN not in output
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_secure_logging_runs_once(fresh_logging):
    first, second = io.StringIO(), io.StringIO()
    setup_secure_logging(stream=first)
    setup_secure_logging(stream=second)

    logging.getLogger("meta_adlib.test").warning("once")
    assert "once" in first.getvalue()
    assert second.getvalue() == ""
