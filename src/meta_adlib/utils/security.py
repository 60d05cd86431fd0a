"""Security utilities for redaction and secure logging.

Every Graph request carries the bearer token as a query parameter, and the
exchange call carries the application secret the same way. This module keeps
those values out of the diagnostic stream:

- Log sanitization and secure logging setup
- URL redaction for request logging
- Token masking for status output
"""

import logging
import re
import sys
from typing import Optional, TextIO

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"(?<=Bearer )[A-Za-z0-9_-]+", re.IGNORECASE),
    "meta_token": re.compile(r"\bEAA[A-Za-z0-9]{20,}"),
}

# Query parameters that must never be logged
SENSITIVE_PARAMS = (
    "access_token",
    "input_token",
    "fb_exchange_token",
    "client_secret",
    "appsecret_proof",
)

_PARAM_PATTERN = re.compile(
    r"((?:%s)=)[^&\s\"']+" % "|".join(SENSITIVE_PARAMS), re.IGNORECASE
)

# =============================================================================
# String and Log Sanitization
# =============================================================================


def sanitize_url(url: str) -> str:
    """Redact credential query parameters from a URL.

    :param url: URL to sanitize
    :type url: str
    :return: URL with sensitive parameter values replaced
    :rtype: str
    """
    if not url:
        return url
    return _PARAM_PATTERN.sub(r"\1<REDACTED>", url)


def sanitize_string(value: str) -> str:
    """Redact tokens embedded anywhere in a string.

    Credential query parameters are redacted first, then any bare token
    that matches a known shape.

    :param value: String to sanitize
    :type value: str
    :return: Sanitized string with sensitive data redacted
    :rtype: str
    """
    if not value:
        return value
    value = sanitize_url(value)
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        value = pattern.sub(f"<{pattern_name}:REDACTED>", value)
    return value


def mask_token(value: Optional[str]) -> str:
    """Mask a secret for display, keeping only its ends.

    :param value: Secret to mask
    :type value: Optional[str]
    :return: ``(not set)``, ``***`` for short values, or ``abcd...wxyz``
    :rtype: str
    """
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}...{value[-4:]}"


# =============================================================================
# Secure Logging Setup
# =============================================================================


class SanitizingFormatter(logging.Formatter):
    """Formatter that automatically sanitizes sensitive data.

    Custom logging formatter that removes tokens and secrets from the
    rendered log line, including values substituted from ``record.args``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with automatic sanitization.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log message
        :rtype: str
        """
        try:
            record.msg = sanitize_string(record.getMessage())
            record.args = None
        except (TypeError, ValueError) as e:
            print(f"Warning: Failed to sanitize log record: {e}", file=sys.stderr)

        return super().format(record)


class DiagnosticFormatter(SanitizingFormatter):
    """Terse ``warning: ...`` lines for the command-line diagnostic stream."""

    def __init__(self):
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        return f"{record.levelname.lower()}: {super().format(record)}"


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_secure_logging(
    level: str = "WARNING", stream: Optional[TextIO] = None, verbose: bool = False
) -> None:
    """Set up logging with automatic sanitization.

    Diagnostics always go to stderr so that stdout stays reserved for
    command output (tables and JSON). Uses a singleton pattern to prevent
    duplicate handlers.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    :param stream: Stream for the handler; defaults to ``sys.stderr``
    :type stream: Optional[TextIO]
    :param verbose: Use the timestamped format instead of the terse one
    :type verbose: bool
    :return: None
    :rtype: None
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logger = logging.getLogger(__name__)
        logger.debug("Logging already configured, skipping duplicate setup")
        return

    if verbose or level.upper() == "DEBUG":
        formatter: logging.Formatter = SanitizingFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = DiagnosticFormatter()
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,  # Override any existing configuration
    )

    # httpx logs every request URL (with the token) at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
