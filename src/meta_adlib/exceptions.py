"""Structured exception classes for the Meta Ad Library client."""

from typing import Any, Dict, Optional


class MetaAdLibError(Exception):
    """Base exception for all Meta Ad Library client errors.

    Every error the client raises on purpose derives from this class, so
    the command-line entry point can turn any of them into a single
    human-readable line and a non-zero exit code.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnauthenticatedError(MetaAdLibError):
    """Raised when no usable credential is found anywhere in the chain."""

    def __init__(self, message: str):
        """Initialize with the remediation message."""
        super().__init__(message=message, code="UNAUTHENTICATED")


class AuthError(MetaAdLibError):
    """Raised when the server rejects a token during identity validation.

    :param message: Description of the rejection, usually the server message
    :param details: Optional additional context about the failure
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize authentication error with message and optional details."""
        super().__init__(message=message, code="AUTH_ERROR", details=details)


class ExchangeError(MetaAdLibError):
    """Raised when a token exchange fails or returns no token.

    :param message: Description of the exchange failure
    :param response_body: Optional raw body returned by the exchange endpoint
    """

    def __init__(self, message: str, response_body: Optional[str] = None):
        """Initialize exchange error with message and optional body."""
        details = {}
        if response_body:
            details["response_body"] = response_body
        super().__init__(message=message, code="EXCHANGE_ERROR", details=details)
        self.response_body = response_body


class TransportError(MetaAdLibError):
    """Raised for network-level failures and unreadable response bodies.

    :param message: Description of the transport failure
    :param url: Optional (sanitized) URL of the failed request
    """

    def __init__(self, message: str, url: Optional[str] = None):
        """Initialize transport error with message and optional URL."""
        details = {}
        if url:
            details["url"] = url
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)


class APIError(MetaAdLibError):
    """Raised for Graph API errors.

    Covers both structured ``error`` payloads in the response body and
    plain non-success HTTP statuses.

    :param message: Description of the API error
    :param status_code: Optional HTTP status code from the API response
    :param response_body: Optional response body from the failed request
    :param error_code: Optional Graph API error code
    :param error_subcode: Optional Graph API error subcode
    :param error_type: Optional Graph API error type (e.g. ``OAuthException``)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        error_code: Optional[int] = None,
        error_subcode: Optional[int] = None,
        error_type: Optional[str] = None,
    ):
        """Initialize API error with message and optional response details."""
        details: Dict[str, Any] = {}
        if status_code:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body
        if error_code:
            details["error_code"] = error_code
        if error_subcode:
            details["error_subcode"] = error_subcode
        if error_type:
            details["error_type"] = error_type
        super().__init__(message=message, code="API_ERROR", details=details)
        self.status_code = status_code
        self.response_body = response_body
        self.error_code = error_code
        self.error_subcode = error_subcode
        self.error_type = error_type

    @classmethod
    def from_payload(
        cls, payload: Dict[str, Any], status_code: Optional[int] = None
    ) -> "APIError":
        """Build an error from a Graph ``error`` object.

        :param payload: The value of the ``error`` key in the response body
        :param status_code: HTTP status the payload arrived with
        :return: Populated APIError
        """
        code = payload.get("code") or 0
        subcode = payload.get("error_subcode") or 0
        text = payload.get("message") or "unknown error"
        if subcode:
            message = f"meta api error {code} (subcode {subcode}): {text}"
        else:
            message = f"meta api error {code}: {text}"
        return cls(
            message,
            status_code=status_code,
            error_code=code or None,
            error_subcode=subcode or None,
            error_type=payload.get("type"),
        )


class ConfigurationError(MetaAdLibError):
    """Raised for configuration-related errors.

    This exception is raised when a required setting is missing, or when a
    credential file cannot be read or written.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        """Initialize configuration error with message and optional setting."""
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class ValidationError(MetaAdLibError):
    """Raised when a query specification is malformed or incomplete.

    Always raised before any network call is attempted.

    :param message: Description of the validation error
    :param field: Optional name of the field that failed validation
    :param value: Optional value that caused the validation failure
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
    ):
        """Initialize validation error with message and optional field/value."""
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message=message, code="VALIDATION_ERROR", details=details)
        self.field = field
