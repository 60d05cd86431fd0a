"""HTTP utilities public API (barrel module).

This package provides:
- Timeout and limit helpers
- A factory for the per-invocation ``httpx.AsyncClient``

Recommended import pattern for consumers:
    from meta_adlib.utils.http import create_http_client
"""

from .client_factory import (
    DEFAULT_HEADERS,
    create_http_client,
    create_limits,
    create_timeout,
)

__all__ = [
    "DEFAULT_HEADERS",
    "create_http_client",
    "create_timeout",
    "create_limits",
]
