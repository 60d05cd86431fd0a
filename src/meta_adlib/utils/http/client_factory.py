"""HTTP client construction for a single command invocation.

There is no shared client registry: each command builds one
``httpx.AsyncClient``, threads it through an explicit context, and closes
it when the command finishes. Requests are issued strictly one at a time,
so the connection pool is kept small.
"""

import logging
from typing import Optional

import httpx

from ... import __version__
from ...config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": f"meta-adlib/{__version__}",
}


def create_timeout(seconds: float = 60.0) -> httpx.Timeout:
    """Create a timeout configuration object.

    The same fixed budget applies to connect, read, write and pool waits;
    there is no overall-operation timeout.

    :param seconds: Timeout in seconds for every phase of a request
    :type seconds: float
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(seconds)


def create_limits(
    max_keepalive_connections: int = 1,
    max_connections: int = 2,
    keepalive_expiry: float = 30.0,
) -> httpx.Limits:
    """Create a connection limits configuration object.

    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param keepalive_expiry: Keepalive connection expiry time in seconds
    :type keepalive_expiry: float
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    return httpx.Limits(
        max_keepalive_connections=max_keepalive_connections,
        max_connections=max_connections,
        keepalive_expiry=keepalive_expiry,
    )


def create_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build the HTTP client used for one command invocation.

    :param settings: Loaded settings (timeout is taken from here)
    :type settings: Settings
    :param transport: Optional transport, e.g. ``httpx.MockTransport`` in tests
    :type transport: Optional[httpx.AsyncBaseTransport]
    :return: A new, open client; the caller is responsible for closing it
    :rtype: httpx.AsyncClient
    """
    client_config = {
        "timeout": create_timeout(settings.request_timeout),
        "limits": create_limits(),
        "headers": DEFAULT_HEADERS,
        "follow_redirects": True,
    }
    if transport is not None:
        client_config["transport"] = transport

    logger.debug("Creating HTTP client (timeout=%ss)", settings.request_timeout)
    return httpx.AsyncClient(**client_config)
