"""Per-invocation API context.

Everything a request needs (settings, the resolved bearer token and the
open HTTP client) travels in one explicit value instead of module globals.
It is built once per command after the token is resolved, and is read-only
from then on.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from ..config.settings import Settings
from ..utils.http import create_http_client


@dataclass(frozen=True)
class ApiContext:
    """Settings, token and HTTP client for one command invocation.

    :param settings: Loaded settings
    :param token: Resolved bearer token
    :param http: Open async HTTP client, owned by the caller
    """

    settings: Settings
    token: str
    http: httpx.AsyncClient

    @classmethod
    def create(
        cls,
        settings: Settings,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ApiContext":
        """Build a context with a fresh HTTP client.

        :param settings: Loaded settings
        :param token: Resolved bearer token
        :param transport: Optional transport override (tests)
        :return: New context; close it with :meth:`aclose`
        """
        return cls(
            settings=settings,
            token=token,
            http=create_http_client(settings, transport=transport),
        )

    async def aclose(self) -> None:
        if not self.http.is_closed:
            await self.http.aclose()

    async def __aenter__(self) -> "ApiContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
