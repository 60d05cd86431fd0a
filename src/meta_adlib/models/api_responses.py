"""Graph API response envelopes.

These models describe the JSON shapes the client consumes: list pages,
error payloads, and the token endpoints. Records inside a page are kept as
opaque dicts; parsing them into :class:`~meta_adlib.models.ads.AdArchiveRecord`
is the presentation layer's job.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PagingCursors(BaseModel):
    """Opaque before/after cursors."""

    before: Optional[str] = None
    after: Optional[str] = None


class Paging(BaseModel):
    """Continuation descriptor of a list response.

    ``next`` is a complete request URL, including every query parameter of
    the original request and the access token.
    """

    cursors: Optional[PagingCursors] = None
    next: Optional[str] = None
    previous: Optional[str] = None


class PageEnvelope(BaseModel):
    """One page of a list endpoint such as ``/ads_archive``.

    :param data: Records in server emission order
    :type data: List[Dict[str, Any]]
    :param paging: Continuation descriptor; absent on the last page
    :type paging: Optional[Paging]
    """

    model_config = ConfigDict(extra="ignore")

    data: List[Dict[str, Any]] = Field(default_factory=list)
    paging: Optional[Paging] = None

    @property
    def next_url(self) -> Optional[str]:
        """Next-page locator, or None when the result set is exhausted."""
        if self.paging is None:
            return None
        return self.paging.next or None


class GraphErrorPayload(BaseModel):
    """The ``error`` object Graph embeds in a response body."""

    model_config = ConfigDict(extra="allow")

    code: int = 0
    message: str = ""
    type: Optional[str] = None
    error_subcode: Optional[int] = None
    fbtrace_id: Optional[str] = None


class TokenExchangeResponse(BaseModel):
    """Body of ``GET /oauth/access_token``."""

    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = Field(None, description="Seconds until expiry")
