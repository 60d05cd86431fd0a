"""Cursor pagination over Graph list endpoints.

Pages are requested strictly one after another. The first request is built
from the caller's parameters; every following request uses the server's
``paging.next`` URL as-is, since it already carries the full query. Results
keep server order and are only ever truncated, never reordered. Any failure
aborts the whole fetch and no partial result is returned.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import TransportError, ValidationError
from ..models import PageEnvelope
from .client import GraphClient
from .context import ApiContext

logger = logging.getLogger(__name__)

ADS_ARCHIVE_PATH = "/ads_archive"
PAGE_SIZE_PARAM = "limit"


class Paginator:
    """Aggregate the pages of a list endpoint.

    :param context: Settings, token and HTTP client for this invocation
    :type context: ApiContext
    :param path: Endpoint path relative to the versioned base
    :type path: str
    """

    def __init__(self, context: ApiContext, path: str = ADS_ARCHIVE_PATH):
        self.context = context
        self.path = path
        self.client = GraphClient(context)

    async def pages(self, params: Dict[str, str]) -> AsyncIterator[PageEnvelope]:
        """Yield pages until the server stops returning a ``next`` link.

        :param params: Encoded query parameters for the first request
        """
        first = dict(params)
        first.setdefault(PAGE_SIZE_PARAM, str(self.context.settings.default_page_size))

        body = await self.client.get(self.path, first)
        page_number = 1
        while True:
            page = self._parse_page(body)
            yield page

            next_url = page.next_url
            if not next_url:
                return
            page_number += 1
            logger.debug("Requesting page %d", page_number)
            body = await self.client.get(next_url)

    async def fetch(self, params: Dict[str, str], limit: int = 0) -> List[Dict[str, Any]]:
        """Collect records across pages.

        :param params: Encoded query parameters (see :func:`~meta_adlib.api.query.build_params`)
        :param limit: Maximum records to return; 0 means every page
        :return: Records in server order, truncated to ``limit``
        :raises ValidationError: If ``limit`` is negative
        :raises APIError: On any error response
        :raises TransportError: On network failure or a malformed page
        """
        if limit < 0:
            raise ValidationError("limit must be zero or positive", field="limit", value=limit)

        records: List[Dict[str, Any]] = []
        pages = self.pages(params)
        try:
            async for page in pages:
                records.extend(page.data)
                logger.debug(
                    "Fetched %d records (%d total)", len(page.data), len(records)
                )
                if limit > 0 and len(records) >= limit:
                    return records[:limit]
        finally:
            await pages.aclose()
        return records

    def _parse_page(self, body: Any) -> PageEnvelope:
        if not isinstance(body, dict):
            raise TransportError("malformed response body: expected a JSON object")
        try:
            return PageEnvelope.model_validate(body)
        except PydanticValidationError as e:
            raise TransportError(
                f"malformed response body: {e.errors()[0]['msg']}"
            ) from e
