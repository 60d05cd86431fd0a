"""Thin Graph API client.

Every response goes through the same checks, in this order:

1. the ``X-App-Usage`` rate-quota signal (advisory, logged once);
2. an ``error`` object in the body, which Graph may send with any status;
3. a non-success HTTP status without such an object;
4. a body that is not JSON.

The access token is always sent as the ``access_token`` query parameter.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import APIError, TransportError
from ..models import GraphErrorPayload
from ..utils.security import sanitize_url
from .context import ApiContext
from .rate_limit import check_rate_limit

logger = logging.getLogger(__name__)


def decode_json(response: httpx.Response) -> Optional[Any]:
    """Parse the response body as JSON.

    :param response: HTTP response
    :return: Decoded value, or None when the body is empty or not JSON
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def error_payload(body: Any) -> Optional[Dict[str, Any]]:
    """Return the Graph ``error`` object when present and non-empty."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error:
            return error
    return None


def api_error_from_payload(
    payload: Dict[str, Any], response: httpx.Response
) -> APIError:
    """Build an :class:`APIError` from a Graph ``error`` object.

    Falls back to the raw mapping when the payload does not fit
    :class:`GraphErrorPayload` (e.g. a non-numeric code).
    """
    try:
        parsed = GraphErrorPayload.model_validate(payload).model_dump()
    except PydanticValidationError:
        parsed = payload
    error = APIError.from_payload(parsed, status_code=response.status_code)
    error.response_body = response.text
    return error


class GraphClient:
    """Issue authenticated GET requests against the Graph API.

    :param context: Settings, token and HTTP client for this invocation
    :type context: ApiContext
    """

    def __init__(self, context: ApiContext):
        self.context = context

    @property
    def base_url(self) -> str:
        return self.context.settings.graph_url

    def url_for(self, path_or_url: str) -> str:
        """Resolve a path against the versioned base; full URLs pass through."""
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    def request_url(
        self, path_or_url: str, params: Optional[Dict[str, str]] = None
    ) -> httpx.URL:
        """Build the URL to request, token included.

        Continuation URLs already carry every parameter; their query is kept
        as-is and only the token is added, and only when it is missing.

        :raises TransportError: If the URL cannot be parsed
        """
        url = self.url_for(path_or_url)
        try:
            target = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise TransportError(
                "malformed response body: invalid next-page URL",
                url=sanitize_url(url),
            ) from e
        if params is not None:
            return target.copy_merge_params(
                {**params, "access_token": self.context.token}
            )
        if target.params.get("access_token"):
            return target
        return target.copy_merge_params({"access_token": self.context.token})

    async def get(
        self, path_or_url: str, params: Optional[Dict[str, str]] = None
    ) -> Any:
        """GET a Graph path or a complete continuation URL.

        :param path_or_url: Path relative to the versioned base, or a full
            URL which is requested verbatim
        :param params: Query parameters; None for continuation URLs
        :return: Decoded JSON body
        :raises APIError: On an error payload or a non-success status
        :raises TransportError: On network failure, an unusable URL or a
            non-JSON body
        """
        target = self.request_url(path_or_url, params)
        safe_url = sanitize_url(str(target))
        logger.debug("GET %s", safe_url)

        try:
            response = await self.context.http.get(target)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"request timed out after {self.context.settings.request_timeout:g}s",
                url=safe_url,
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"request failed: {e}", url=safe_url) from e
        except httpx.InvalidURL as e:
            raise TransportError(
                "malformed response body: invalid next-page URL", url=safe_url
            ) from e

        check_rate_limit(
            response.headers, self.context.settings.rate_limit_warning_threshold
        )

        body = decode_json(response)
        payload = error_payload(body)
        if payload is not None:
            raise api_error_from_payload(payload, response)

        if response.status_code >= 400:
            raise APIError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                response_body=response.text,
            )

        if body is None:
            raise TransportError("malformed response body: not JSON", url=safe_url)

        logger.debug("HTTP %d from %s", response.status_code, safe_url)
        return body

    async def get_object(self, object_id: str, fields: List[str]) -> Dict[str, Any]:
        """Fetch a single Graph object by ID.

        :param object_id: Node ID, e.g. an ad archive ID
        :param fields: Fields to request
        :return: The object as a dict
        :raises TransportError: If the body is not a JSON object
        """
        params = {"fields": ",".join(fields)} if fields else {}
        body = await self.get(object_id, params)
        if not isinstance(body, dict):
            raise TransportError(
                "malformed response body: expected a JSON object",
                url=sanitize_url(self.url_for(object_id)),
            )
        return body
