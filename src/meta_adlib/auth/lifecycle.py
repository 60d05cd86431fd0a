"""Token validation, exchange and refresh.

Short-lived user tokens (about an hour) can be exchanged for long-lived ones
(about 60 days) through ``GET /oauth/access_token`` with
``grant_type=fb_exchange_token``, which needs the app ID and app secret.
Validation calls ``GET /me`` to learn who the token belongs to.

None of the methods here touch the credential files; callers decide what
to save.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..api.client import decode_json, error_payload
from ..config.settings import Settings
from ..exceptions import (
    AuthError,
    ConfigurationError,
    ExchangeError,
    TransportError,
    UnauthenticatedError,
)
from ..models import CredentialRecord, TokenExchangeResponse, User
from ..utils.security import sanitize_string

logger = logging.getLogger(__name__)

ME_PATH = "/me"
EXCHANGE_PATH = "/oauth/access_token"


@dataclass
class SetTokenResult:
    """Outcome of :meth:`TokenLifecycleManager.set_token`.

    :param record: Validated record, ready to be saved
    :param upgraded: Whether the token was exchanged for a long-lived one
    :param warnings: Non-fatal problems (a failed exchange)
    :param notes: Informational messages (exchange skipped)
    """

    record: CredentialRecord
    upgraded: bool = False
    warnings: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def require_app_credentials(
    app_id: Optional[str], app_secret: Optional[str]
) -> Tuple[str, str]:
    """Ensure both application secrets are present.

    :raises ConfigurationError: Naming the first missing variable
    """
    if not app_id:
        raise ConfigurationError(
            "META_APP_ID not set, export META_APP_ID=<your_app_id>",
            setting="META_APP_ID",
        )
    if not app_secret:
        raise ConfigurationError(
            "META_APP_SECRET not set, export META_APP_SECRET=<your_app_secret>",
            setting="META_APP_SECRET",
        )
    return app_id, app_secret


class TokenLifecycleManager:
    """Validate, exchange and refresh bearer tokens.

    :param settings: Loaded settings (endpoint and app secrets)
    :type settings: Settings
    :param http: Open async HTTP client
    :type http: httpx.AsyncClient
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http

    async def _get(self, path: str, params: dict) -> httpx.Response:
        url = f"{self.settings.graph_url}{path}"
        try:
            return await self.http.get(url, params=params)
        except httpx.RequestError as e:
            raise TransportError(
                f"request to {path} failed: {sanitize_string(str(e))}"
            ) from e

    async def validate(self, token: str) -> Tuple[str, str]:
        """Look up the identity a token belongs to.

        :param token: Bearer token to check
        :return: ``(user_id, user_name)``
        :raises AuthError: If the server rejects the token or the reply is unusable
        :raises TransportError: On network failure
        """
        response = await self._get(
            ME_PATH, {"fields": "id,name", "access_token": token}
        )
        body = decode_json(response)

        payload = error_payload(body)
        if payload is not None:
            raise AuthError(
                f"meta api error: {payload.get('message') or 'unknown error'}",
                details={"status_code": response.status_code},
            )
        if not isinstance(body, dict):
            raise AuthError(
                f"parsing /me response: unexpected body (HTTP {response.status_code})"
            )
        if response.status_code >= 400:
            raise AuthError(f"HTTP {response.status_code} from /me")

        try:
            user = User.model_validate(body)
        except PydanticValidationError as e:
            raise AuthError(f"parsing /me response: {e.errors()[0]['msg']}") from e

        logger.debug("Token belongs to %s (%s)", user.name, user.id)
        return user.id, user.name

    async def exchange(
        self,
        short_token: str,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[str, Optional[datetime]]:
        """Exchange a token for a long-lived one.

        :param short_token: Token to upgrade
        :param app_id: Meta app ID; defaults to ``META_APP_ID``
        :param app_secret: Meta app secret; defaults to ``META_APP_SECRET``
        :param now: Reference time for the absolute expiry
        :return: ``(long_token, expires_at)``; expiry is None when not reported
        :raises ConfigurationError: If an app secret is missing
        :raises ExchangeError: If the server refuses or returns no token
        :raises TransportError: On network failure
        """
        app_id, app_secret = require_app_credentials(
            app_id or self.settings.meta_app_id,
            app_secret or self.settings.meta_app_secret,
        )
        params = {
            "grant_type": "fb_exchange_token",
            "client_id": app_id,
            "client_secret": app_secret,
            "fb_exchange_token": short_token,
        }
        response = await self._get(EXCHANGE_PATH, params)
        body = decode_json(response)

        if not isinstance(body, dict):
            raise ExchangeError(
                "parsing token response: not a JSON object",
                response_body=sanitize_string(response.text[:500]),
            )
        payload = error_payload(body)
        if payload is not None:
            raise ExchangeError(
                f"meta api error: {payload.get('message') or 'unknown error'}"
            )

        try:
            result = TokenExchangeResponse.model_validate(body)
        except PydanticValidationError as e:
            raise ExchangeError(
                f"parsing token response: {e.errors()[0]['msg']}"
            ) from e
        if not result.access_token:
            raise ExchangeError(
                "no access_token in response",
                response_body=sanitize_string(response.text[:500]),
            )

        expires_at = None
        if result.expires_in and result.expires_in > 0:
            expires_at = (now or datetime.now(timezone.utc)) + timedelta(
                seconds=result.expires_in
            )
        logger.debug(
            "Exchanged token, expires %s",
            expires_at.isoformat() if expires_at else "unknown",
        )
        return result.access_token, expires_at

    async def refresh(
        self,
        record: CredentialRecord,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CredentialRecord:
        """Exchange a stored token for a fresh long-lived one.

        The stored identity is carried over unchanged.

        :param record: Currently stored record
        :return: New record for the caller to save
        :raises UnauthenticatedError: If ``record`` holds no token
        """
        app_id, app_secret = require_app_credentials(
            app_id or self.settings.meta_app_id,
            app_secret or self.settings.meta_app_secret,
        )
        if record.is_empty:
            raise UnauthenticatedError(
                "not authenticated, run: meta-adlib auth set-token <token>"
            )

        token, expires_at = await self.exchange(
            record.access_token, app_id, app_secret, now=now
        )
        return CredentialRecord.with_expiry(
            token,
            expires_at,
            user_id=record.user_id,
            user_name=record.user_name,
        )

    async def set_token(
        self,
        token: str,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None,
        no_extend: bool = False,
        now: Optional[datetime] = None,
    ) -> SetTokenResult:
        """Upgrade (when possible) and validate a user-supplied token.

        With both app secrets available and ``no_extend`` unset the token is
        first exchanged for a long-lived one. A failed exchange is not fatal:
        the original token is kept and a warning is recorded.

        :param token: Token pasted by the user
        :param no_extend: Skip the exchange even if app secrets are set
        :return: Validated record plus any warnings and notes
        :raises AuthError: If validation fails
        """
        token = token.strip()
        if not token:
            raise AuthError("token is empty")

        app_id = app_id or self.settings.meta_app_id
        app_secret = app_secret or self.settings.meta_app_secret
        result = SetTokenResult(record=CredentialRecord(access_token=token))
        expires_at = None

        if app_id and app_secret and not no_extend:
            try:
                token, expires_at = await self.exchange(
                    token, app_id, app_secret, now=now
                )
                result.upgraded = True
            except (ExchangeError, TransportError) as e:
                warning = f"could not upgrade to long-lived token: {e.message}"
                logger.warning(warning)
                result.warnings.append(warning)
        elif not no_extend:
            result.notes.append(
                "META_APP_ID / META_APP_SECRET not set, saving token as-is (not extended)"
            )

        user_id, user_name = await self.validate(token)
        result.record = CredentialRecord.with_expiry(
            token, expires_at, user_id=user_id, user_name=user_name
        )
        return result

    async def extend_token(
        self,
        short_token: str,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None,
        validate: bool = True,
        now: Optional[datetime] = None,
    ) -> CredentialRecord:
        """Exchange a token and optionally validate the result.

        :param short_token: Token to upgrade
        :param validate: Also look up the owner via ``/me``
        :return: Record holding the long-lived token
        :raises ConfigurationError: If an app secret is missing
        :raises ExchangeError: If the exchange fails
        """
        token, expires_at = await self.exchange(
            short_token.strip(), app_id, app_secret, now=now
        )
        user_id = user_name = None
        if validate:
            user_id, user_name = await self.validate(token)
        return CredentialRecord.with_expiry(
            token, expires_at, user_id=user_id, user_name=user_name
        )
