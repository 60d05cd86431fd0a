"""Bearer token resolution across the credential sources.

Resolution order, first non-empty token wins:

1. ``META_TOKEN`` environment variable (universal override, never warns)
2. This tool's own credential file (``meta-adlib auth set-token``)
3. The shared ``meta-auth`` credential file (``meta-auth login``)

A stored token that is expired or close to expiry is still returned; the
resolver only attaches a warning, which is also written to the diagnostic
stream.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.settings import Settings
from ..exceptions import UnauthenticatedError
from ..models import CredentialRecord, CredentialState
from .token_store import CredentialStore, create_local_store, create_shared_store

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED_MESSAGE = (
    "not authenticated, run: meta-auth login  (shared)\n"
    "or: meta-adlib auth set-token <token>  (local only)"
)


class TokenSource(str, Enum):
    """Where a resolved token came from."""

    ENVIRONMENT = "META_TOKEN env var"
    LOCAL = "own config"
    SHARED = "meta-auth shared config"


@dataclass
class ResolvedCredential:
    """Outcome of a successful resolution.

    :param token: Bearer token to send with every request
    :param source: Which source supplied the token
    :param record: Stored record for file sources, None for the env override
    :param warnings: Expiry warnings, empty when the token is healthy
    """

    token: str
    source: TokenSource
    record: Optional[CredentialRecord] = None
    warnings: List[str] = field(default_factory=list)


class CredentialResolver:
    """Apply the token priority chain and the expiry-warning policy.

    :param settings: Loaded settings (override token, warning threshold)
    :type settings: Settings
    :param local_store: This tool's credential store
    :type local_store: Optional[CredentialStore]
    :param shared_store: The read-only shared store
    :type shared_store: Optional[CredentialStore]
    """

    def __init__(
        self,
        settings: Settings,
        local_store: Optional[CredentialStore] = None,
        shared_store: Optional[CredentialStore] = None,
    ):
        self.settings = settings
        self.local_store = local_store or create_local_store(settings)
        self.shared_store = shared_store or create_shared_store(settings)

    def resolve(self, now: Optional[datetime] = None) -> ResolvedCredential:
        """Return the best available token.

        :param now: Reference time for expiry checks
        :return: The resolved credential with any expiry warnings
        :raises UnauthenticatedError: If no source yields a token
        :raises ConfigurationError: If a credential file exists but is unreadable
        """
        resolved = self.peek(now)
        if resolved is None:
            raise UnauthenticatedError(NOT_AUTHENTICATED_MESSAGE)

        logger.debug("Using token from %s", resolved.source.value)
        for warning in resolved.warnings:
            logger.warning(warning)
        return resolved

    def peek(self, now: Optional[datetime] = None) -> Optional[ResolvedCredential]:
        """Resolve without raising or logging.

        :param now: Reference time for expiry checks
        :return: The resolved credential, or None when nothing is configured
        """
        if self.settings.meta_token:
            return ResolvedCredential(
                token=self.settings.meta_token, source=TokenSource.ENVIRONMENT
            )

        record = self.local_store.load()
        if not record.is_empty:
            return ResolvedCredential(
                token=record.access_token,
                source=TokenSource.LOCAL,
                record=record,
                warnings=self._expiry_warnings(
                    record, now, label="token", refresh_cmd="meta-adlib auth refresh"
                ),
            )

        shared = self.shared_store.load()
        if not shared.is_empty:
            return ResolvedCredential(
                token=shared.access_token,
                source=TokenSource.SHARED,
                record=shared,
                warnings=self._expiry_warnings(
                    shared, now, label="meta-auth token", refresh_cmd="meta-auth refresh"
                ),
            )

        return None

    def describe_sources(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Summarize the credential sources, even when none holds a token.

        :param now: Reference time for expiry checks
        :return: Store paths, which source would win and its record
        """
        resolved = self.peek(now)
        return {
            "local_config": str(self.local_store.path),
            "shared_config": str(self.shared_store.path),
            "env_override": bool(self.settings.meta_token),
            "source": resolved.source.value if resolved else None,
            "record": resolved.record if resolved else None,
            "warnings": resolved.warnings if resolved else [],
        }

    def _expiry_warnings(
        self,
        record: CredentialRecord,
        now: Optional[datetime],
        label: str,
        refresh_cmd: str,
    ) -> List[str]:
        state = record.state(now, self.settings.expiry_warning_days)
        if state is CredentialState.EXPIRED:
            return [f"{label} has expired, run: {refresh_cmd}"]
        if state is CredentialState.EXPIRING_SOON:
            days = record.days_until_expiry(now)
            return [f"{label} expires in {days} day(s), run: {refresh_cmd}"]
        return []
