"""Credential record model and lifecycle state.

The on-disk credential file holds exactly the fields of
:class:`CredentialRecord`. Expiry is stored as unix seconds; everything
derived from it (days left, expired, state) is computed from the wall clock
on each read and never stored.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EXPIRY_WARNING_DAYS = 7


class CredentialState(str, Enum):
    """Lifecycle state of a stored credential."""

    NO_CREDENTIAL = "no_credential"
    UNVALIDATED = "unvalidated"
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


class CredentialRecord(BaseModel):
    """A persisted bearer token and the identity it belongs to.

    :param access_token: Opaque bearer secret; empty means "no credential"
    :type access_token: str
    :param user_id: Owner identifier returned by ``/me``
    :type user_id: Optional[str]
    :param user_name: Owner display name returned by ``/me``
    :type user_name: Optional[str]
    :param token_expires_at: Absolute expiry in unix seconds, None if unknown
    :type token_expires_at: Optional[int]
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    token_expires_at: Optional[int] = Field(
        None, description="Unix seconds; None means unknown or non-expiring"
    )

    @field_validator("token_expires_at", mode="before")
    @classmethod
    def zero_is_unknown(cls, v: Any) -> Optional[int]:
        """Files written by other tools use ``0`` for unknown expiry."""
        if v in (None, "", 0, "0"):
            return None
        return int(v)

    @field_validator("access_token", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> str:
        return v or ""

    @classmethod
    def with_expiry(
        cls,
        access_token: str,
        expires_at: Optional[datetime],
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
    ) -> "CredentialRecord":
        """Build a record from an absolute ``datetime`` expiry."""
        return cls(
            access_token=access_token,
            user_id=user_id,
            user_name=user_name,
            token_expires_at=int(expires_at.timestamp()) if expires_at else None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.access_token

    @property
    def expires_at(self) -> Optional[datetime]:
        """Absolute expiry as an aware datetime, or None when unknown."""
        if not self.token_expires_at:
            return None
        return datetime.fromtimestamp(self.token_expires_at, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Whether a known expiry has already passed.

        :param now: Reference time; defaults to the current UTC time
        :return: False when expiry is unknown
        """
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return _now(now) > expires_at

    def days_until_expiry(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days left before expiry.

        :param now: Reference time; defaults to the current UTC time
        :return: None when unknown, 0 when already expired, else floor(days)
        """
        expires_at = self.expires_at
        if expires_at is None:
            return None
        remaining = expires_at - _now(now)
        if remaining < timedelta(0):
            return 0
        return remaining // timedelta(days=1)

    def state(
        self,
        now: Optional[datetime] = None,
        warning_days: int = EXPIRY_WARNING_DAYS,
    ) -> CredentialState:
        """Compute the lifecycle state from the wall clock.

        :param now: Reference time; defaults to the current UTC time
        :param warning_days: Threshold for :attr:`CredentialState.EXPIRING_SOON`
        :return: Current state of this record
        """
        if self.is_empty:
            return CredentialState.NO_CREDENTIAL
        if self.is_expired(now):
            return CredentialState.EXPIRED
        days = self.days_until_expiry(now)
        if days is not None and days <= warning_days:
            return CredentialState.EXPIRING_SOON
        if not self.user_id:
            return CredentialState.UNVALIDATED
        return CredentialState.VALID

    def to_file_dict(self) -> Dict[str, Any]:
        """Serialize for the credential file, omitting absent fields."""
        return self.model_dump(exclude_none=True)
