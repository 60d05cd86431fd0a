"""Meta Ad Library models package.

This package contains the Pydantic models used throughout the client,
organized by concern: stored credentials, search criteria, API envelopes
and ad records.
"""

from .ads import (
    AdArchiveRecord,
    DemographicDistribution,
    RangeValue,
    RegionDistribution,
    User,
)
from .api_responses import (
    GraphErrorPayload,
    PageEnvelope,
    Paging,
    PagingCursors,
    TokenExchangeResponse,
)
from .credentials import EXPIRY_WARNING_DAYS, CredentialRecord, CredentialState
from .query import (
    AD_DETAIL_FIELDS,
    DEFAULT_FIELDS,
    ActiveStatus,
    AdType,
    MediaType,
    Platform,
    QuerySpec,
)

__all__ = [
    # Ad records
    "AdArchiveRecord",
    "DemographicDistribution",
    "RangeValue",
    "RegionDistribution",
    "User",
    # API envelopes
    "GraphErrorPayload",
    "PageEnvelope",
    "Paging",
    "PagingCursors",
    "TokenExchangeResponse",
    # Credentials
    "EXPIRY_WARNING_DAYS",
    "CredentialRecord",
    "CredentialState",
    # Query
    "AD_DETAIL_FIELDS",
    "DEFAULT_FIELDS",
    "ActiveStatus",
    "AdType",
    "MediaType",
    "Platform",
    "QuerySpec",
]
