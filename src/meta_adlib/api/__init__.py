"""Graph API access: query encoding, requests and pagination."""

from .client import GraphClient
from .context import ApiContext
from .pagination import ADS_ARCHIVE_PATH, Paginator
from .query import build_params, page_query, to_json_array, validate_query
from .rate_limit import RateQuotaSignal, check_rate_limit, parse_app_usage

__all__ = [
    "ADS_ARCHIVE_PATH",
    "ApiContext",
    "GraphClient",
    "Paginator",
    "RateQuotaSignal",
    "build_params",
    "check_rate_limit",
    "page_query",
    "parse_app_usage",
    "to_json_array",
    "validate_query",
]
