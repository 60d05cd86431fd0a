"""Validate search criteria and encode them as ``/ads_archive`` parameters.

Validation always happens before any request is made, and only the first
problem found is reported. List-valued filters are sent as compact JSON
array literals, e.g. ``ad_reached_countries=["US","DE"]``.
"""

import json
from enum import Enum
from typing import Dict, List, Optional, Sequence, Type

from ..exceptions import ValidationError
from ..models import ActiveStatus, AdType, MediaType, Platform, QuerySpec


def to_json_array(values: Sequence[str]) -> str:
    """Encode strings as a compact JSON array literal.

    :param values: Strings to encode
    :return: e.g. ``["US","DE"]``
    """
    return json.dumps(list(values), separators=(",", ":"), ensure_ascii=False)


def _normalize_enum(enum_cls: Type[Enum], value: str, field: str) -> str:
    """Match ``value`` case-insensitively against ``enum_cls``.

    :return: The canonical spelling
    :raises ValidationError: If no member matches
    """
    wanted = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == wanted:
            return member.value
    allowed = ", ".join(member.value for member in enum_cls)
    raise ValidationError(
        f"invalid {field} {value!r}, expected one of: {allowed}",
        field=field,
        value=value,
    )


def _clean(values: Optional[Sequence[str]]) -> List[str]:
    return [v.strip() for v in values or [] if v and v.strip()]


def validate_query(query: QuerySpec) -> None:
    """Check the invariants a query must satisfy.

    :param query: Search criteria
    :raises ValidationError: On the first violated rule
    """
    if not _clean(query.countries):
        raise ValidationError(
            "at least one country is required (e.g. --country US)", field="countries"
        )
    if not (query.search_terms and query.search_terms.strip()) and not _clean(query.page_ids):
        raise ValidationError(
            "search terms or at least one page ID is required", field="search_terms"
        )
    if query.limit < 0:
        raise ValidationError(
            "limit must be zero or positive", field="limit", value=query.limit
        )
    if query.page_size is not None and query.page_size <= 0:
        raise ValidationError(
            "page size must be positive", field="page_size", value=query.page_size
        )
    if not _clean(query.fields):
        raise ValidationError("at least one field is required", field="fields")


def build_params(query: QuerySpec) -> Dict[str, str]:
    """Validate ``query`` and encode it as query parameters.

    :param query: Search criteria
    :return: Parameters for ``GET /ads_archive`` (the token is added later)
    :raises ValidationError: If the criteria are incomplete or invalid
    """
    validate_query(query)

    ad_type = _normalize_enum(AdType, query.ad_type, "ad type")
    active_status = _normalize_enum(ActiveStatus, query.active_status, "active status")
    media_type = (
        _normalize_enum(MediaType, query.media_type, "media type")
        if query.media_type
        else None
    )
    platforms = [
        _normalize_enum(Platform, platform, "platform")
        for platform in _clean(query.platforms)
    ]

    params: Dict[str, str] = {
        "fields": ",".join(_clean(query.fields)),
        "ad_type": ad_type,
        "ad_active_status": active_status,
        "ad_reached_countries": to_json_array(_clean(query.countries)),
    }

    if query.search_terms and query.search_terms.strip():
        params["search_terms"] = query.search_terms
    page_ids = _clean(query.page_ids)
    if page_ids:
        params["search_page_ids"] = to_json_array(page_ids)
    if query.delivery_date_min:
        params["ad_delivery_date_min"] = query.delivery_date_min
    if query.delivery_date_max:
        params["ad_delivery_date_max"] = query.delivery_date_max
    if platforms:
        params["publisher_platforms"] = to_json_array(platforms)
    languages = _clean(query.languages)
    if languages:
        params["languages"] = to_json_array(languages)
    if media_type:
        params["ad_creative_media_type"] = media_type
    if query.page_size:
        params["limit"] = str(query.page_size)

    return params


def page_query(
    page_id: str,
    countries: Sequence[str],
    active_status: str = ActiveStatus.ALL.value,
    limit: int = 25,
    **criteria,
) -> QuerySpec:
    """Criteria listing the ads of a single Facebook Page.

    :param page_id: Page ID
    :param countries: Reached countries (required by the API)
    :param active_status: ``ALL`` or ``ACTIVE``
    :param limit: Maximum records to return
    :param criteria: Any other :class:`QuerySpec` field
    :return: Query restricted to ``page_id``
    """
    return QuerySpec(
        page_ids=[page_id],
        countries=list(countries),
        active_status=active_status,
        limit=limit,
        **criteria,
    )
