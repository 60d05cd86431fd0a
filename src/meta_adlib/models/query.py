"""Search criteria for the ``/ads_archive`` endpoint.

:class:`QuerySpec` holds the criteria exactly as the user supplied them
(free-text enumeration values included). Validation and encoding happen in
:mod:`meta_adlib.api.query`, so an invalid query can be constructed and is
rejected there with a :class:`~meta_adlib.exceptions.ValidationError`.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

# All available fields for /ads_archive (funding_entity deprecated since v13)
DEFAULT_FIELDS: List[str] = [
    "id",
    "ad_creation_time",
    "ad_delivery_start_time",
    "ad_delivery_stop_time",
    "ad_creative_bodies",
    "ad_creative_link_titles",
    "ad_creative_link_captions",
    "ad_snapshot_url",
    "page_id",
    "page_name",
    "publisher_platforms",
    "languages",
    "spend",
    "impressions",
    "currency",
]

AD_DETAIL_FIELDS: List[str] = [
    "id",
    "ad_creation_time",
    "ad_delivery_start_time",
    "ad_delivery_stop_time",
    "ad_creative_bodies",
    "ad_creative_image_urls",
    "ad_creative_link_captions",
    "ad_creative_link_descriptions",
    "ad_creative_link_titles",
    "ad_snapshot_url",
    "page_id",
    "page_name",
    "publisher_platforms",
    "languages",
    "spend",
    "impressions",
    "currency",
    "bylines",
    "region_distribution",
    "demographic_distribution",
]


class AdType(str, Enum):
    """Ad classification filter."""

    ALL = "ALL"
    POLITICAL_AND_ISSUE_ADS = "POLITICAL_AND_ISSUE_ADS"


class ActiveStatus(str, Enum):
    """Delivery status filter."""

    ALL = "ALL"
    ACTIVE = "ACTIVE"


class MediaType(str, Enum):
    """Creative media type filter."""

    ALL = "ALL"
    IMAGE = "IMAGE"
    MEME = "MEME"
    VIDEO = "VIDEO"
    NONE = "NONE"


class Platform(str, Enum):
    """Publisher platforms an ad can run on."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    AUDIENCE_NETWORK = "audience_network"
    MESSENGER = "messenger"
    THREADS = "threads"


class QuerySpec(BaseModel):
    """Structured search criteria.

    :param search_terms: Free text matched against ad creative text
    :param page_ids: Facebook Page IDs to restrict the search to
    :param ad_type: ``ALL`` or ``POLITICAL_AND_ISSUE_ADS``
    :param active_status: ``ALL`` or ``ACTIVE``
    :param countries: ISO 3166 codes of reached countries (required)
    :param delivery_date_min: Inclusive lower delivery date, ``YYYY-MM-DD``
    :param delivery_date_max: Inclusive upper delivery date, ``YYYY-MM-DD``
    :param platforms: Publisher platform filter
    :param languages: ISO 639-1 language filter
    :param media_type: Creative media type filter
    :param fields: Fields requested for every record
    :param limit: Maximum records to return; 0 fetches every page
    :param page_size: Records per page sent as the ``limit`` parameter
    """

    search_terms: Optional[str] = None
    page_ids: List[str] = Field(default_factory=list)
    ad_type: str = AdType.ALL.value
    active_status: str = ActiveStatus.ALL.value
    countries: List[str] = Field(default_factory=list)
    delivery_date_min: Optional[str] = None
    delivery_date_max: Optional[str] = None
    platforms: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    media_type: Optional[str] = None
    fields: List[str] = Field(default_factory=lambda: list(DEFAULT_FIELDS))
    limit: int = 25
    page_size: Optional[int] = None
