"""Ad Library record models.

Records returned by ``/ads_archive`` carry many optional fields, and which
ones are present depends on the ``fields`` parameter of the request. JSON
output always uses the raw record dicts; these models back the table and
detail views. Unknown keys are kept as extras.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RangeValue(BaseModel):
    """An estimated range, as used for spend and impressions.

    Meta returns ``{"lower_bound": "N", "upper_bound": "M"}`` with string
    bounds; either bound may be missing for open-ended ranges.
    """

    lower_bound: Optional[str] = None
    upper_bound: Optional[str] = None

    def __str__(self) -> str:
        lower = self.lower_bound or ""
        upper = self.upper_bound or ""
        if lower == upper:
            return lower or "-"
        return f"{lower}–{upper}"


class RegionDistribution(BaseModel):
    """Share of delivery by region."""

    region: str = ""
    percentage: float = 0.0


class DemographicDistribution(BaseModel):
    """Share of delivery by age bracket and gender."""

    age: str = ""
    gender: str = ""
    percentage: float = 0.0


class AdArchiveRecord(BaseModel):
    """An ad returned by the ``/ads_archive`` endpoint or by ID lookup.

    Every field is optional; unknown fields the server adds are kept as
    extras.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    ad_creation_time: Optional[str] = None
    ad_creative_bodies: Optional[List[str]] = None
    ad_creative_image_urls: Optional[List[str]] = None
    ad_creative_link_captions: Optional[List[str]] = None
    ad_creative_link_descriptions: Optional[List[str]] = None
    ad_creative_link_titles: Optional[List[str]] = None
    ad_delivery_start_time: Optional[str] = None
    ad_delivery_stop_time: Optional[str] = None
    ad_snapshot_url: Optional[str] = None
    currency: Optional[str] = None
    spend: Optional[RangeValue] = None
    impressions: Optional[RangeValue] = None
    languages: Optional[List[str]] = None
    region_distribution: Optional[List[RegionDistribution]] = None
    demographic_distribution: Optional[List[DemographicDistribution]] = None
    funding_entity: Optional[str] = None
    page_id: Optional[str] = None
    page_name: Optional[str] = None
    bylines: Optional[str] = None
    publisher_platforms: Optional[List[str]] = None

    @property
    def is_active(self) -> bool:
        """An ad without a delivery stop time is still running."""
        return not self.ad_delivery_stop_time

    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"

    def spend_display(self) -> str:
        """Spend range with currency, or ``-`` when not reported."""
        if self.spend is None:
            return "-"
        text = str(self.spend)
        if self.currency:
            text += f" {self.currency}"
        return text

    def impressions_display(self) -> str:
        if self.impressions is None:
            return "-"
        return str(self.impressions)

    def headline(self) -> Optional[str]:
        """First creative body, falling back to the first link title."""
        if self.ad_creative_bodies:
            return self.ad_creative_bodies[0]
        if self.ad_creative_link_titles:
            return self.ad_creative_link_titles[0]
        return None


class User(BaseModel):
    """Identity returned by ``GET /me``."""

    id: str = ""
    name: str = ""
    email: Optional[str] = Field(None, description="Only with the email permission")
