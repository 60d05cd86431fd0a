"""Unit tests for query validation and parameter encoding."""

import json

import pytest

from meta_adlib.api.query import build_params, page_query, to_json_array
from meta_adlib.exceptions import ValidationError
from meta_adlib.models import DEFAULT_FIELDS, QuerySpec


def test_to_json_array_is_compact():
    assert to_json_array(["US", "DE"]) == '["US","DE"]'
    assert to_json_array([]) == "[]"


def test_countries_round_trip():
    params = build_params(QuerySpec(search_terms="shoes", countries=["US", "DE"]))
    assert params["ad_reached_countries"] == '["US","DE"]'
    assert json.loads(params["ad_reached_countries"]) == ["US", "DE"]


def test_minimal_search_params():
    params = build_params(QuerySpec(search_terms="climate", countries=["US"]))
    assert params == {
        "fields": ",".join(DEFAULT_FIELDS),
        "ad_type": "ALL",
        "ad_active_status": "ALL",
        "ad_reached_countries": '["US"]',
        "search_terms": "climate",
    }


def test_all_filters_encoded():
    query = QuerySpec(
        page_ids=["111", "222"],
        countries=["FR"],
        ad_type="political_and_issue_ads",
        active_status="active",
        delivery_date_min="2024-01-01",
        delivery_date_max="2024-12-31",
        platforms=["Facebook", "instagram"],
        languages=["fr", "en"],
        media_type="video",
        fields=["id", "page_name"],
        page_size=50,
    )
    params = build_params(query)
    assert params["search_page_ids"] == '["111","222"]'
    assert params["ad_type"] == "POLITICAL_AND_ISSUE_ADS"
    assert params["ad_active_status"] == "ACTIVE"
    assert params["ad_delivery_date_min"] == "2024-01-01"
    assert params["ad_delivery_date_max"] == "2024-12-31"
    assert params["publisher_platforms"] == '["facebook","instagram"]'
    assert params["languages"] == '["fr","en"]'
    assert params["ad_creative_media_type"] == "VIDEO"
    assert params["fields"] == "id,page_name"
    assert params["limit"] == "50"
    assert "search_terms" not in params


def test_missing_countries_rejected_first():
    with pytest.raises(ValidationError) as exc:
        build_params(QuerySpec(limit=-1))
    assert exc.value.field == "countries"
    assert "country" in exc.value.message


def test_terms_or_page_ids_required():
    with pytest.raises(ValidationError) as exc:
        build_params(QuerySpec(countries=["US"]))
    assert exc.value.field == "search_terms"


def test_blank_terms_count_as_missing():
    with pytest.raises(ValidationError):
        build_params(QuerySpec(search_terms="   ", countries=["US"]))


def test_search_terms_sent_unchanged():
    params = build_params(QuerySpec(search_terms="  climate change ", countries=["US"]))
    assert params["search_terms"] == "  climate change "


def test_negative_limit_rejected():
    with pytest.raises(ValidationError) as exc:
        build_params(QuerySpec(search_terms="x", countries=["US"], limit=-5))
    assert exc.value.field == "limit"


def test_empty_fields_rejected():
    with pytest.raises(ValidationError) as exc:
        build_params(QuerySpec(search_terms="x", countries=["US"], fields=[]))
    assert exc.value.field == "fields"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"ad_type": "COMMERCIAL"}, "ad type"),
        ({"active_status": "INACTIVE"}, "active status"),
        ({"media_type": "GIF"}, "media type"),
        ({"platforms": ["myspace"]}, "platform"),
    ],
)
def test_unknown_enumeration_values_rejected(overrides, field):
    query = QuerySpec(search_terms="x", countries=["US"], **overrides)
    with pytest.raises(ValidationError) as exc:
        build_params(query)
    assert exc.value.field == field


def test_countries_and_languages_not_validated():
    params = build_params(
        QuerySpec(search_terms="x", countries=["XX"], languages=["zz"])
    )
    assert params["ad_reached_countries"] == '["XX"]'
    assert params["languages"] == '["zz"]'


def test_page_query_restricts_to_page():
    query = page_query("123", ["US", "DE"], active_status="ACTIVE", limit=10)
    params = build_params(query)
    assert params["search_page_ids"] == '["123"]'
    assert params["ad_reached_countries"] == '["US","DE"]'
    assert params["ad_active_status"] == "ACTIVE"
    assert query.limit == 10
