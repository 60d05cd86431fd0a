"""Unit tests for the ad record and response envelope models."""

from meta_adlib.models import AdArchiveRecord, PageEnvelope, RangeValue


def test_range_value_rendering():
    assert str(RangeValue(lower_bound="5", upper_bound="5")) == "5"
    assert str(RangeValue(lower_bound="100", upper_bound="199")) == "100–199"
    assert str(RangeValue(lower_bound="1000")) == "1000–"


def test_presence_tracking():
    ad = AdArchiveRecord.model_validate({"id": "1", "page_name": "Acme"})
    assert ad.model_fields_set == {"id", "page_name"}
    assert ad.spend is None
    assert ad.spend_display() == "-"


def test_unknown_fields_pass_through():
    ad = AdArchiveRecord.model_validate({"id": "1", "target_ages": ["18", "65"]})
    assert ad.model_extra == {"target_ages": ["18", "65"]}
    assert ad.target_ages == ["18", "65"]


def test_active_status_follows_stop_time():
    assert AdArchiveRecord(id="1").is_active
    stopped = AdArchiveRecord(id="1", ad_delivery_stop_time="2024-01-01T00:00:00+0000")
    assert not stopped.is_active
    assert stopped.status == "inactive"


def test_headline_falls_back_to_link_title():
    ad = AdArchiveRecord(ad_creative_link_titles=["Title"])
    assert ad.headline() == "Title"
    assert AdArchiveRecord().headline() is None


def test_page_envelope_next_url():
    page = PageEnvelope.model_validate(
        {"data": [{"id": "1"}], "paging": {"cursors": {"after": "x"}, "next": "https://n"}}
    )
    assert page.next_url == "https://n"
    assert PageEnvelope.model_validate({"data": []}).next_url is None
    assert PageEnvelope.model_validate({"data": [], "paging": {"next": ""}}).next_url is None
