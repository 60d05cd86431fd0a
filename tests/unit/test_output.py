"""Unit tests for the presentation helpers."""

import io
import json
from argparse import Namespace

from meta_adlib.models import AdArchiveRecord
from meta_adlib.output import (
    format_time,
    join_strings,
    print_ad_detail,
    print_ads_table,
    print_json,
    print_key_value,
    print_table,
    truncate,
    use_json,
    use_pretty,
)


class FakeTTY(io.StringIO):
    def isatty(self):
        return True


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("exactly10!", 10) == "exactly10!"
    assert truncate("a longer sentence", 8) == "a longe…"


def test_format_time():
    assert format_time("2024-03-01T12:34:56+0000") == "2024-03-01 12:34"
    assert format_time("2024-03-01") == "2024-03-01"
    assert format_time("") == "-"
    assert format_time(None) == "-"


def test_join_strings():
    assert join_strings(["facebook", "instagram"]) == "facebook, instagram"
    assert join_strings([]) == "-"
    assert join_strings(None) == "-"


def test_json_when_piped():
    assert use_json(Namespace(json=False, pretty=False), io.StringIO())


def test_table_on_terminal_unless_flagged():
    tty = FakeTTY()
    assert not use_json(Namespace(json=False, pretty=False), tty)
    assert use_json(Namespace(json=True, pretty=False), tty)
    assert use_json(Namespace(json=False, pretty=True), tty)


def test_pretty_rules():
    assert use_pretty(Namespace(json=False, pretty=True), io.StringIO())
    assert use_pretty(Namespace(json=True, pretty=False), FakeTTY())
    assert not use_pretty(Namespace(json=True, pretty=False), io.StringIO())


def test_print_json_compact_and_pretty():
    out = io.StringIO()
    print_json([{"id": "1"}], stream=out)
    assert out.getvalue() == '[{"id": "1"}]\n'

    out = io.StringIO()
    print_json({"id": "1"}, pretty=True, stream=out)
    assert json.loads(out.getvalue()) == {"id": "1"}
    assert "\n  " in out.getvalue()


def test_print_table_aligns_columns():
    out = io.StringIO()
    print_table(["A", "BB"], [["xxx", "y"], ["z", "wwww"]], stream=out)
    assert out.getvalue().splitlines() == [
        "A    BB",
        "xxx  y",
        "z    wwww",
    ]


def test_print_key_value_skips_empty_values():
    out = io.StringIO()
    print_key_value([("ID", "1"), ("Bylines", ""), ("Spend", "-"), ("Page", "Acme")], out)
    assert out.getvalue().splitlines() == ["ID    1", "Page  Acme"]


def test_ads_table_row():
    ad = AdArchiveRecord.model_validate(
        {
            "id": "123",
            "page_name": "A Very Long Page Name That Goes On",
            "ad_delivery_start_time": "2024-05-02T08:00:00+0000",
            "spend": {"lower_bound": "100", "upper_bound": "199"},
            "currency": "EUR",
            "publisher_platforms": ["facebook", "instagram"],
            "ad_creative_bodies": ["Buy now"],
        }
    )
    out = io.StringIO()
    print_ads_table([ad], stream=out)
    header, row = out.getvalue().splitlines()

    assert header.split() == ["ID", "PAGE", "STARTED", "STATUS", "SPEND", "PLATFORMS", "BODY"]
    assert "A Very Long Page Name Th…" in row
    assert "2024-05-02 08:00" in row
    assert "active" in row
    assert "100–199 EUR" in row
    assert "facebook, instagram" in row
    assert row.endswith("Buy now")


def test_ad_detail_includes_distributions():
    ad = AdArchiveRecord.model_validate(
        {
            "id": "9",
            "page_id": "77",
            "page_name": "Acme",
            "ad_delivery_stop_time": "2024-06-01T00:00:00+0000",
            "impressions": {"lower_bound": "1000", "upper_bound": "1000"},
            "region_distribution": [{"region": "Bavaria", "percentage": 0.5}],
            "demographic_distribution": [
                {"age": "25-34", "gender": "female", "percentage": 0.25}
            ],
        }
    )
    out = io.StringIO()
    print_ad_detail(ad, stream=out)
    text = out.getvalue()

    assert "Acme (ID: 77)" in text
    assert "inactive" in text
    assert "Impressions (est.)" in text and "1000" in text
    assert "Spend (est.)" not in text
    assert "Region Distribution:" in text
    assert "Bavaria" in text
    assert "Demographic Distribution:" in text
    assert "female" in text and "25-34" in text
