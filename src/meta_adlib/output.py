"""Rendering of results for the terminal.

Output is JSON whenever stdout is not a terminal (so piping into ``jq``
just works) or when ``--json`` / ``--pretty`` is given; otherwise results
are shown as aligned plain-text tables.
"""

import json
import sys
from typing import Any, Iterable, List, Optional, Sequence, TextIO

from .models import AdArchiveRecord

COLUMN_PADDING = 2
ELLIPSIS = "…"

ADS_TABLE_HEADERS = ["ID", "PAGE", "STARTED", "STATUS", "SPEND", "PLATFORMS", "BODY"]


def _out(stream: Optional[TextIO]) -> TextIO:
    return stream if stream is not None else sys.stdout


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def use_json(args: Any, stream: Optional[TextIO] = None) -> bool:
    """Whether results should be printed as JSON.

    :param args: Parsed arguments with optional ``json`` / ``pretty`` flags
    :param stream: Output stream; defaults to stdout
    """
    if not _is_tty(_out(stream)):
        return True
    return bool(getattr(args, "json", False) or getattr(args, "pretty", False))


def use_pretty(args: Any, stream: Optional[TextIO] = None) -> bool:
    """Whether JSON should be indented.

    ``--pretty`` always indents; ``--json`` indents only on a terminal.
    """
    if getattr(args, "pretty", False):
        return True
    return bool(getattr(args, "json", False)) and _is_tty(_out(stream))


def print_json(value: Any, pretty: bool = False, stream: Optional[TextIO] = None) -> None:
    out = _out(stream)
    if pretty:
        out.write(json.dumps(value, indent=2, ensure_ascii=False))
    else:
        out.write(json.dumps(value, ensure_ascii=False))
    out.write("\n")


def print_table(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    stream: Optional[TextIO] = None,
) -> None:
    """Print rows as left-aligned columns separated by two spaces."""
    out = _out(stream)
    table = [list(headers)] + [list(row) for row in rows]
    widths = [0] * max(len(r) for r in table)
    for row in table:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    for row in table:
        cells = [
            cell.ljust(widths[i] + COLUMN_PADDING) if i < len(row) - 1 else cell
            for i, cell in enumerate(row)
        ]
        out.write("".join(cells) + "\n")


def print_key_value(
    rows: Iterable[Sequence[str]], stream: Optional[TextIO] = None
) -> None:
    """Print label/value pairs, skipping pairs whose value is empty or ``-``."""
    kept = [(k, v) for k, v in rows if v and v != "-"]
    if not kept:
        return
    out = _out(stream)
    width = max(len(k) for k, _ in kept) + COLUMN_PADDING
    for key, value in kept:
        out.write(f"{key.ljust(width)}{value}\n")


def truncate(text: str, max_len: int) -> str:
    """Shorten ``text`` to ``max_len`` characters, marking the cut with ``…``."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + ELLIPSIS


def format_time(timestamp: Optional[str]) -> str:
    """Trim an ISO-8601 timestamp to ``YYYY-MM-DD HH:MM``.

    >>> format_time("2024-03-01T12:34:56+0000")
    '2024-03-01 12:34'
    """
    if not timestamp:
        return "-"
    if len(timestamp) >= 16:
        return f"{timestamp[:10]} {timestamp[11:16]}"
    return timestamp


def join_strings(values: Optional[Sequence[str]], sep: str = ", ") -> str:
    if not values:
        return "-"
    return sep.join(values)


def print_ads_table(ads: List[AdArchiveRecord], stream: Optional[TextIO] = None) -> None:
    """Print the compact one-line-per-ad listing."""
    rows = []
    for ad in ads:
        headline = ad.headline()
        rows.append(
            [
                ad.id or "-",
                truncate(ad.page_name or "", 25),
                format_time(ad.ad_delivery_start_time),
                ad.status,
                ad.spend_display(),
                truncate(join_strings(ad.publisher_platforms), 20),
                truncate(headline, 50) if headline else "-",
            ]
        )
    print_table(ADS_TABLE_HEADERS, rows, stream=stream)


def print_ad_detail(ad: AdArchiveRecord, stream: Optional[TextIO] = None) -> None:
    """Print every known field of one ad, followed by its delivery breakdowns."""
    out = _out(stream)
    page = ad.page_name or ""
    if ad.page_id:
        page = f"{page} (ID: {ad.page_id})"

    rows = [
        ("ID", ad.id or ""),
        ("Page", page),
        ("Status", ad.status),
        ("Created", format_time(ad.ad_creation_time)),
        ("Started", format_time(ad.ad_delivery_start_time)),
        ("Stopped", format_time(ad.ad_delivery_stop_time)),
        ("Platforms", join_strings(ad.publisher_platforms)),
        ("Languages", join_strings(ad.languages)),
        ("Bylines", ad.bylines or ""),
        ("Spend (est.)", ad.spend_display()),
        ("Impressions (est.)", ad.impressions_display()),
        ("Snapshot URL", ad.ad_snapshot_url or ""),
    ]
    if ad.ad_creative_bodies:
        rows.append(("Body", " | ".join(ad.ad_creative_bodies)))
    if ad.ad_creative_link_titles:
        rows.append(("Link Title", " | ".join(ad.ad_creative_link_titles)))
    if ad.ad_creative_link_descriptions:
        rows.append(("Link Description", " | ".join(ad.ad_creative_link_descriptions)))
    if ad.ad_creative_link_captions:
        rows.append(("Link Caption", " | ".join(ad.ad_creative_link_captions)))
    if ad.ad_creative_image_urls:
        rows.append(("Image URLs", "\n".join(ad.ad_creative_image_urls)))

    print_key_value(rows, stream=out)

    if ad.region_distribution:
        out.write("\nRegion Distribution:\n")
        for region in ad.region_distribution:
            out.write(f"  {region.region:<30} {region.percentage:.1f}%\n")

    if ad.demographic_distribution:
        out.write("\nDemographic Distribution:\n")
        for demo in ad.demographic_distribution:
            out.write(f"  {demo.gender:<5} {demo.age:<10} {demo.percentage:.1f}%\n")
