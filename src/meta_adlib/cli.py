"""Command-line entry point for ``meta-adlib``.

Each invocation loads settings once, resolves a token (for API commands),
opens one HTTP client and runs a single coroutine with :func:`asyncio.run`.
Every error the client raises on purpose ends up as one ``error: ...`` line
on stderr and exit status 1.

Examples
--------
.. code-block:: bash

    meta-adlib search --query "climate change" --country US
    meta-adlib search --page-id 123456789 --country DE --limit 0 --json
    meta-adlib page ads 123456789 --country US --status ACTIVE
    meta-adlib ad get 123456789012345
    meta-adlib auth set-token EAAB...
"""

import argparse
import asyncio
import logging
import platform
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from . import __version__
from .api import ApiContext, GraphClient, Paginator, build_params, page_query
from .auth import (
    CredentialResolver,
    TokenLifecycleManager,
    create_local_store,
    require_app_credentials,
)
from .config import Settings, load_settings
from .exceptions import MetaAdLibError, TransportError
from .models import (
    AD_DETAIL_FIELDS,
    DEFAULT_FIELDS,
    EXPIRY_WARNING_DAYS,
    AdArchiveRecord,
    CredentialRecord,
    CredentialState,
    Platform,
    QuerySpec,
)
from .output import (
    print_ad_detail,
    print_ads_table,
    print_json,
    use_json,
    use_pretty,
)
from .utils.http import create_http_client
from .utils.security import mask_token, setup_secure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

DESCRIPTION = """\
Search and explore public Meta ads through the Meta Ad Library API.

Token resolution order:
  1. META_TOKEN env var
  2. Own config    (meta-adlib auth set-token)
  3. Shared config (meta-auth login)
"""


# Helpers


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _format_date(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d")


def _expiry_line(
    record: CredentialRecord,
    now: Optional[datetime] = None,
    warning_days: int = EXPIRY_WARNING_DAYS,
) -> str:
    """Describe a stored record's expiry for ``auth status`` and ``info``."""
    state = record.state(now, warning_days)
    expires_at = record.expires_at
    days = record.days_until_expiry(now)
    if state is CredentialState.EXPIRED:
        return f"EXPIRED on {_format_date(expires_at)}, run: meta-adlib auth refresh"
    if state is CredentialState.EXPIRING_SOON:
        return (
            f"{_format_date(expires_at)} ({days} day(s) left), "
            "run: meta-adlib auth refresh"
        )
    if expires_at is None:
        return "unknown (token may never expire, or expiry not tracked)"
    return f"{_format_date(expires_at)} ({days} days left)"


def _print_saved(record: CredentialRecord, config_path: Any, prefix: str) -> None:
    print(f"{prefix}, authenticated as {record.user_name} (ID: {record.user_id})")
    if record.expires_at is not None:
        print(
            f"  expires: {_format_date(record.expires_at)} "
            f"({record.days_until_expiry()} days)"
        )
    print(f"  config:  {config_path}")


def _parse_ads(items: List[Dict[str, Any]]) -> List[AdArchiveRecord]:
    try:
        return [AdArchiveRecord.model_validate(item) for item in items]
    except PydanticValidationError as e:
        raise TransportError(f"parsing ad: {e.errors()[0]['msg']}") from e


def _open_context(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport]
) -> ApiContext:
    resolved = CredentialResolver(settings).resolve()
    return ApiContext.create(settings, resolved.token, transport=transport)


def _render_ads(
    args: argparse.Namespace,
    items: List[Dict[str, Any]],
    empty_message: str,
    summary: str,
) -> None:
    if use_json(args):
        print_json(items, pretty=use_pretty(args))
        return
    if not items:
        print(empty_message)
        return
    print_ads_table(_parse_ads(items))
    print(f"\n{summary}")


# Commands


async def cmd_search(args, settings, transport=None) -> int:
    """Search the archive by keyword and/or page."""
    query = QuerySpec(
        search_terms=args.query,
        page_ids=args.page_id,
        ad_type=args.type,
        active_status=args.status,
        countries=args.country,
        delivery_date_min=args.since,
        delivery_date_max=args.until,
        platforms=args.platform,
        languages=args.language,
        media_type=args.media_type,
        fields=_split_csv(args.fields),
        limit=args.limit,
        page_size=args.page_size,
    )
    params = build_params(query)

    async with _open_context(settings, transport) as context:
        items = await Paginator(context).fetch(params, query.limit)

    _render_ads(args, items, "no ads found", f"{len(items)} ad(s) returned")
    return EXIT_OK


async def cmd_page_ads(args, settings, transport=None) -> int:
    """List the ads run by one Facebook Page."""
    query = page_query(
        args.page_id,
        args.country,
        active_status=args.status,
        limit=args.limit,
        ad_type=args.type,
        delivery_date_min=args.since,
        delivery_date_max=args.until,
    )
    params = build_params(query)

    async with _open_context(settings, transport) as context:
        items = await Paginator(context).fetch(params, query.limit)

    _render_ads(
        args,
        items,
        f"no ads found for page {args.page_id}",
        f"{len(items)} ad(s) for page {args.page_id}",
    )
    return EXIT_OK


async def cmd_ad_get(args, settings, transport=None) -> int:
    """Show every detail of a single ad."""
    async with _open_context(settings, transport) as context:
        item = await GraphClient(context).get_object(args.ad_id, AD_DETAIL_FIELDS)

    if use_json(args):
        print_json(item, pretty=use_pretty(args))
    else:
        print_ad_detail(_parse_ads([item])[0])
    return EXIT_OK


async def cmd_auth_set_token(args, settings, transport=None) -> int:
    """Validate a token (upgrading it when app secrets are set) and save it."""
    store = create_local_store(settings)
    async with create_http_client(settings, transport=transport) as http:
        manager = TokenLifecycleManager(settings, http)
        if settings.has_app_credentials and not args.no_extend:
            print("app credentials found, upgrading to long-lived token (~60 days)...")
        result = await manager.set_token(args.token, no_extend=args.no_extend)

    if result.upgraded:
        print("token upgraded to long-lived")
    if result.warnings:
        print(
            "         saving original token. Use --no-extend to suppress this warning.",
            file=sys.stderr,
        )
    for note in result.notes:
        print(f"note: {note}", file=sys.stderr)
        print(
            "      to extend later: meta-adlib auth extend-token <token> --save",
            file=sys.stderr,
        )

    store.save(result.record)
    _print_saved(result.record, store.path, "token saved")
    return EXIT_OK


async def cmd_auth_extend_token(args, settings, transport=None) -> int:
    """Exchange a short-lived token; print it, or save it with ``--save``."""
    require_app_credentials(settings.meta_app_id, settings.meta_app_secret)
    print("exchanging for long-lived token...")
    async with create_http_client(settings, transport=transport) as http:
        manager = TokenLifecycleManager(settings, http)
        record = await manager.extend_token(args.token, validate=args.save)

    if args.save:
        store = create_local_store(settings)
        store.save(record)
        _print_saved(record, store.path, "long-lived token saved")
        return EXIT_OK

    print(f"\nlong-lived token:\n{record.access_token}")
    if record.expires_at is not None:
        print(f"expires: {_format_date(record.expires_at)}")
    print("\nto save it to config, run:")
    print(f"  meta-adlib auth set-token {record.access_token}")
    print("or re-run with --save:")
    print("  meta-adlib auth extend-token <short_token> --save")
    return EXIT_OK


async def cmd_auth_refresh(args, settings, transport=None) -> int:
    """Re-exchange the stored token to restart its expiry window."""
    require_app_credentials(settings.meta_app_id, settings.meta_app_secret)
    store = create_local_store(settings)
    current = store.load()

    if not current.is_empty:
        days = current.days_until_expiry()
        if days is None:
            print("refreshing token (current expiry unknown)...")
        elif current.is_expired():
            print("token has expired, attempting refresh anyway...")
        else:
            print(f"current token expires in {days} day(s), refreshing now...")

    async with create_http_client(settings, transport=transport) as http:
        manager = TokenLifecycleManager(settings, http)
        record = await manager.refresh(current)

    store.save(record)
    print(f"token refreshed, authenticated as {record.user_name}")
    if record.expires_at is not None:
        print(
            f"  new expiry: {_format_date(record.expires_at)} "
            f"({record.days_until_expiry()} days)"
        )
    return EXIT_OK


async def cmd_auth_status(args, settings, transport=None) -> int:
    """Show the identity and expiry of this tool's stored token."""
    store = create_local_store(settings)
    record = store.load()
    if record.is_empty:
        print("not authenticated")
        print("  → meta-adlib auth set-token <token>")
        print("  → export META_TOKEN=<token>")
        return EXIT_OK

    print(f"authenticated as {record.user_name} (ID: {record.user_id})")
    expiry = _expiry_line(record, warning_days=settings.expiry_warning_days)
    print(f"  expires:  {expiry}")
    print(f"  config:   {store.path}")
    return EXIT_OK


async def cmd_auth_logout(args, settings, transport=None) -> int:
    """Delete this tool's stored token."""
    create_local_store(settings).clear()
    print("logged out")
    return EXIT_OK


async def cmd_info(args, settings, transport=None) -> int:
    """Show config paths, the winning token source and the environment."""
    summary = CredentialResolver(settings).describe_sources()
    record: Optional[CredentialRecord] = summary["record"]

    print("meta-adlib, Meta Ad Library CLI")
    print()
    print(f"  version:  {__version__}")
    print(f"  python:   {platform.python_version()} ({sys.executable})")
    print(f"  os/arch:  {sys.platform}/{platform.machine()}")
    print()
    print(f"  own config:    {summary['local_config']}")
    print(f"  shared config: {summary['shared_config']}")
    print()
    print(f"  token source: {summary['source'] or '(not set)'}")
    if record is not None:
        if record.user_name:
            print(f"  user:         {record.user_name}")
        expiry = _expiry_line(record, warning_days=settings.expiry_warning_days)
        print(f"  expires:      {expiry}")
    print()
    print("  env vars:")
    print(f"    META_TOKEN      = {mask_token(settings.meta_token)}")
    print(f"    META_APP_ID     = {settings.meta_app_id or '(not set)'}")
    print(f"    META_APP_SECRET = {mask_token(settings.meta_app_secret)}")
    print(f"  api: {settings.graph_url}")
    print()
    print("  token resolution order:")
    print("    1. META_TOKEN env var")
    print("    2. own config    (meta-adlib auth set-token)")
    print("    3. shared config (meta-auth login)  ← recommended")
    return EXIT_OK


# Parser


def _output_flags(default: Any) -> argparse.ArgumentParser:
    """Output flags accepted both before and after the sub-command."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--json", action="store_true", default=default, help="Force JSON output"
    )
    parent.add_argument(
        "--pretty",
        action="store_true",
        default=default,
        help="Force pretty-printed JSON output (implies --json)",
    )
    return parent


def _add_common_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--country",
        action="append",
        default=[],
        help="Country code (ISO 3166, e.g. US, DE). Repeatable; at least one required.",
    )
    parser.add_argument(
        "--type", default="ALL", help="Ad type: ALL or POLITICAL_AND_ISSUE_ADS"
    )
    parser.add_argument("--status", default="ALL", help="Ad active status: ALL or ACTIVE")
    parser.add_argument("--since", help="Minimum delivery date (YYYY-MM-DD)")
    parser.add_argument("--until", help="Maximum delivery date (YYYY-MM-DD)")
    parser.add_argument(
        "--limit",
        type=int,
        default=25,
        help="Maximum number of results (0 = fetch all pages)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every sub-command."""
    flags = _output_flags(argparse.SUPPRESS)
    parser = argparse.ArgumentParser(
        prog="meta-adlib",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[_output_flags(False)],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Diagnostic log level (default: WARNING, or LOG_LEVEL)",
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    search = commands.add_parser(
        "search", parents=[flags], help="Search ads by keyword and/or page ID"
    )
    search.add_argument("--query", help="Search terms to find in ad creative text")
    search.add_argument(
        "--page-id", action="append", default=[], help="Facebook Page ID. Repeatable."
    )
    _add_common_filters(search)
    search.add_argument(
        "--platform",
        action="append",
        default=[],
        help="Platform filter: "
        + ", ".join(p.value for p in Platform)
        + ". Repeatable.",
    )
    search.add_argument(
        "--language",
        action="append",
        default=[],
        help="Language filter (ISO 639-1, e.g. en, fr). Repeatable.",
    )
    search.add_argument(
        "--media-type", help="Filter by media type: ALL, IMAGE, MEME, VIDEO, NONE"
    )
    search.add_argument(
        "--fields",
        default=",".join(DEFAULT_FIELDS),
        help="Comma-separated list of fields to return",
    )
    search.add_argument(
        "--page-size", type=int, help="Records per API request (default: 100)"
    )
    search.set_defaults(handler=cmd_search)

    page = commands.add_parser("page", help="Browse ads by Facebook Page")
    page_commands = page.add_subparsers(dest="page_command", metavar="<command>")
    page_ads = page_commands.add_parser(
        "ads", parents=[flags], help="List ads run by a Facebook Page"
    )
    page_ads.add_argument("page_id", help="Facebook Page ID")
    _add_common_filters(page_ads)
    page_ads.set_defaults(handler=cmd_page_ads)

    ad = commands.add_parser("ad", help="Get details about a specific ad")
    ad_commands = ad.add_subparsers(dest="ad_command", metavar="<command>")
    ad_get = ad_commands.add_parser(
        "get", parents=[flags], help="Get detailed info for an ad by its archive ID"
    )
    ad_get.add_argument("ad_id", help="Ad archive ID")
    ad_get.set_defaults(handler=cmd_ad_get)

    auth = commands.add_parser("auth", help="Manage authentication")
    auth_commands = auth.add_subparsers(dest="auth_command", metavar="<command>")

    set_token = auth_commands.add_parser("set-token", help="Save a Meta access token")
    set_token.add_argument("token", help="User access token")
    set_token.add_argument(
        "--no-extend",
        action="store_true",
        help="Do not upgrade to a long-lived token even if app credentials are set",
    )
    set_token.set_defaults(handler=cmd_auth_set_token)

    extend = auth_commands.add_parser(
        "extend-token",
        help="Exchange a short-lived token for a long-lived one (~60 days)",
    )
    extend.add_argument("token", help="Short-lived user access token")
    extend.add_argument("--save", action="store_true", help="Validate and save the result")
    extend.set_defaults(handler=cmd_auth_extend_token)

    refresh = auth_commands.add_parser(
        "refresh", help="Refresh the stored token before it expires"
    )
    refresh.set_defaults(handler=cmd_auth_refresh)

    status = auth_commands.add_parser("status", help="Show authentication status")
    status.set_defaults(handler=cmd_auth_status)

    logout = auth_commands.add_parser("logout", help="Remove saved credentials")
    logout.set_defaults(handler=cmd_auth_logout)

    info = commands.add_parser(
        "info", help="Show tool info: config paths, token status, and environment"
    )
    info.set_defaults(handler=cmd_info)

    return parser


def main(
    argv: Optional[List[str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """Run the ``meta-adlib`` command line.

    :param argv: Arguments without the program name; defaults to ``sys.argv[1:]``
    :param transport: HTTP transport override, used by tests
    :return: Process exit status
    """
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except PydanticValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        print(f"error: invalid setting {location}: {error['msg']}", file=sys.stderr)
        return EXIT_ERROR

    setup_secure_logging(level=args.log_level or settings.log_level)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return EXIT_ERROR

    try:
        return asyncio.run(handler(args, settings, transport))
    except MetaAdLibError as e:
        logger.debug("Command failed: %s", e.to_dict())
        print(f"error: {e.message}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
