"""Unit tests for response classification in GraphClient."""

import logging

import httpx
import pytest

from meta_adlib.api import GraphClient
from meta_adlib.api.rate_limit import check_rate_limit, parse_app_usage
from meta_adlib.exceptions import APIError, TransportError
from meta_adlib.models import AD_DETAIL_FIELDS


@pytest.mark.asyncio
async def test_error_payload_with_200_status_raises(recording_transport, make_context):
    body = {
        "error": {
            "message": "Invalid OAuth access token.",
            "type": "OAuthException",
            "code": 190,
            "error_subcode": 463,
        }
    }
    transport = recording_transport(lambda r: httpx.Response(200, json=body))
    async with make_context(transport) as context:
        with pytest.raises(APIError) as exc:
            await GraphClient(context).get("/ads_archive", {})

    err = exc.value
    assert err.error_code == 190
    assert err.error_subcode == 463
    assert err.error_type == "OAuthException"
    assert err.status_code == 200
    assert "Invalid OAuth access token." in err.message
    assert "subcode 463" in err.message


@pytest.mark.asyncio
async def test_error_status_without_payload(recording_transport, make_context):
    transport = recording_transport(lambda r: httpx.Response(502, text="Bad Gateway"))
    async with make_context(transport) as context:
        with pytest.raises(APIError) as exc:
            await GraphClient(context).get("/ads_archive", {})

    assert exc.value.message == "HTTP 502: Bad Gateway"
    assert exc.value.status_code == 502


@pytest.mark.asyncio
async def test_error_status_keeps_whole_body(recording_transport, make_context):
    body = "x" * 2000
    transport = recording_transport(lambda r: httpx.Response(500, text=body))
    async with make_context(transport) as context:
        with pytest.raises(APIError) as exc:
            await GraphClient(context).get("/ads_archive", {})

    assert exc.value.message == f"HTTP 500: {body}"


@pytest.mark.asyncio
async def test_non_json_success_is_transport_error(recording_transport, make_context):
    transport = recording_transport(lambda r: httpx.Response(200, text="<html>"))
    async with make_context(transport) as context:
        with pytest.raises(TransportError):
            await GraphClient(context).get("/ads_archive", {})


@pytest.mark.asyncio
async def test_network_failure_is_transport_error(make_context):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_context(httpx.MockTransport(handler)) as context:
        with pytest.raises(TransportError) as exc:
            await GraphClient(context).get("/ads_archive", {})

    assert "connection refused" in exc.value.message


@pytest.mark.asyncio
async def test_get_object_requests_fields(recording_transport, make_context):
    transport = recording_transport(
        lambda r: httpx.Response(200, json={"id": "42", "page_name": "Acme"})
    )
    async with make_context(transport) as context:
        ad = await GraphClient(context).get_object("42", AD_DETAIL_FIELDS)

    assert ad == {"id": "42", "page_name": "Acme"}
    request = transport.requests[0]
    assert request.url.path == "/v23.0/42"
    assert request.url.params["fields"] == ",".join(AD_DETAIL_FIELDS)
    assert request.url.params["access_token"] == "test-token"


@pytest.mark.asyncio
async def test_high_usage_warns_once(recording_transport, make_context, caplog):
    headers = {"X-App-Usage": '{"call_count": 80, "total_cputime": 40, "total_time": 10}'}
    transport = recording_transport(
        lambda r: httpx.Response(200, json={"data": []}, headers=headers)
    )
    with caplog.at_level(logging.WARNING, logger="meta_adlib"):
        async with make_context(transport) as context:
            await GraphClient(context).get("/ads_archive", {})

    warnings = [r for r in caplog.records if "rate limit" in r.getMessage()]
    assert len(warnings) == 1
    assert "80%" in warnings[0].getMessage()


@pytest.mark.asyncio
async def test_low_usage_is_silent(recording_transport, make_context, caplog):
    headers = {"X-App-Usage": '{"call_count": 10, "total_cputime": 20, "total_time": 5}'}
    transport = recording_transport(
        lambda r: httpx.Response(200, json={"data": []}, headers=headers)
    )
    with caplog.at_level(logging.WARNING, logger="meta_adlib"):
        async with make_context(transport) as context:
            await GraphClient(context).get("/ads_archive", {})

    assert not [r for r in caplog.records if "rate limit" in r.getMessage()]


@pytest.mark.asyncio
async def test_rate_warning_precedes_error(recording_transport, make_context, caplog):
    headers = {"X-App-Usage": '{"call_count": 99}'}
    transport = recording_transport(
        lambda r: httpx.Response(
            400, json={"error": {"code": 4, "message": "limit"}}, headers=headers
        )
    )
    with caplog.at_level(logging.WARNING, logger="meta_adlib"):
        async with make_context(transport) as context:
            with pytest.raises(APIError):
                await GraphClient(context).get("/ads_archive", {})

    assert any("rate limit" in r.getMessage() for r in caplog.records)


def test_parse_app_usage_takes_maximum():
    signal = parse_app_usage({"X-App-Usage": '{"call_count": 5, "total_time": 61}'})
    assert signal.usage_percent == 61


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"call_count": "lots"}'])
def test_malformed_usage_header_ignored(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="meta_adlib"):
        assert check_rate_limit({"X-App-Usage": raw}) is None
    assert not caplog.records


def test_missing_usage_header():
    assert parse_app_usage({}) is None


def test_usage_at_threshold_does_not_warn(caplog):
    with caplog.at_level(logging.WARNING, logger="meta_adlib"):
        check_rate_limit({"X-App-Usage": '{"call_count": 75}'}, threshold=75)
    assert not caplog.records
