from __future__ import annotations

import asyncio

import httpx
import pytest

from debtclock.data.fiscaldata import (
    DEBT_TO_PENNY,
    FetchError,
    HttpStatusError,
    NetworkError,
    ParseError,
)


def _fetch(api, **kw):
    async def run():
        async with api.client() as client:
            return await client.fetch_page(endpoint=DEBT_TO_PENNY, sort="-record_date", **kw)

    return asyncio.run(run())


def test_fetch_page_sends_pagination_and_sort(fiscal_api):
    rows = _fetch(fiscal_api, page_number=2, page_size=1)
    assert len(rows) == 1
    assert rows[0]["record_date"] == "2024-02-29"

    (req,) = fiscal_api.requests
    assert req.url.path.endswith("/v2/accounting/od/debt_to_penny")
    assert req.url.params["sort"] == "-record_date"
    assert req.url.params["format"] == "json"
    assert req.url.params["page[number]"] == "2"
    assert req.url.params["page[size]"] == "1"


def test_http_error_status_raises_http_status_error(fiscal_api):
    fiscal_api.fail[(1, 1)] = 500
    with pytest.raises(HttpStatusError) as ei:
        _fetch(fiscal_api, page_number=1, page_size=1)
    assert ei.value.status_code == 500
    assert "500" in str(ei.value)
    assert isinstance(ei.value, FetchError)


def test_malformed_json_raises_parse_error(fiscal_api):
    fiscal_api.raw[(1, 1)] = b"<html>not json</html>"
    with pytest.raises(ParseError):
        _fetch(fiscal_api, page_number=1, page_size=1)


def test_missing_data_list_raises_parse_error(fiscal_api):
    fiscal_api.raw[(1, 1)] = b'{"meta": {}}'
    with pytest.raises(ParseError):
        _fetch(fiscal_api, page_number=1, page_size=1)


def test_transport_failure_raises_network_error(fiscal_api):
    fiscal_api.exc = lambda request: httpx.ConnectError("connection refused", request=request)
    with pytest.raises(NetworkError):
        _fetch(fiscal_api, page_number=1, page_size=1)
