from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

FISCALDATA_BASE_URL = "https://api.fiscaldata.treasury.gov/services/api/fiscal_service"


@dataclass(frozen=True)
class FiscalDataEndpoint:
    """
    FiscalData uses a base URL + endpoint path, e.g.
    base: https://api.fiscaldata.treasury.gov/services/api/fiscal_service
    endpoint: /v2/accounting/od/debt_to_penny
    """

    path: str


DEBT_TO_PENNY = FiscalDataEndpoint(path="/v2/accounting/od/debt_to_penny")


class FetchError(Exception):
    """Any failure reading from FiscalData; the message is shown to the user."""


class NetworkError(FetchError):
    pass


class HttpStatusError(FetchError):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ParseError(FetchError):
    pass


class FiscalDataClient:
    """
    Async reader for FiscalData's paginated JSON endpoints.

    Pass `transport` (e.g. httpx.MockTransport) to fake the API in tests.
    No caching and no retries: every call is exactly one HTTP request.
    """

    def __init__(
        self,
        base_url: str = FISCALDATA_BASE_URL,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> "FiscalDataClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_page(
        self,
        *,
        endpoint: FiscalDataEndpoint,
        sort: str,
        page_number: int = 1,
        page_size: int = 1,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one page of an endpoint and return its "data" rows.

        Raises NetworkError, HttpStatusError or ParseError (all FetchError).
        """
        url = f"{self.base_url}{endpoint.path}"
        query = dict(params or {})
        query.update(
            {
                "sort": sort,
                "format": "json",
                "page[number]": page_number,
                "page[size]": page_size,
            }
        )

        try:
            r = await self._client.get(url, params=query)
            r.raise_for_status()
            js = r.json()
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            raise HttpStatusError(f"Treasury API request failed (HTTP {code})", code) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Treasury API unreachable: {e}") from e
        except ValueError as e:
            raise ParseError(f"Treasury API returned malformed JSON: {e}") from e

        data = js.get("data") if isinstance(js, dict) else None
        if not isinstance(data, list):
            raise ParseError("Treasury API response has no 'data' list")

        logger.debug("fiscaldata %s page=%s size=%s -> %d rows", endpoint.path, page_number, page_size, len(data))
        return data
