# =============================================================================
# lib/alpha_vantage.py - Alpha Vantage Listing Client
# =============================================================================
# Fetches the LISTING_STATUS report (every active US symbol, as CSV) used to
# seed the stocks category. Only the seed script calls this.
#
# Usage:
#   listings = AlphaVantageClient(http_client, api_key).fetch_listings(limit=500)
# =============================================================================

from __future__ import annotations

import io
import logging

import httpx
import pandas as pd

from app.exceptions import MalformedUpstreamResponseError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Alpha Vantage"
BASE_URL = "https://www.alphavantage.co/query"


def parse_listing_csv(text: str, limit: int | None = None) -> pd.DataFrame:
    """
    Parse a LISTING_STATUS CSV into a (symbol, name, exchange) frame.

    Symbols are lower-cased; rows without a symbol or name are dropped.

    Raises:
        MalformedUpstreamResponseError: If the text isn't the expected CSV
    """
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e

    if not {"symbol", "name"}.issubset(df.columns):
        raise MalformedUpstreamResponseError(
            SERVICE_NAME, f"missing symbol/name columns: {list(df.columns)}"
        )

    if "exchange" not in df.columns:
        df["exchange"] = ""

    df = df[["symbol", "name", "exchange"]].fillna("")
    df["symbol"] = df["symbol"].str.strip().str.lower()
    df["name"] = df["name"].str.strip()
    df = df[(df["symbol"] != "") & (df["name"] != "")]
    df = df.drop_duplicates(subset="symbol").reset_index(drop=True)

    return df.head(limit) if limit is not None else df


class AlphaVantageClient:
    """Async client for the Alpha Vantage listing report."""

    def __init__(self, http: httpx.AsyncClient, api_key: str, timeout: float = 30.0):
        self.http = http
        self.api_key = api_key
        self.timeout = timeout

    async def fetch_listings(self, limit: int | None = 500) -> pd.DataFrame:
        """
        Active listings, first `limit` rows.

        Raises:
            UpstreamUnavailableError: On transport failure or non-2xx
            MalformedUpstreamResponseError: If the body isn't a listing CSV
        """
        params = {"function": "LISTING_STATUS", "apikey": self.api_key}
        try:
            response = await self.http.get(BASE_URL, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(SERVICE_NAME, error=str(e)) from e

        if not response.is_success:
            raise UpstreamUnavailableError(SERVICE_NAME, status=response.status_code)

        listings = parse_listing_csv(response.text, limit=limit)
        logger.info(f"Parsed {len(listings)} symbols from listing CSV")
        return listings
