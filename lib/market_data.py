# =============================================================================
# lib/market_data.py - Market Data Client (CoinGecko)
# =============================================================================
# Typed async wrapper for the public CoinGecko API. Used for:
# - Current USD price + 24h change (simple/price, batched)
# - Daily price history (coins/{id}/market_chart)
# - Descriptive metadata (coins/{id})
#
# Every response is validated with a pydantic model at the boundary:
# - transport failure or non-2xx  -> UpstreamUnavailableError
# - undecodable JSON / wrong shape -> MalformedUpstreamResponseError
#
# The httpx.AsyncClient is passed in, so the API shares one connection pool
# and tests can plug in an httpx.MockTransport.
#
# Usage:
#   market = MarketDataClient(http_client, settings.MARKET_DATA_BASE_URL)
#   quote = await market.fetch_quote("bitcoin")
# =============================================================================

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from app.exceptions import (
    IncompleteUpstreamDataError,
    MalformedUpstreamResponseError,
    UpstreamUnavailableError,
)
from core.models.track import PricePoint

logger = logging.getLogger(__name__)

SERVICE_NAME = "Market data API"

T = TypeVar("T")

# Item slugs (and common tickers) priced straight from market data.
# Values are CoinGecko coin ids.
KNOWN_COINS: dict[str, str] = {
    "bitcoin": "bitcoin",
    "btc": "bitcoin",
    "ethereum": "ethereum",
    "eth": "ethereum",
    "solana": "solana",
    "sol": "solana",
    "cardano": "cardano",
    "ada": "cardano",
    "dogecoin": "dogecoin",
    "doge": "dogecoin",
    "ripple": "ripple",
    "xrp": "ripple",
    "litecoin": "litecoin",
    "ltc": "litecoin",
    "polkadot": "polkadot",
    "dot": "polkadot",
    "tether": "tether",
    "usdt": "tether",
    "binancecoin": "binancecoin",
    "bnb": "binancecoin",
}

_HTML_TAGS = re.compile(r"<[^>]+>")


def resolve_coin_id(item: str) -> str | None:
    """Map an item slug or ticker to a CoinGecko id (case-insensitive)."""
    return KNOWN_COINS.get(item.strip().lower())


# =============================================================================
# Response Models
# =============================================================================

class SimplePrice(BaseModel):
    """One entry of a simple/price answer."""

    usd: float
    usd_24h_change: float | None = None


class MarketQuote(BaseModel):
    """Current price and 24h percentage change for a coin."""

    coin_id: str
    price: float
    change_24h: float | None = None


class MarketChart(BaseModel):
    """market_chart answer: prices as [unix_ms, price] pairs."""

    prices: list[tuple[float, float | None]] = Field(default_factory=list)


class CoinImage(BaseModel):
    thumb: str = ""
    small: str = ""
    large: str = ""


class CoinDescription(BaseModel):
    en: str = ""


class CoinMetadata(BaseModel):
    """The subset of coins/{id} used for item specs."""

    id: str
    symbol: str = ""
    name: str
    description: CoinDescription = Field(default_factory=CoinDescription)
    image: CoinImage = Field(default_factory=CoinImage)
    market_cap_rank: int | None = None
    genesis_date: str | None = None
    hashing_algorithm: str | None = None
    categories: list[str | None] = Field(default_factory=list)

    @property
    def plain_description(self) -> str:
        """English description with HTML links stripped, capped at 200 chars."""
        text = _HTML_TAGS.sub("", self.description.en).strip()
        text = " ".join(text.split())
        return text if len(text) <= 200 else text[:197].rstrip() + "..."


_SIMPLE_PRICES = TypeAdapter(dict[str, SimplePrice])


# =============================================================================
# Client
# =============================================================================

class MarketDataClient:
    """
    Async CoinGecko client.

    Attributes:
        base_url: API root, e.g. https://api.coingecko.com/api/v3
        api_key: Optional demo key, sent as x-cg-demo-api-key
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str = "",
        timeout: float = 15.0,
    ):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key

        url = f"{self.base_url}{path}"
        try:
            response = await self.http.get(url, params=params, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Market data request failed: {url} - {e}")
            raise UpstreamUnavailableError(SERVICE_NAME, error=str(e)) from e

        if not response.is_success:
            logger.warning(f"Market data returned {response.status_code} for {url}")
            raise UpstreamUnavailableError(SERVICE_NAME, status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e

    @staticmethod
    def _validate(adapter_or_model: Any, data: Any) -> Any:
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_python(data)
            return adapter_or_model.model_validate(data)
        except ValidationError as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    async def fetch_quotes(self, coin_ids: list[str]) -> dict[str, MarketQuote]:
        """
        Current USD price and 24h change for several coins in one call.

        Coins the API doesn't know are simply absent from the result.
        """
        if not coin_ids:
            return {}
        data = await self._get_json(
            "/simple/price",
            params={
                "ids": ",".join(sorted(set(coin_ids))),
                "vs_currencies": "usd",
                "include_24hr_change": "true",
            },
        )
        prices: dict[str, SimplePrice] = self._validate(_SIMPLE_PRICES, data)
        return {
            coin_id: MarketQuote(coin_id=coin_id, price=entry.usd, change_24h=entry.usd_24h_change)
            for coin_id, entry in prices.items()
        }

    async def fetch_quote(self, coin_id: str) -> MarketQuote:
        """
        Current USD price and 24h change for one coin.

        Raises:
            IncompleteUpstreamDataError: If the coin is missing from the answer
        """
        quotes = await self.fetch_quotes([coin_id])
        if coin_id not in quotes:
            raise IncompleteUpstreamDataError(SERVICE_NAME, missing=[f"{coin_id}.usd"])
        return quotes[coin_id]

    async def fetch_history(self, coin_id: str, days: int = 30) -> list[PricePoint]:
        """
        Daily USD prices for the last `days` days, oldest first.

        CoinGecko's daily series also includes the latest intraday point,
        which can share a calendar date with the last daily close; the later
        observation wins. Null prices are dropped.
        """
        data = await self._get_json(
            f"/coins/{coin_id}/market_chart",
            params={"vs_currency": "usd", "days": days, "interval": "daily"},
        )
        chart: MarketChart = self._validate(MarketChart, data)

        by_date: dict[str, PricePoint] = {}
        for timestamp_ms, price in chart.prices:
            if price is None:
                continue
            day = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date()
            by_date[day.isoformat()] = PricePoint(date=day, price=price)

        logger.debug(f"Fetched {len(by_date)} history points for {coin_id}")
        return list(by_date.values())

    async def fetch_metadata(self, coin_id: str) -> CoinMetadata:
        """Name, symbol, description, image and rank for one coin."""
        data = await self._get_json(
            f"/coins/{coin_id}",
            params={
                "localization": "false",
                "tickers": "false",
                "market_data": "false",
                "community_data": "false",
                "developer_data": "false",
                "sparkline": "false",
            },
        )
        return self._validate(CoinMetadata, data)

    async def fetch_markets(self, per_page: int = 100) -> list[dict[str, Any]]:
        """Top coins by market cap (raw rows; used by the seed script)."""
        data = await self._get_json(
            "/coins/markets",
            params={"vs_currency": "usd", "per_page": per_page, "page": 1},
        )
        if not isinstance(data, list):
            raise MalformedUpstreamResponseError(SERVICE_NAME, "expected a list of markets")
        return data

    async def fetch_category_list(self) -> list[dict[str, Any]]:
        """CoinGecko's coin categories as {category_id, name} rows (seed script)."""
        data = await self._get_json("/coins/categories/list")
        if not isinstance(data, list):
            raise MalformedUpstreamResponseError(SERVICE_NAME, "expected a list of categories")
        return data
