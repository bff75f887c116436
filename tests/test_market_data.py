# =============================================================================
# tests/test_market_data.py - Market Data Client Tests
# =============================================================================
# Tests for MarketDataClient against an httpx.MockTransport CoinGecko:
# - Known identifier resolution
# - Quotes, history and metadata parsing
# - Error mapping (non-2xx, transport failure, bad JSON, wrong shape)
# =============================================================================

import asyncio
from datetime import date

import httpx
import pytest

from app.exceptions import (
    IncompleteUpstreamDataError,
    MalformedUpstreamResponseError,
    UpstreamUnavailableError,
)
from lib.market_data import MarketDataClient, resolve_coin_id
from tests.conftest import MARKET_BASE_URL, TODAY


def _client(handler) -> MarketDataClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MarketDataClient(http, MARKET_BASE_URL, api_key="demo-key")


class TestResolveCoinId:
    """Tests for the known identifier table."""

    def test_names_and_tickers(self):
        assert resolve_coin_id("bitcoin") == "bitcoin"
        assert resolve_coin_id("BTC") == "bitcoin"
        assert resolve_coin_id(" eth ") == "ethereum"
        assert resolve_coin_id("sol") == "solana"

    def test_unknown(self):
        assert resolve_coin_id("rolex-submariner") is None
        assert resolve_coin_id("") is None


class TestMarketDataClient:
    """Tests for the CoinGecko endpoints."""

    def test_fetch_quotes_batches_ids(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "bitcoin": {"usd": 95000, "usd_24h_change": 1.5},
                "solana": {"usd": 160},
            })

        quotes = asyncio.run(_client(handler).fetch_quotes(["solana", "bitcoin", "unknown"]))

        assert len(seen) == 1
        assert seen[0].url.params["ids"] == "bitcoin,solana,unknown"
        assert seen[0].headers["x-cg-demo-api-key"] == "demo-key"
        assert quotes["bitcoin"].price == 95000
        assert quotes["bitcoin"].change_24h == 1.5
        assert quotes["solana"].change_24h is None
        assert "unknown" not in quotes

    def test_fetch_quote_missing_coin_is_incomplete(self, market_client):
        with pytest.raises(IncompleteUpstreamDataError):
            asyncio.run(market_client.fetch_quote("unknown-coin"))

    def test_fetch_history_one_point_per_day(self, market_client):
        history = asyncio.run(market_client.fetch_history("bitcoin", days=30))

        dates = [point.date for point in history]
        assert len(dates) == len(set(dates))
        assert dates[-1] == TODAY
        # The intraday point replaces the daily close for the same date
        assert history[-1].price == 95000.0 + 31 + 0.5

    def test_fetch_history_drops_null_prices(self):
        def handler(request):
            return httpx.Response(200, json={"prices": [[1762560000000, None], [1762646400000, 10.0]]})

        history = asyncio.run(_client(handler).fetch_history("bitcoin"))

        assert len(history) == 1
        assert history[0].price == 10.0
        assert history[0].date == date(2025, 11, 9)

    def test_fetch_metadata(self, market_client):
        metadata = asyncio.run(market_client.fetch_metadata("bitcoin"))

        assert metadata.name == "Bitcoin"
        assert metadata.plain_description == "Bitcoin is a coin."
        assert metadata.image.large == "https://img.test/bitcoin.png"

    def test_non_2xx_is_unavailable(self):
        client = _client(lambda request: httpx.Response(429, json={"error": "rate limited"}))

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            asyncio.run(client.fetch_quotes(["bitcoin"]))

        assert exc_info.value.details["status"] == 429
        assert exc_info.value.message == "Market data API error (429)"

    def test_transport_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            asyncio.run(_client(handler).fetch_history("bitcoin"))

    def test_invalid_json_is_malformed(self):
        client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(MalformedUpstreamResponseError):
            asyncio.run(client.fetch_quotes(["bitcoin"]))

    def test_wrong_shape_is_malformed(self):
        client = _client(lambda request: httpx.Response(200, json={"prices": "none"}))

        with pytest.raises(MalformedUpstreamResponseError):
            asyncio.run(client.fetch_history("bitcoin"))
