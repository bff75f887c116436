# =============================================================================
# tests/test_track_service.py - Item Lookup Routing Tests
# =============================================================================
# Tests for TrackService:
# - Known identifiers -> market data (price, history, specs)
# - top-<N>-<category> teasers and sub-categories
# - Generic items -> dev mock / ConfigurationError
# - Input validation
# =============================================================================

import asyncio
from datetime import timedelta

import pytest

from app.config import Settings
from app.exceptions import (
    BadRequestError,
    CategoryNotFoundError,
    ConfigurationError,
    IncompleteUpstreamDataError,
    SubCategoryNotFoundError,
    UpstreamUnavailableError,
)
from core.models.track import MAX_HISTORY_POINTS, TeaserResult, TrackResult
from core.services.catalog_service import StaticCatalogSource
from core.services.price_sources import GenerativePriceSource, MockPriceSource
from core.services.track_service import TrackService
from tests.conftest import TODAY


def _settings(**overrides) -> Settings:
    values = {
        "SUPABASE_URL": "https://test-project.supabase.co",
        "SUPABASE_ANON_KEY": "anon",
        "SUPABASE_SERVICE_KEY": "service",
        **overrides,
    }
    return Settings(**values)


class TestMarketLookups:
    """Known identifiers are priced from market data."""

    def test_bitcoin(self, track_service):
        result = asyncio.run(track_service.lookup("bitcoin"))

        assert isinstance(result, TrackResult)
        assert result.current_price > 0
        assert result.specs["Name"] == "Bitcoin"
        assert result.specs["Source"] == "CoinGecko"
        assert result.specs["Image URL"] == "https://img.test/bitcoin.png"
        assert result.specs["24h Change"] == "+1.50%"

    def test_history_sorted_and_capped(self, track_service):
        result = asyncio.run(track_service.lookup("BTC"))

        dates = [point.date for point in result.history]
        assert len(dates) <= MAX_HISTORY_POINTS
        assert dates == sorted(dates, reverse=True)
        assert len(dates) == len(set(dates))
        assert dates[0] == TODAY

    def test_trend_is_24h_change(self, track_service):
        result = asyncio.run(track_service.lookup("bitcoin"))
        newest, previous = result.history[0].price, result.history[1].price
        assert result.trend == round((newest - previous) / previous * 100, 2)

    def test_market_failure_is_upstream_error(self, track_service):
        # "polkadot" is a known id the fake market doesn't serve
        with pytest.raises((UpstreamUnavailableError, IncompleteUpstreamDataError)) as exc_info:
            asyncio.run(track_service.lookup("polkadot"))
        assert exc_info.value.status_code == 502


class TestTeasers:
    """top-<N>-<category> lookups."""

    def test_top_6_crypto(self, track_service):
        result = asyncio.run(track_service.lookup("top-6-crypto"))

        assert isinstance(result, TeaserResult)
        assert len(result.related) == 6
        assert all(item.slug for item in result.related)
        assert result.related[0].slug == "bitcoin"

    def test_limit_larger_than_category(self, track_service):
        result = asyncio.run(track_service.lookup("top-50-stocks"))
        assert len(result.related) == 2

    def test_category_hint_with_sub_category(self, track_service):
        result = asyncio.run(track_service.lookup("top-3-altcoins", category="crypto"))
        assert [item.slug for item in result.related] == ["solana", "cardano", "polkadot"]

    def test_sub_category_display_name(self, track_service):
        result = asyncio.run(track_service.lookup("top-3-Tech Giants", category="Stocks"))
        assert [item.slug for item in result.related] == ["nvda"]

    def test_unknown_category(self, track_service):
        with pytest.raises(CategoryNotFoundError) as exc_info:
            asyncio.run(track_service.lookup("top-6-sneakers"))
        assert exc_info.value.status_code == 404
        assert exc_info.value.details["available"] == ["crypto", "stocks"]

    def test_unknown_sub_category(self, track_service):
        with pytest.raises(SubCategoryNotFoundError):
            asyncio.run(track_service.lookup("top-3-memecoins", category="crypto"))

    def test_malformed_teaser_id(self, track_service):
        with pytest.raises(BadRequestError) as exc_info:
            asyncio.run(track_service.lookup("top-six-crypto"))
        assert "top-6-crypto" in exc_info.value.message

    def test_live_teaser_prices(self, track_service):
        track_service.live_teaser_prices = True

        result = asyncio.run(track_service.lookup("top-3-crypto"))

        by_slug = {item.slug: item for item in result.related}
        assert by_slug["bitcoin"].trend == 1.5
        assert by_slug["ethereum"].teaser_price == 3400.0
        assert by_slug["solana"].trend == 2.0

    def test_category_items_without_limit(self, track_service):
        items = asyncio.run(track_service.category_items("crypto"))
        assert len(items) == 8


class TestGenericLookups:
    """Items outside the known identifier table."""

    def test_dev_mock_is_deterministic(self, track_service):
        first = asyncio.run(track_service.lookup("unobtainium-widget-9000"))
        second = asyncio.run(track_service.lookup("unobtainium-widget-9000"))

        assert first == second
        assert first.current_price == 9500.0
        assert len(first.history) == MAX_HISTORY_POINTS
        assert first.history[0].date == TODAY
        assert first.history[-1].date == TODAY - timedelta(days=MAX_HISTORY_POINTS - 1)
        assert first.specs["Name"] == "Unobtainium Widget 9000"
        assert first.specs["Source"] == "TrackAura Dev Mock"
        assert first.specs["Image URL"].startswith("https://via.placeholder.com/")

    def test_dev_mock_crypto_base(self, track_service):
        result = asyncio.run(track_service.lookup("shiba-inu", category="crypto"))
        assert result.current_price == 95000.0

    def test_dev_mock_crypto_hint_any_case(self, track_service):
        result = asyncio.run(track_service.lookup("shiba-inu", category="Crypto"))
        assert result.current_price == 95000.0

    def test_no_generic_source_is_configuration_error(self, track_service):
        track_service.generic_source = None

        with pytest.raises(ConfigurationError) as exc_info:
            asyncio.run(track_service.lookup("rolex-submariner"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "GROK_API_KEY missing"

    def test_known_coin_works_without_key(self, track_service):
        track_service.generic_source = None
        result = asyncio.run(track_service.lookup("eth"))
        assert result.specs["Name"] == "Ethereum"


class TestInputValidation:
    """Missing or unusable items."""

    @pytest.mark.parametrize("item", [None, "", "   "])
    def test_missing_item(self, track_service, item):
        with pytest.raises(BadRequestError) as exc_info:
            asyncio.run(track_service.lookup(item))
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Missing item slug"

    def test_item_without_slug_characters(self, track_service):
        with pytest.raises(BadRequestError):
            asyncio.run(track_service.lookup("!!!"))


class TestFromSettings:
    """Wiring of the generic price source."""

    def test_development_without_key_uses_mock(self, market_http):
        service = TrackService.from_settings(_settings(ENVIRONMENT="development"), market_http)
        assert isinstance(service.generic_source, MockPriceSource)
        assert isinstance(service.catalog_source, StaticCatalogSource)

    def test_production_without_key_has_no_generic_source(self, market_http):
        service = TrackService.from_settings(_settings(ENVIRONMENT="production"), market_http)
        assert service.generic_source is None

    def test_key_uses_oracle(self, market_http):
        service = TrackService.from_settings(
            _settings(GROK_API_KEY="xai-test", ENVIRONMENT="production"),
            market_http,
        )
        assert isinstance(service.generic_source, GenerativePriceSource)

    def test_supabase_catalog_requires_client(self, market_http):
        with pytest.raises(ValueError):
            TrackService.from_settings(_settings(CATALOG_SOURCE="supabase"), market_http)
