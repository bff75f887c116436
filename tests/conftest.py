# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - A small on-disk category catalog
# - A CoinGecko stand-in served through httpx.MockTransport
# - An in-memory Supabase fake
# - A TestClient with the app's dependencies overridden
# =============================================================================

import os
import json
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["GROK_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("DEBUG", "true")

import httpx
import pytest

from lib.supabase_client import SupabaseClientError

TEST_JWT_SECRET = "test-jwt-secret"
MARKET_BASE_URL = "https://market.test/api/v3"
TODAY = date(2025, 11, 8)


# =============================================================================
# Catalog Fixtures
# =============================================================================

def _teaser(slug: str, name: str, price: float, trend: float = 0.0) -> dict[str, Any]:
    return {"slug": slug, "name": name, "image_url": "", "teaser_price": price, "trend": trend}


@pytest.fixture
def sample_catalog_dict():
    """Two categories with one sub-category each."""
    return {
        "categories": [
            {
                "slug": "crypto",
                "label": "Crypto",
                "icon": "₿",
                "description": "Cryptocurrencies",
                "items": [
                    _teaser("bitcoin", "Bitcoin", 95000.0, 1.2),
                    _teaser("ethereum", "Ethereum", 3400.0, -0.8),
                    _teaser("solana", "Solana", 160.0, 2.5),
                    _teaser("cardano", "Cardano", 0.55),
                    _teaser("dogecoin", "Dogecoin", 0.17),
                    _teaser("ripple", "XRP", 2.3),
                    _teaser("litecoin", "Litecoin", 98.0),
                    _teaser("polkadot", "Polkadot", 3.1),
                ],
                "sub_categories": [
                    {
                        "slug": "altcoins",
                        "label": "Altcoins",
                        "items": [
                            _teaser("solana", "Solana", 160.0, 2.5),
                            _teaser("cardano", "Cardano", 0.55),
                            _teaser("polkadot", "Polkadot", 3.1),
                            _teaser("dogecoin", "Dogecoin", 0.17),
                        ],
                    }
                ],
            },
            {
                "slug": "stocks",
                "label": "Stocks",
                "icon": "📈",
                "items": [
                    _teaser("nvda", "NVIDIA", 140.0),
                    _teaser("aapl", "Apple", 230.0),
                ],
                "sub_categories": [
                    {
                        "slug": "tech-giants",
                        "label": "Tech Giants",
                        "items": [_teaser("nvda", "NVIDIA", 140.0)],
                    }
                ],
            },
        ]
    }


@pytest.fixture
def catalog_file(tmp_path, sample_catalog_dict):
    """The sample catalog written to a temporary categories.json."""
    path = tmp_path / "categories.json"
    path.write_text(json.dumps(sample_catalog_dict), encoding="utf-8")
    return path


# =============================================================================
# Market Data Fixtures
# =============================================================================

COIN_PRICES = {
    "bitcoin": (95000.0, 1.5),
    "ethereum": (3400.0, -0.75),
    "solana": (160.0, 2.0),
    "cardano": (0.55, None),
}


def _chart_prices(base: float, days: int = 31) -> list[list[float]]:
    """Daily [unix_ms, price] pairs, oldest first, plus a same-day intraday point."""
    start = datetime(TODAY.year, TODAY.month, TODAY.day, tzinfo=timezone.utc) - timedelta(days=days - 1)
    points = [
        [(start + timedelta(days=i)).timestamp() * 1000, base + i]
        for i in range(days)
    ]
    latest = datetime(TODAY.year, TODAY.month, TODAY.day, 15, 30, tzinfo=timezone.utc)
    points.append([latest.timestamp() * 1000, base + days + 0.5])
    return points


def market_handler(request: httpx.Request) -> httpx.Response:
    """Serve the CoinGecko endpoints used by MarketDataClient."""
    path = request.url.path.removeprefix("/api/v3")

    if path == "/simple/price":
        ids = request.url.params.get("ids", "").split(",")
        body = {}
        for coin_id in ids:
            if coin_id in COIN_PRICES:
                price, change = COIN_PRICES[coin_id]
                body[coin_id] = {"usd": price}
                if change is not None:
                    body[coin_id]["usd_24h_change"] = change
        return httpx.Response(200, json=body)

    if path.endswith("/market_chart"):
        coin_id = path.split("/")[2]
        if coin_id not in COIN_PRICES:
            return httpx.Response(404, json={"error": "coin not found"})
        return httpx.Response(200, json={"prices": _chart_prices(COIN_PRICES[coin_id][0])})

    if path.startswith("/coins/") and path.count("/") == 2:
        coin_id = path.split("/")[2]
        if coin_id not in COIN_PRICES:
            return httpx.Response(404, json={"error": "coin not found"})
        return httpx.Response(200, json={
            "id": coin_id,
            "symbol": coin_id[:3],
            "name": coin_id.capitalize(),
            "description": {"en": f"<a href='https://example.com'>{coin_id.capitalize()}</a> is a coin."},
            "image": {"small": f"https://img.test/{coin_id}-small.png", "large": f"https://img.test/{coin_id}.png"},
            "market_cap_rank": 1,
            "genesis_date": "2009-01-03",
            "hashing_algorithm": "SHA-256",
        })

    return httpx.Response(404, json={"error": f"unexpected path {path}"})


@pytest.fixture
def market_http():
    """AsyncClient whose requests are answered by market_handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(market_handler))


@pytest.fixture
def market_client(market_http):
    from lib.market_data import MarketDataClient

    return MarketDataClient(market_http, MARKET_BASE_URL)


# =============================================================================
# Supabase Fake
# =============================================================================

class FakeSupabase:
    """In-memory stand-in for lib.supabase_client.SupabaseClient."""

    def __init__(self):
        self.watchlist_rows: list[dict[str, Any]] = []
        self.magic_links: list[tuple[str, str]] = []
        self.profiles: dict[str, dict[str, Any]] = {}
        self.teaser_updates: dict[str, tuple[float, float]] = {}
        self.healthy = True

    def ping(self) -> None:
        if not self.healthy:
            raise SupabaseClientError("connection refused")

    def fetch_watchlist(self, user_id):
        rows = [row for row in self.watchlist_rows if row["user_id"] == str(user_id)]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    def insert_watchlist_entry(self, user_id, item_slug, category, notes):
        row = {
            "id": str(uuid4()),
            "user_id": str(user_id),
            "item_slug": item_slug,
            "category": category,
            "notes": notes,
            "created_at": datetime(2025, 11, 8, 12, len(self.watchlist_rows), tzinfo=timezone.utc).isoformat(),
        }
        self.watchlist_rows.append(row)
        return row

    def fetch_user_profile(self, user_id):
        return self.profiles.get(str(user_id))

    def send_magic_link(self, email, redirect_to):
        self.magic_links.append((email, redirect_to))

    def verify_magic_link(self, token_hash, otp_type="email"):
        if token_hash != "valid-token-hash":
            raise SupabaseClientError(
                "Sign-in error: token expired",
                code="MAGIC_LINK_INVALID",
                status_code=401,
            )
        return {
            "access_token": "access-123",
            "refresh_token": "refresh-456",
            "expires_in": 3600,
            "user_id": "11111111-1111-1111-1111-111111111111",
            "email": "ada@example.com",
        }

    def update_item_teaser(self, slug, price, trend):
        self.teaser_updates[slug] = (price, trend)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


# =============================================================================
# Service / App Fixtures
# =============================================================================

@pytest.fixture
def track_service(catalog_file, market_client):
    """TrackService over the sample catalog, fake market data and the dev mock."""
    from core.services.catalog_service import StaticCatalogSource
    from core.services.price_sources import MarketDataPriceSource, MockPriceSource
    from core.services.track_service import TrackService

    return TrackService(
        catalog_source=StaticCatalogSource(catalog_file),
        market_source=MarketDataPriceSource(market_client),
        generic_source=MockPriceSource(today=lambda: TODAY),
        market=market_client,
    )


@pytest.fixture
def client(track_service, fake_supabase):
    """TestClient with shared resources replaced by test doubles."""
    from fastapi.testclient import TestClient

    from app.dependencies import get_supabase_client, get_track_service
    from app.main import app

    app.dependency_overrides[get_track_service] = lambda: track_service
    app.dependency_overrides[get_supabase_client] = lambda: fake_supabase
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return "22222222-2222-2222-2222-222222222222"


@pytest.fixture
def auth_headers(user_id):
    """Bearer header with an HS256 token signed by the test JWT secret."""
    from jose import jwt

    token = jwt.encode(
        {
            "sub": user_id,
            "email": "ada@example.com",
            "aud": "authenticated",
            "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
        },
        TEST_JWT_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}
