# =============================================================================
# tests/test_watchlist.py - Watchlist Tests
# =============================================================================
# Tests for:
# - WatchlistService (add, list, live enrichment)
# - POST/GET /api/v1/watchlist (auth required)
# =============================================================================

import asyncio

from core.models.watchlist import WatchlistCreate
from core.services.normalizer import placeholder_image_url
from core.services.watchlist_service import WatchlistService


# =============================================================================
# Service Tests
# =============================================================================

class TestWatchlistService:
    """Tests for WatchlistService with the Supabase fake."""

    def test_add_normalizes_slug(self, fake_supabase, track_service, user_id):
        service = WatchlistService(fake_supabase, track_service)

        entry = service.add_entry(user_id, WatchlistCreate(item_slug="  Bitcoin ", category="crypto"))

        assert entry.item_slug == "bitcoin"
        assert entry.user_id == user_id
        assert fake_supabase.watchlist_rows[0]["item_slug"] == "bitcoin"

    def test_list_newest_first(self, fake_supabase, track_service, user_id):
        service = WatchlistService(fake_supabase, track_service)
        service.add_entry(user_id, WatchlistCreate(item_slug="bitcoin"))
        service.add_entry(user_id, WatchlistCreate(item_slug="ethereum"))
        service.add_entry("someone-else", WatchlistCreate(item_slug="solana"))

        entries = service.list_entries(user_id)

        assert [entry.item_slug for entry in entries] == ["ethereum", "bitcoin"]

    def test_live_prices(self, fake_supabase, track_service, user_id):
        service = WatchlistService(fake_supabase, track_service)
        service.add_entry(user_id, WatchlistCreate(item_slug="bitcoin", category="crypto"))
        service.add_entry(user_id, WatchlistCreate(item_slug="rolex-submariner", category="watches"))

        items = asyncio.run(service.list_with_prices(user_id))

        by_slug = {item.item_slug: item for item in items}
        assert by_slug["bitcoin"].current_price == 95000.0
        assert by_slug["bitcoin"].image_url == "https://img.test/bitcoin.png"
        assert by_slug["bitcoin"].trend is not None
        assert by_slug["rolex-submariner"].current_price == 9500.0

    def test_failed_lookup_leaves_price_empty(self, fake_supabase, track_service, user_id):
        service = WatchlistService(fake_supabase, track_service)
        service.add_entry(user_id, WatchlistCreate(item_slug="bitcoin"))
        service.add_entry(user_id, WatchlistCreate(item_slug="polkadot"))

        items = asyncio.run(service.list_with_prices(user_id))

        by_slug = {item.item_slug: item for item in items}
        assert by_slug["bitcoin"].current_price == 95000.0
        assert by_slug["polkadot"].current_price is None
        assert by_slug["polkadot"].trend is None
        assert by_slug["polkadot"].image_url == placeholder_image_url("polkadot")

    def test_empty_watchlist(self, fake_supabase, track_service, user_id):
        service = WatchlistService(fake_supabase, track_service)
        assert asyncio.run(service.list_with_prices(user_id)) == []


# =============================================================================
# Endpoint Tests
# =============================================================================

class TestWatchlistEndpoints:
    """Tests for /api/v1/watchlist."""

    def test_requires_auth(self, client):
        assert client.get("/api/v1/watchlist").status_code in (401, 403)
        assert client.post("/api/v1/watchlist", json={"itemSlug": "bitcoin"}).status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.get("/api/v1/watchlist", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_add_and_list(self, client, auth_headers, user_id):
        created = client.post(
            "/api/v1/watchlist",
            json={"itemSlug": "bitcoin", "category": "crypto", "notes": "long term"},
            headers=auth_headers,
        )

        assert created.status_code == 201
        assert created.json()["itemSlug"] == "bitcoin"
        assert created.json()["userId"] == user_id

        listed = client.get("/api/v1/watchlist", headers=auth_headers)

        assert listed.status_code == 200
        data = listed.json()
        assert data["total"] == 1
        assert data["items"][0]["notes"] == "long term"
        assert data["items"][0]["currentPrice"] is None

    def test_list_live(self, client, auth_headers):
        client.post("/api/v1/watchlist", json={"itemSlug": "ethereum"}, headers=auth_headers)

        data = client.get("/api/v1/watchlist", params={"live": "true"}, headers=auth_headers).json()

        assert data["items"][0]["currentPrice"] == 3400.0
        assert data["items"][0]["imageUrl"] == "https://img.test/ethereum.png"

    def test_empty_slug_is_422(self, client, auth_headers):
        response = client.post("/api/v1/watchlist", json={"itemSlug": ""}, headers=auth_headers)
        assert response.status_code == 422
