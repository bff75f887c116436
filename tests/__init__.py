# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the TrackAura API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_normalizer.py, test_track_service.py: Lookup routing and results
# - test_catalog.py, test_teaser_refresh.py: Category catalog and teasers
# - test_market_data.py, test_price_oracle.py, test_alpha_vantage.py:
#   Upstream clients against mocked transports
# - test_api.py, test_auth.py, test_watchlist.py: Endpoint tests
#
# Run tests with: poetry run pytest
# =============================================================================
