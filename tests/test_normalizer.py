# =============================================================================
# tests/test_normalizer.py - TrackResult Normalization Tests
# =============================================================================
# Tests for:
# - History filtering (bad dates, non-finite prices)
# - Ordering, de-duplication and the 30-entry cap
# - Placeholder image / specs backfill
# - Idempotency
# =============================================================================

from datetime import date, timedelta

from core.models.track import MAX_HISTORY_POINTS, PricePoint, TrackResult
from core.services.normalizer import (
    IMAGE_URL_KEY,
    backfill_specs,
    normalize_history,
    normalize_result,
    parse_price_point,
    placeholder_image_url,
)


class TestParsePricePoint:
    """Tests for coercing raw history entries."""

    def test_accepts_iso_date_and_number(self):
        point = parse_price_point({"date": "2025-11-08", "price": 1450})
        assert point == PricePoint(date=date(2025, 11, 8), price=1450.0)

    def test_accepts_timestamp_string(self):
        point = parse_price_point({"date": "2025-11-08T23:00:00Z", "price": "12.5"})
        assert point.date == date(2025, 11, 8)
        assert point.price == 12.5

    def test_rejects_unparseable_date(self):
        assert parse_price_point({"date": "last tuesday", "price": 10}) is None
        assert parse_price_point({"date": None, "price": 10}) is None

    def test_rejects_non_finite_or_non_numeric_price(self):
        assert parse_price_point({"date": "2025-11-08", "price": float("nan")}) is None
        assert parse_price_point({"date": "2025-11-08", "price": "inf"}) is None
        assert parse_price_point({"date": "2025-11-08", "price": "n/a"}) is None
        assert parse_price_point({"date": "2025-11-08", "price": True}) is None

    def test_rejects_non_mapping(self):
        assert parse_price_point(["2025-11-08", 10]) is None


class TestNormalizeHistory:
    """Tests for the history rules."""

    def test_sorted_newest_first(self):
        history = normalize_history([
            {"date": "2025-11-01", "price": 1},
            {"date": "2025-11-03", "price": 3},
            {"date": "2025-11-02", "price": 2},
        ])
        assert [p.date.day for p in history] == [3, 2, 1]

    def test_drops_invalid_entries(self):
        history = normalize_history([
            {"date": "2025-11-01", "price": 1},
            {"date": "garbage", "price": 2},
            {"date": "2025-11-02", "price": float("inf")},
            "not an entry",
        ])
        assert history == [PricePoint(date=date(2025, 11, 1), price=1.0)]

    def test_duplicate_dates_keep_last(self):
        history = normalize_history([
            {"date": "2025-11-01", "price": 1},
            {"date": "2025-11-01", "price": 5},
        ])
        assert history == [PricePoint(date=date(2025, 11, 1), price=5.0)]

    def test_capped_at_thirty(self):
        start = date(2025, 1, 1)
        entries = [{"date": (start + timedelta(days=i)).isoformat(), "price": i} for i in range(45)]

        history = normalize_history(entries)

        assert len(history) == MAX_HISTORY_POINTS
        assert history[0].date == start + timedelta(days=44)

    def test_empty(self):
        assert normalize_history([]) == []


class TestSpecs:
    """Tests for placeholder backfill."""

    def test_placeholder_image_is_deterministic(self):
        url = placeholder_image_url("air-jordan-1")
        assert url == placeholder_image_url("air-jordan-1")
        assert url.startswith("https://via.placeholder.com/")
        assert "AIR-JORDAN-1" in url

    def test_backfill_fills_missing_and_blank(self):
        specs = backfill_specs({"Name": "  ", "Mint": "Denver"}, "1909-s-vdb-cent")

        assert specs["Name"] == "1909 S Vdb Cent"
        assert specs["Mint"] == "Denver"
        assert "1909 s vdb cent" in specs["Description"]
        assert specs[IMAGE_URL_KEY] == placeholder_image_url("1909-s-vdb-cent")

    def test_backfill_keeps_existing_values(self):
        specs = backfill_specs(
            {"Name": "Rolex", "Description": "Dive watch", IMAGE_URL_KEY: "https://img/x.png"},
            "rolex-submariner",
        )
        assert specs == {"Name": "Rolex", "Description": "Dive watch", IMAGE_URL_KEY: "https://img/x.png"}


class TestNormalizeResult:
    """Tests for normalize_result."""

    def _raw(self):
        return TrackResult(
            current_price=10.0,
            history=[
                PricePoint(date=date(2025, 11, 1), price=1.0),
                PricePoint(date=date(2025, 11, 3), price=3.0),
                PricePoint(date=date(2025, 11, 2), price=2.0),
            ],
            specs={"Name": "Widget"},
        )

    def test_synthesizes_image_url(self):
        result = normalize_result(self._raw(), "widget")
        assert result.specs[IMAGE_URL_KEY] == placeholder_image_url("widget")
        assert result.specs["Name"] == "Widget"

    def test_keeps_existing_image_url(self):
        raw = self._raw()
        raw.specs[IMAGE_URL_KEY] = "https://img.test/widget.png"
        assert normalize_result(raw, "widget").specs[IMAGE_URL_KEY] == "https://img.test/widget.png"

    def test_idempotent(self):
        once = normalize_result(self._raw(), "widget")
        twice = normalize_result(once, "widget")
        assert once == twice

    def test_does_not_mutate_input(self):
        raw = self._raw()
        normalize_result(raw, "widget")
        assert IMAGE_URL_KEY not in raw.specs
        assert raw.history[0].date == date(2025, 11, 1)
