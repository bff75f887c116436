# =============================================================================
# tests/test_utils.py - Shared Utility Tests
# =============================================================================

import pytest

from lib.utils import extract_json_object, slugify, strip_code_fences, title_from_slug


class TestSlugify:
    """Tests for slugify."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Tech Giants", "tech-giants"),
            ("  1909-S VDB Cent ", "1909-s-vdb-cent"),
            ("TECH--GIANTS", "tech-giants"),
            ("Rolex Submariner (2020)", "rolex-submariner-2020"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, value, expected):
        assert slugify(value) == expected

    def test_title_from_slug(self):
        assert title_from_slug("unobtainium-widget-9000") == "Unobtainium Widget 9000"


class TestJsonExtraction:
    """Tests for pulling JSON out of chat answers."""

    def test_plain_object(self):
        assert extract_json_object('{"price": 1}') == {"price": 1}

    def test_fenced_block(self):
        text = '```json\n{"price": 2, "trend": -1.5}\n```'

        assert strip_code_fences(text) == '{"price": 2, "trend": -1.5}'
        assert extract_json_object(text) == {"price": 2, "trend": -1.5}

    def test_object_inside_prose(self):
        text = 'Sure! Here is the data: {"currentPrice": 10, "specs": {"Name": "X"}} Let me know.'

        assert extract_json_object(text) == {"currentPrice": 10, "specs": {"Name": "X"}}

    def test_skips_undecodable_braces(self):
        assert extract_json_object('{not json} then {"a": 2}') == {"a": 2}

    def test_no_object(self):
        with pytest.raises(ValueError):
            extract_json_object("[1, 2, 3]")
