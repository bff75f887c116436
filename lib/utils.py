# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import json
import re
from typing import Any

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
_FENCED_BLOCK = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


# =============================================================================
# Slug Utilities
# =============================================================================

def slugify(value: str) -> str:
    """
    Turn a display name into a slug.

    Lowercases, collapses every run of non-alphanumerics into one hyphen,
    and trims hyphens from both ends.

    Example:
        slugify("Tech Giants")        # "tech-giants"
        slugify("  1909-S VDB Cent ") # "1909-s-vdb-cent"
    """
    return _NON_SLUG_CHARS.sub("-", value.strip().lower()).strip("-")


def title_from_slug(slug: str) -> str:
    """
    Human-readable name from a slug.

    Example:
        title_from_slug("unobtainium-widget-9000")  # "Unobtainium Widget 9000"
    """
    return " ".join(word.capitalize() for word in slug.replace("_", "-").split("-") if word)


# =============================================================================
# JSON Utilities
# =============================================================================

def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence that chat models like to add."""
    text = text.strip()
    match = _FENCED_BLOCK.match(text)
    return match.group(1) if match else text


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Find and parse the first JSON object embedded in free text.

    Chat models sometimes wrap the answer in prose ("Sure! {...}"). This scans
    for the first '{' that starts a decodable object.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    decoder = json.JSONDecoder()
    text = strip_code_fences(text)
    for match in re.finditer(r"\{", text):
        try:
            value, _ = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    raise ValueError("No valid JSON object found")
