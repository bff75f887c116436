# =============================================================================
# agents/models/completion.py - Generative Completion Schemas
# =============================================================================
# Shapes the price oracle expects back from the completion API.
#
# Validation is two-step:
# - Shape: pydantic rejects values of the wrong type (history as a string,
#   specs as a list, price as "n/a") -> MalformedUpstreamResponseError
# - Completeness: missing or unusable required fields
#   -> IncompleteUpstreamDataError (see GenerativePriceSource)
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerativeTrackPayload(BaseModel):
    """
    Parsed item lookup answer.

    Example:
        {
            "currentPrice": 1450.0,
            "history": [{"date": "2025-11-08", "price": 1450.0}],
            "specs": {"Name": "1909-S VDB Lincoln Cent", "Mint": "San Francisco"}
        }
    """

    current_price: float | None = Field(default=None, alias="currentPrice")
    history: list[Any] | None = None
    specs: dict[str, Any] | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("specs")
    @classmethod
    def stringify_specs(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        """Specs are a flat string map; numbers become strings, nulls are dropped."""
        if value is None:
            return None
        return {str(key): str(val) for key, val in value.items() if val is not None}


class TeaserQuote(BaseModel):
    """Teaser refresh answer: current price and 24h percentage change."""

    price: float | None = None
    trend: float | None = None
