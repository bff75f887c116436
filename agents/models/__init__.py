# =============================================================================
# agents/models/ - Completion Schemas
# =============================================================================
# Pydantic models describing what the price oracle expects back from the
# completion API:
# - completion.py: GenerativeTrackPayload (item lookup), TeaserQuote
# =============================================================================

from agents.models.completion import GenerativeTrackPayload, TeaserQuote

__all__ = [
    "GenerativeTrackPayload",
    "TeaserQuote",
]
