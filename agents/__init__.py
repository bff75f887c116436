# =============================================================================
# agents/ - Generative Agent Definitions
# =============================================================================
# This package wraps the chat-completion model used to price items no
# market-data source covers:
# - price_oracle.py: PriceOracleAgent - item lookups and teaser quotes
#
# Models:
# - models/completion.py: Shapes expected back from the model
#
# Prompts:
# - prompts/price_prompts.py: Item and teaser prompt builders
# =============================================================================

from agents.price_oracle import PriceOracleAgent
from agents.models.completion import GenerativeTrackPayload, TeaserQuote

__all__ = [
    # Agent
    "PriceOracleAgent",
    # Models
    "GenerativeTrackPayload",
    "TeaserQuote",
]
