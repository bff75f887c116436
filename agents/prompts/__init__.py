# =============================================================================
# agents/prompts/ - Prompts for the Price Oracle
# =============================================================================
# - price_prompts.py: Item lookup and teaser refresh prompts
#
# Prompts ask for strictly-JSON answers so they can be validated with the
# schemas in agents/models/.
# =============================================================================

from agents.prompts.price_prompts import build_item_prompt, build_teaser_prompt

__all__ = [
    "build_item_prompt",
    "build_teaser_prompt",
]
