# =============================================================================
# agents/prompts/price_prompts.py - Price Oracle Prompts
# =============================================================================
# Prompts sent to the generative completion API. Every prompt asks for
# strictly-JSON output with an explicit schema so the answer can be parsed
# without heuristics.
#
# Usage:
#   prompt = build_item_prompt("1909-s-vdb-lincoln-cent", category="coins")
# =============================================================================

from __future__ import annotations

# Items that get crypto-flavoured sourcing hints even without a category
CRYPTO_HINT_SLUGS = frozenset({"bitcoin", "ethereum", "solana"})

# Where the model should look, per category
CATEGORY_SOURCES: dict[str, str] = {
    "crypto": "CoinMarketCap/TradingView",
    "stocks": "Yahoo Finance/Google Finance",
    "coins": "PCGS/Numista",
}
DEFAULT_SOURCES = "eBay/StockX/Wikimedia"


def _is_crypto(item: str, category: str | None) -> bool:
    return category == "crypto" or item.lower() in CRYPTO_HINT_SLUGS


def build_item_prompt(item: str, category: str | None = None, history_days: int = 30) -> str:
    """
    Prompt for a full item lookup (current price, history, specs).

    Args:
        item: Item name or slug as typed by the user
        category: Optional category hint
        history_days: How many days of history to ask for

    Returns:
        Prompt text requesting a single JSON object:
        { "currentPrice": number, "history": [...], "specs": { ... } }
    """
    category_part = f' in category "{category}"' if category else ""
    if _is_crypto(item, category):
        type_part = f" (crypto: {CATEGORY_SOURCES['crypto']} for USD + 24h)"
    else:
        type_part = f" (non-crypto: {CATEGORY_SOURCES.get(category or '', DEFAULT_SOURCES)})"

    return (
        f'For "{item}"{category_part}{type_part}: '
        f'Current avg USD price, {history_days}-day history ({{ "date": "YYYY-MM-DD", "price": number }}). '
        'Specs: "Name", "Description" (200 chars), "Image URL" (HTTPS high-res). '
        'Output ONLY JSON: { "currentPrice": number, "history": [...], "specs": { ... } }.'
    )


def build_teaser_prompt(slug: str, category: str) -> str:
    """
    Prompt for one teaser quote: current price and 24h percentage change.

    Returns:
        Prompt text requesting { "price": number, "trend": number }
    """
    sources = CATEGORY_SOURCES.get(category, DEFAULT_SOURCES)
    return (
        f'For "{slug}" in "{category}": Current USD price + 24h change %. '
        "Output STRICTLY valid JSON object - no other text, no explanations: "
        f'{{ "price": number, "trend": number }}. Sources: {sources}.'
    )
