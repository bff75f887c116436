# =============================================================================
# agents/price_oracle.py - Generative Price Oracle
# =============================================================================
# Prices items that no structured market-data source covers (collectibles,
# sneakers, coins, ...) by asking a chat-completion model for a strictly-JSON
# answer.
#
# The oracle:
# 1. Builds a prompt embedding the item name and optional category
# 2. Calls the completion API (xAI Grok through the OpenAI SDK)
# 3. Parses the JSON answer and validates its shape
#
# Completeness checks and placeholder backfill happen in
# core.services.price_sources.GenerativePriceSource.
#
# Failures map onto the API error taxonomy:
# - non-2xx, timeout, connection error -> UpstreamUnavailableError
# - invalid JSON or wrong shape        -> MalformedUpstreamResponseError
# No call is retried.
#
# Usage:
#   oracle = PriceOracleAgent.from_settings(settings)
#   payload = await oracle.lookup_item("1909 S VDB Lincoln Cent", category="coins")
# =============================================================================

from __future__ import annotations

import json
import logging

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI
from pydantic import ValidationError

from app.config import Settings
from app.exceptions import (
    ConfigurationError,
    MalformedUpstreamResponseError,
    UpstreamUnavailableError,
)
from agents.models.completion import GenerativeTrackPayload, TeaserQuote
from agents.prompts.price_prompts import build_item_prompt, build_teaser_prompt
from lib.utils import extract_json_object, strip_code_fences

# Set up logging for this module
logger = logging.getLogger(__name__)

SERVICE_NAME = "Grok API"

# Teaser answers are a two-field object
TEASER_MAX_TOKENS = 100


class PriceOracleAgent:
    """
    Generative item pricer.

    Example:
        oracle = PriceOracleAgent(api_key="xai-...")
        payload = await oracle.lookup_item("Air Jordan 1 Chicago")
        print(payload.current_price, payload.specs)

    Attributes:
        model: Completion model id (default from settings)
        temperature: Sampling temperature
        max_tokens: Completion budget for full lookups
        history_days: Days of history requested in the prompt
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.x.ai/v1",
        model: str = "grok-3",
        temperature: float = 0.1,
        max_tokens: int = 1500,
        timeout: float = 10.0,
        history_days: int = 30,
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize the oracle.

        Args:
            api_key: Bearer token for the completion API
            base_url: OpenAI-compatible API root
            model: Model id
            temperature: Sampling temperature
            max_tokens: Completion budget for full lookups
            timeout: Abort each call after this many seconds
            history_days: Days of history requested
            client: Pre-built client (tests inject a mock here)

        Raises:
            ConfigurationError: If neither api_key nor client is given
        """
        if client is None:
            if not api_key:
                raise ConfigurationError("GROK_API_KEY")
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
            )

        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.history_days = history_days

        logger.info(f"PriceOracleAgent initialized with model={self.model}, temp={self.temperature}")

    @classmethod
    def from_settings(cls, settings: Settings, client: AsyncOpenAI | None = None) -> "PriceOracleAgent":
        return cls(
            api_key=settings.GROK_API_KEY,
            base_url=settings.GROK_BASE_URL,
            model=settings.GROK_MODEL,
            temperature=settings.GROK_TEMPERATURE,
            max_tokens=settings.GROK_MAX_TOKENS,
            timeout=settings.GROK_TIMEOUT_SECONDS,
            history_days=settings.MARKET_HISTORY_DAYS,
            client=client,
        )

    # -------------------------------------------------------------------------
    # Completion Call
    # -------------------------------------------------------------------------

    async def _complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        """
        Send one user prompt and return the raw message text.

        Raises:
            UpstreamUnavailableError: On non-2xx, timeout or connection failure
            MalformedUpstreamResponseError: If the answer has no message text
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except APIStatusError as e:
            logger.warning(f"{SERVICE_NAME} returned {e.status_code}")
            raise UpstreamUnavailableError(SERVICE_NAME, status=e.status_code) from e
        except APITimeoutError as e:
            logger.warning(f"{SERVICE_NAME} timed out")
            raise UpstreamUnavailableError(SERVICE_NAME, error="timeout") from e
        except APIConnectionError as e:
            logger.warning(f"{SERVICE_NAME} connection failed: {e}")
            raise UpstreamUnavailableError(SERVICE_NAME, error=str(e)) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, "response has no choices") from e
        if not content or not content.strip():
            raise MalformedUpstreamResponseError(SERVICE_NAME, "empty message content")

        logger.debug(f"{SERVICE_NAME} response: {content[:200]}...")
        return content

    # -------------------------------------------------------------------------
    # Item Lookup
    # -------------------------------------------------------------------------

    async def lookup_item(self, item: str, category: str | None = None) -> GenerativeTrackPayload:
        """
        Ask the completion API for an item's price, history and specs.

        Args:
            item: Name as typed by the user
            category: Optional category hint

        Returns:
            Shape-validated payload; fields may still be missing

        Raises:
            UpstreamUnavailableError: On API failure
            MalformedUpstreamResponseError: If the answer isn't a JSON object
                of the expected shape
        """
        prompt = build_item_prompt(item, category, self.history_days)
        text = await self._complete(prompt, self.max_tokens, self.temperature)
        return self._parse_item_response(text)

    def _parse_item_response(self, text: str) -> GenerativeTrackPayload:
        """
        Parse the model's answer into a GenerativeTrackPayload.

        Raises:
            MalformedUpstreamResponseError: If the JSON is invalid or mis-shaped
        """
        try:
            data = json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, f"Invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedUpstreamResponseError(SERVICE_NAME, "expected a JSON object")

        try:
            return GenerativeTrackPayload.model_validate(data)
        except ValidationError as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, str(e)) from e

    # -------------------------------------------------------------------------
    # Teaser Quotes
    # -------------------------------------------------------------------------

    async def quote_teaser(self, slug: str, category: str) -> TeaserQuote:
        """
        Current price and 24h change for one catalog item.

        The answer may carry prose around the JSON object; the first object
        found is used.

        Raises:
            UpstreamUnavailableError: On API failure
            MalformedUpstreamResponseError: If no valid JSON object is found
        """
        text = await self._complete(
            build_teaser_prompt(slug, category),
            max_tokens=TEASER_MAX_TOKENS,
            temperature=0.0,
        )
        try:
            return TeaserQuote.model_validate(extract_json_object(text))
        except (ValueError, ValidationError) as e:
            raise MalformedUpstreamResponseError(SERVICE_NAME, f"{e}: {text[:100]}") from e
