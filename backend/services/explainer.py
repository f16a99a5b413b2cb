"""
Natural-language waveform explanations via the Anthropic Messages API.

Usage:
    explainer = WaveformExplainer(api_key)
    text = await explainer.explain(params, result)
"""

import asyncio
import logging
from typing import Optional

from anthropic import Anthropic

from backend.ai.prompts import build_explanation_messages
from backend.config import ExplainerConfig
from engine.circuit import SimulationParameters
from engine.waveform import SimulationResult

logger = logging.getLogger(__name__)


class ExplanationError(Exception):
    """The explanation service could not be reached or returned nothing usable."""


class ExplainerNotConfigured(ExplanationError):
    """No API key is available."""


class WaveformExplainer:
    def __init__(
        self,
        api_key: Optional[str],
        config: Optional[ExplainerConfig] = None,
        client: Optional[Anthropic] = None,
    ):
        self._api_key = api_key
        self.config = config or ExplainerConfig()
        self._client = client

    def _get_client(self) -> Anthropic:
        if self._client is None:
            if not self._api_key:
                raise ExplainerNotConfigured("ANTHROPIC_API_KEY not configured")
            self._client = Anthropic(api_key=self._api_key)
        return self._client

    def explain_sync(self, params: SimulationParameters, result: SimulationResult) -> str:
        """Blocking request; returns the explanation text."""
        client = self._get_client()
        system, messages = build_explanation_messages(params, result)

        try:
            response = client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                system=system,
                messages=messages,
            )
        except Exception as e:
            logger.warning("Explanation request failed", exc_info=True)
            raise ExplanationError(
                "Failed to communicate with the explanation service. "
                "Please check your API key and network connection."
            ) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        ).strip()
        if not text:
            raise ExplanationError("The explanation service returned an empty response.")
        return text

    async def explain(self, params: SimulationParameters, result: SimulationResult) -> str:
        """Run the request in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.explain_sync, params, result)
