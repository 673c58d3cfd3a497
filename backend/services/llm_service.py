"""
Completion service for the ingestion passes.

Wraps google-generativeai with the two call shapes the pipeline needs:
- complete(): one request, one text blob (structure analysis)
- stream():   one request, text deltas in arrival order (content extraction)
"""

import asyncio
import logging
from typing import AsyncIterable, AsyncIterator, Optional

import google.generativeai as genai

from core.constants import LLM_TEMPERATURE
from core.errors import LLMError
from core.model_state import model_config

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = LLM_TEMPERATURE


class LLMService:
    """
    Gemini completion client keyed by model tier ("analysis" / "extraction").

    The API key comes from the constructor, else from model_config
    (GEMINI_API_KEY or a runtime override).
    """

    def __init__(self, api_key: Optional[str] = None, temperature: float = DEFAULT_TEMPERATURE):
        self._api_key = api_key
        self.temperature = temperature

    def _get_api_key(self) -> str:
        key = self._api_key or model_config.get_api_key()
        if not key:
            raise LLMError("API key not configured. Set GEMINI_API_KEY.")
        return key

    def _build_model(self, tier: str, system: str) -> genai.GenerativeModel:
        genai.configure(api_key=self._get_api_key())
        model_name = model_config.get_model(tier)
        logger.info(f"Using model: {model_name} for {tier}")
        return genai.GenerativeModel(model_name, system_instruction=system)

    def _generation_config(self, tier: str, max_output_tokens: Optional[int], json_mode: bool) -> dict:
        config = {
            "temperature": self.temperature,
            "max_output_tokens": max_output_tokens or model_config.get_max_tokens(tier),
        }
        if json_mode:
            config["response_mime_type"] = "application/json"
        return config

    async def complete(
        self,
        prompt: str,
        *,
        system: str,
        tier: str = "analysis",
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        json_mode: bool = True,
    ) -> str:
        """
        Single-shot completion.

        Args:
            prompt: The user message
            system: System instruction
            tier: Model tier key in model_config
            max_output_tokens: Override the tier's output budget
            timeout: Deadline in seconds for the whole call
            json_mode: Ask the model for a JSON response

        Returns:
            Response text

        Raises:
            LLMError: On any service error, blocked response, or timeout
        """
        model = self._build_model(tier, system)
        config = self._generation_config(tier, max_output_tokens, json_mode)

        try:
            response = await asyncio.wait_for(
                model.generate_content_async(prompt, generation_config=config),
                timeout=timeout,
            )
            return response.text
        except asyncio.TimeoutError:
            raise LLMError(f"Completion timed out after {timeout}s", details={"tier": tier})
        except Exception as e:
            logger.error(f"LLM Error ({tier}): {type(e).__name__}: {e}")
            raise LLMError(f"Completion failed: {type(e).__name__}", details={"tier": tier}) from e

    async def stream(
        self,
        prompt: str,
        *,
        system: str,
        tier: str = "extraction",
        max_output_tokens: Optional[int] = None,
        json_mode: bool = True,
    ) -> AsyncIterator[str]:
        """
        Streamed completion yielding text deltas in delivery order.

        Raises:
            LLMError: On any service error while opening or reading the stream
        """
        model = self._build_model(tier, system)
        config = self._generation_config(tier, max_output_tokens, json_mode)

        try:
            response = await model.generate_content_async(
                prompt, generation_config=config, stream=True
            )
            async for chunk in response:
                # Chunks without parts (safety/finish markers) carry no text
                if not chunk.parts:
                    continue
                yield chunk.text
        except Exception as e:
            logger.error(f"LLM stream error ({tier}): {type(e).__name__}: {e}")
            raise LLMError(f"Streamed completion failed: {type(e).__name__}", details={"tier": tier}) from e


async def accumulate_stream(chunks: AsyncIterable[str]) -> str:
    """
    Concatenate streamed text deltas in arrival order.

    The caller must not parse anything until this returns: a partial buffer
    is not a valid response.
    """
    parts = []
    async for chunk in chunks:
        if chunk:
            parts.append(chunk)
    return "".join(parts)


def get_llm_service() -> LLMService:
    """FastAPI-style dependency helper."""
    return LLMService()
