"""Async client for an OpenAI-compatible chat endpoint (Ollama by default)."""

import logging
from typing import Optional

from openai import AsyncOpenAI

from ..config import LLMConfig, config
from .schemas import GenerationConfig

logger = logging.getLogger(__name__)


class LLMClient:
    """Sends a single prompt to the model and returns its raw text reply."""

    def __init__(self, settings: Optional[LLMConfig] = None) -> None:
        self._settings = settings or config.llm
        self._client: Optional[AsyncOpenAI] = None

    async def initialize(self) -> None:
        """Initialize the LLM client."""
        if self._client is not None:
            return
        # No client-side retries: a failed call goes straight to the keyword fallback.
        self._client = AsyncOpenAI(
            base_url=f"{self._settings.base_url}/v1",
            api_key=self._settings.api_key,
            timeout=self._settings.timeout,
            max_retries=0,
        )

    def generation_config(self) -> GenerationConfig:
        return GenerationConfig(
            temperature=self._settings.temperature,
            top_p=self._settings.top_p,
            top_k=self._settings.top_k,
            max_tokens=self._settings.max_tokens,
        )

    async def generate(self, prompt: str, generation: GenerationConfig) -> str:
        """Run one chat completion and return the message text."""
        if not self._client:
            await self.initialize()

        response = await self._client.chat.completions.create(
            model=self._settings.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=generation.temperature,
            top_p=generation.top_p,
            max_tokens=generation.max_tokens,
            extra_body={"top_k": generation.top_k},
        )
        content = response.choices[0].message.content or ""
        logger.debug("Model reply: %s", content)
        return content

    async def close(self) -> None:
        """Clean up LLM client resources."""
        if self._client:
            await self._client.close()
            self._client = None
