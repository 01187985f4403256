"""LLM clients used by the explorer.

Supports OpenAI-compatible chat models and Anthropic (Claude) models. A client
is only built when a credential for the model's provider is configured;
otherwise the explorer runs in mock mode.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "gpt-4o"
DEFAULT_TEMPERATURE = 0.5
DEFAULT_MAX_TOKENS = 1500

# prefixes used by the available-models catalogue ids
_CATALOGUE_PREFIXES = {
    "openai-": "openai",
    "anthropic-": "anthropic",
}


class LLMCallError(Exception):
    """Raised when a provider call fails."""


class LLMClient(Protocol):
    """Anything that turns a prompt into completion text."""

    async def complete(self, prompt: str, model: str) -> str:
        ...

    async def aclose(self) -> None:
        ...


class OpenAIChatClient:
    """Chat completions against OpenAI or an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int | None = DEFAULT_MAX_TOKENS,
    ) -> None:
        import openai

        self._client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url or None)
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, prompt: str, model: str) -> str:
        params = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }
        if self.max_tokens:
            params["max_tokens"] = self.max_tokens

        try:
            response = await self._client.chat.completions.create(**params)
        except Exception as e:
            raise LLMCallError(f"OpenAI API error: {e}") from e

        return response.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self._client.close()


class AnthropicChatClient:
    """Messages API against Anthropic."""

    def __init__(
        self,
        api_key: str,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int | None = DEFAULT_MAX_TOKENS,
    ) -> None:
        import anthropic

        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, prompt: str, model: str) -> str:
        try:
            # anthropic requires max_tokens
            response = await self._client.messages.create(
                model=model,
                max_tokens=self.max_tokens or 4096,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            raise LLMCallError(f"Anthropic API error: {e}") from e

        if not response.content:
            return ""
        return "".join(block.text for block in response.content if hasattr(block, "text"))

    async def aclose(self) -> None:
        await self._client.close()


def resolve_model(model_id: str | None) -> tuple[str, str]:
    """Split a model id into ``(provider, model_name)``.

    Accepts raw provider model names (``gpt-4o``, ``claude-3-5-sonnet-latest``)
    and catalogue ids (``openai-gpt-4o``).
    """
    model_id = (model_id or DEFAULT_MODEL_ID).strip()
    lowered = model_id.lower()
    for prefix, provider in _CATALOGUE_PREFIXES.items():
        if lowered.startswith(prefix):
            return provider, model_id[len(prefix):]
    if lowered.startswith("claude"):
        return "anthropic", model_id
    return "openai", model_id


def create_llm_client(
    provider: str,
    openai_api_key: str | None = None,
    openai_base_url: str | None = None,
    anthropic_api_key: str | None = None,
) -> LLMClient | None:
    """Build the client for a provider, or None when it has no credential."""
    if provider == "anthropic":
        if not anthropic_api_key:
            logger.info("No Anthropic credential configured; using mock mode")
            return None
        return AnthropicChatClient(api_key=anthropic_api_key)

    if not openai_api_key:
        logger.info("No OpenAI credential configured; using mock mode")
        return None
    return OpenAIChatClient(api_key=openai_api_key, base_url=openai_base_url)
