"""LLM provider factory from settings."""

from __future__ import annotations

from tgclaude.llm.base import LLMProvider
from tgclaude.utils.config import LLMSettings
from tgclaude.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o-mini",
}


def get_llm_from_settings(settings: LLMSettings) -> LLMProvider:
    """Build the completion provider named by ``settings.provider``.

    An unset ``settings.model`` falls back to that provider's default model.
    """
    provider = (settings.provider or "anthropic").lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(f"Unknown LLM provider: {provider}")
    model = settings.model or DEFAULT_MODELS[provider]
    if provider == "anthropic":
        from tgclaude.llm.anthropic import AnthropicProvider
        llm: LLMProvider = AnthropicProvider(
            api_key=settings.api_key,
            model=model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
        )
    else:
        from tgclaude.llm.openai import OpenAIProvider
        llm = OpenAIProvider(
            api_key=settings.api_key,
            model=model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
        )
    logger.info("llm_provider_created", provider=provider, model=model)
    return llm
