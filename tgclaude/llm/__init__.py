"""LLM provider abstractions."""

from tgclaude.llm.base import LLMProvider, LLMResponse

__all__ = ["LLMProvider", "LLMResponse"]
