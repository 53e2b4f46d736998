"""LLM provider abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class LLMResponse:
    """Reply text and token usage reported by the provider."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    finish_reason: str | None = None

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class LLMProvider(ABC):
    """Abstract base for completion providers (Anthropic, OpenAI)."""

    name = "llm"

    @abstractmethod
    async def generate(
        self,
        messages: list[dict[str, Any]],
        system: str | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Complete the conversation. ``messages`` alternate user/assistant and end
        with the new user turn.

        Raises:
            UpstreamError: a subclass matching the failure (auth, rate limit,
                server error, timeout).
        """
        pass
