"""Anthropic Claude provider."""

from __future__ import annotations

import os
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from tgclaude.core.errors import UpstreamError, UpstreamTimeout, error_for_status
from tgclaude.llm.base import LLMProvider, LLMResponse
from tgclaude.utils.logging import get_logger

logger = get_logger(__name__)


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API; SDK errors are re-raised as UpstreamError subclasses."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        temperature: float = 0.7,
        max_tokens: int = 4000,
        timeout: float = 60.0,
        client: Any = None,
    ) -> None:
        self.client = client or AsyncAnthropic(api_key=api_key or os.getenv("ANTHROPIC_API_KEY"))
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def generate(
        self,
        messages: list[dict[str, Any]],
        system: str | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Call the Messages API with the system prompt passed separately."""
        request: dict[str, Any] = {
            "model": kwargs.get("model") or self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": messages,
            "temperature": kwargs.get("temperature", self.temperature),
        }
        if system:
            request["system"] = system
        timeout = kwargs.get("timeout", self.timeout)
        try:
            response = await self.client.messages.create(**request, timeout=timeout)
        except anthropic.APITimeoutError as e:
            logger.warning("anthropic_timeout", timeout=timeout)
            raise UpstreamTimeout(str(e)) from e
        except anthropic.APIStatusError as e:
            logger.warning("anthropic_status_error", status=e.status_code, error=str(e))
            raise error_for_status(e.status_code, str(e)) from e
        except anthropic.APIConnectionError as e:
            logger.warning("anthropic_connection_error", error=str(e))
            raise UpstreamError(str(e)) from e
        content_parts = [
            getattr(block, "text", "") or ""
            for block in getattr(response, "content", [])
            if getattr(block, "type", None) == "text"
        ]
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content="".join(content_parts).strip(),
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
            finish_reason=getattr(response, "stop_reason", None),
        )
