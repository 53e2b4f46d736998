"""OpenAI chat-completions provider."""

from __future__ import annotations

import os
from typing import Any

import openai
from openai import AsyncOpenAI

from tgclaude.core.errors import UpstreamError, UpstreamTimeout, error_for_status
from tgclaude.llm.base import LLMProvider, LLMResponse
from tgclaude.utils.logging import get_logger

logger = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI API provider using chat completions; the system prompt goes first in messages."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 4000,
        timeout: float = 60.0,
        client: Any = None,
    ) -> None:
        self.client = client or AsyncOpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"))
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
        if system:
            messages = [{"role": "system", "content": system}, *messages]
        request: dict[str, Any] = {
            "model": kwargs.get("model") or self.model,
            "messages": messages,
            "temperature": kwargs.get("temperature", self.temperature),
            "max_tokens": max_tokens or self.max_tokens,
        }
        timeout = kwargs.get("timeout", self.timeout)
        try:
            response = await self.client.chat.completions.create(**request, timeout=timeout)
        except openai.APITimeoutError as e:
            logger.warning("openai_timeout", timeout=timeout)
            raise UpstreamTimeout(str(e)) from e
        except openai.APIStatusError as e:
            logger.warning("openai_status_error", status=e.status_code, error=str(e))
            raise error_for_status(e.status_code, str(e)) from e
        except openai.APIConnectionError as e:
            logger.warning("openai_connection_error", error=str(e))
            raise UpstreamError(str(e)) from e
        choice = response.choices[0] if response.choices else None
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=((choice.message.content if choice else "") or "").strip(),
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            finish_reason=choice.finish_reason if choice else "error",
        )
