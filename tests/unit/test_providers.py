"""Unit tests for the completion providers with stubbed SDK clients."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import openai
import pytest

from tgclaude.core.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamServerError,
    UpstreamTimeout,
)
from tgclaude.llm.anthropic import AnthropicProvider
from tgclaude.llm.openai import OpenAIProvider
from tgclaude.utils.config import LLMSettings, load_settings
from tgclaude.utils.llm_factory import get_llm_from_settings

REQUEST = httpx.Request("POST", "https://api.example.test/v1/messages")


def _response(status):
    return httpx.Response(status, request=REQUEST)


def _anthropic_client(result):
    create = AsyncMock(side_effect=result) if isinstance(result, BaseException) else AsyncMock(return_value=result)
    return SimpleNamespace(messages=SimpleNamespace(create=create))


def _openai_client(result):
    create = AsyncMock(side_effect=result) if isinstance(result, BaseException) else AsyncMock(return_value=result)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.mark.asyncio
async def test_anthropic_generate_returns_text_and_tokens():
    message = SimpleNamespace(
        content=[SimpleNamespace(type="text", text="Hello "), SimpleNamespace(type="text", text="there")],
        usage=SimpleNamespace(input_tokens=12, output_tokens=8),
        stop_reason="end_turn",
    )
    client = _anthropic_client(message)
    provider = AnthropicProvider(client=client, max_tokens=4000, timeout=30)

    response = await provider.generate([{"role": "user", "content": "hi"}], system="Be kind.")

    assert response.content == "Hello there"
    assert response.total_tokens == 20
    assert response.finish_reason == "end_turn"
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["system"] == "Be kind."
    assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert kwargs["max_tokens"] == 4000
    assert kwargs["timeout"] == 30


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected",
    [
        (anthropic.AuthenticationError("bad key", response=_response(401), body=None), UpstreamAuthError),
        (anthropic.RateLimitError("slow down", response=_response(429), body=None), UpstreamRateLimited),
        (anthropic.InternalServerError("boom", response=_response(500), body=None), UpstreamServerError),
        (anthropic.APITimeoutError(request=REQUEST), UpstreamTimeout),
        (anthropic.APIConnectionError(request=REQUEST), UpstreamError),
    ],
)
async def test_anthropic_errors_are_mapped(error, expected):
    provider = AnthropicProvider(client=_anthropic_client(error))
    with pytest.raises(expected) as exc_info:
        await provider.generate([{"role": "user", "content": "hi"}])
    assert type(exc_info.value) is expected


@pytest.mark.asyncio
async def test_openai_prepends_system_prompt():
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=" Hi! "), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=7, completion_tokens=3),
    )
    client = _openai_client(completion)
    provider = OpenAIProvider(client=client)

    response = await provider.generate([{"role": "user", "content": "hi"}], system="Be kind.", max_tokens=50)

    assert response.content == "Hi!"
    assert response.total_tokens == 10
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["messages"][0] == {"role": "system", "content": "Be kind."}
    assert kwargs["max_tokens"] == 50


@pytest.mark.asyncio
async def test_openai_errors_are_mapped():
    error = openai.RateLimitError("slow down", response=_response(429), body=None)
    provider = OpenAIProvider(client=_openai_client(error))
    with pytest.raises(UpstreamRateLimited):
        await provider.generate([{"role": "user", "content": "hi"}])


def test_factory_builds_configured_provider():
    llm = get_llm_from_settings(LLMSettings(provider="anthropic", api_key="sk-test", model="claude-test"))
    assert isinstance(llm, AnthropicProvider)
    assert llm.model == "claude-test"
    llm = get_llm_from_settings(LLMSettings(provider="OpenAI", api_key="sk-test", model="gpt-4o-mini"))
    assert isinstance(llm, OpenAIProvider)


def test_factory_uses_provider_default_model_when_unset():
    llm = get_llm_from_settings(LLMSettings(provider="openai", api_key="sk-test"))
    assert isinstance(llm, OpenAIProvider)
    assert llm.model == "gpt-4o-mini"

    llm = get_llm_from_settings(LLMSettings(api_key="sk-test"))
    assert isinstance(llm, AnthropicProvider)
    assert llm.model == "claude-sonnet-4-20250514"


def test_factory_openai_from_env_without_model(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("LLM_MODEL", raising=False)

    llm = get_llm_from_settings(load_settings().llm)

    assert isinstance(llm, OpenAIProvider)
    assert llm.model == "gpt-4o-mini"


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        get_llm_from_settings(LLMSettings(provider="parrot"))
