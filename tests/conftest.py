"""Shared fixtures: a settable clock and a scripted completion provider."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest

from tgclaude.core.conversation import ConversationBuffer
from tgclaude.core.gate import RequestGate
from tgclaude.core.ledger import UsageLedger
from tgclaude.llm.base import LLMProvider, LLMResponse
from tgclaude.utils.config import UsageLimits


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 3, 14, 10, 30, 15)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class ScriptedLLM(LLMProvider):
    """Returns queued replies or raises queued exceptions; records every call."""

    name = "scripted"

    def __init__(self, default: str = "Sure.", tokens: tuple[int, int] = (10, 5)) -> None:
        self.default = default
        self.tokens = tokens
        self.script: list[Any] = []
        self.calls: list[dict[str, Any]] = []

    def queue(self, *items: Any) -> None:
        self.script.extend(items)

    async def generate(self, messages, system=None, max_tokens=None, **kwargs) -> LLMResponse:
        self.calls.append({"messages": [dict(m) for m in messages], "system": system, "max_tokens": max_tokens})
        item = self.script.pop(0) if self.script else self.default
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, LLMResponse):
            return item
        return LLMResponse(content=item, input_tokens=self.tokens[0], output_tokens=self.tokens[1])


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def limits() -> UsageLimits:
    return UsageLimits()


@pytest.fixture
def ledger(limits: UsageLimits, clock: FixedClock) -> UsageLedger:
    return UsageLedger(limits, clock=clock)


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def gate(ledger: UsageLedger, llm: ScriptedLLM) -> RequestGate:
    return RequestGate(ledger, ConversationBuffer(max_history=3), llm, pacing_seconds=0.5)
