"""Request gate: admission, completion, recording and segmentation for one message."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from tgclaude.core.clock import Clock
from tgclaude.core.conversation import ConversationBuffer
from tgclaude.core.errors import UpstreamError, classify_failure
from tgclaude.core.ledger import DenialReason, UsageLedger, UsageRecord, UserId
from tgclaude.core.segmenter import DEFAULT_CHUNK_LENGTH, split_message
from tgclaude.llm.base import LLMProvider
from tgclaude.utils.config import DEFAULT_SYSTEM_PROMPT, BotSettings, UsageLimits
from tgclaude.utils.logging import get_logger
from tgclaude.utils.monitoring import record_completion, record_gate_outcome

logger = get_logger(__name__)


class RequestState(str, Enum):
    """Lifecycle of one request. The last three are terminal failures."""

    RECEIVED = "received"
    VALIDATED = "validated"
    ADMITTED = "admitted"
    COMPLETING = "completing"
    RECORDED = "recorded"
    DELIVERED = "delivered"
    REJECTED_LENGTH = "rejected_length"
    REJECTED_USAGE = "rejected_usage"
    COMPLETION_FAILED = "completion_failed"


@dataclass(frozen=True)
class UsageWarning:
    """Daily usage has crossed the warning ratio; sent apart from the reply."""

    usage: UsageRecord
    limits: UsageLimits


@dataclass(frozen=True)
class Delivered:
    chunks: list[str]
    pacing_seconds: float
    warning: UsageWarning | None = None
    tokens_used: int = 0
    state: ClassVar[RequestState] = RequestState.DELIVERED


@dataclass(frozen=True)
class RejectedLength:
    length: int
    max_length: int
    state: ClassVar[RequestState] = RequestState.REJECTED_LENGTH


@dataclass(frozen=True)
class RejectedUsage:
    reason: DenialReason
    state: ClassVar[RequestState] = RequestState.REJECTED_USAGE


@dataclass(frozen=True)
class CompletionFailed:
    error: UpstreamError
    state: ClassVar[RequestState] = RequestState.COMPLETION_FAILED


GateOutcome = Union[Delivered, RejectedLength, RejectedUsage, CompletionFailed]


@dataclass(frozen=True)
class ConversationStats:
    exchanges: int
    max_history: int
    usage: UsageRecord


class RequestGate:
    """
    Runs a user message through the ledger, the completion provider and the
    conversation buffer, and returns an explicit outcome for the transport.

    Failed or rejected requests leave both the ledger and the buffer untouched.
    Requests from the same user are serialized; other users never wait.

    Example:
        >>> gate = RequestGate(UsageLedger(), ConversationBuffer(), llm)
        >>> outcome = await gate.handle(42, "Hello")
        >>> outcome.state
        <RequestState.DELIVERED: 'delivered'>
    """

    def __init__(
        self,
        ledger: UsageLedger,
        conversations: ConversationBuffer,
        llm: LLMProvider,
        *,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int = 4000,
        chunk_length: int = DEFAULT_CHUNK_LENGTH,
        pacing_seconds: float = 0.5,
    ) -> None:
        self.ledger = ledger
        self.conversations = conversations
        self.llm = llm
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.chunk_length = chunk_length
        self.pacing_seconds = pacing_seconds
        self._locks: dict[UserId, asyncio.Lock] = {}

    @classmethod
    def from_settings(cls, settings: BotSettings, llm: LLMProvider, clock: Clock | None = None) -> RequestGate:
        return cls(
            UsageLedger(settings.limits, clock=clock),
            ConversationBuffer(settings.conversation.max_history),
            llm,
            system_prompt=settings.llm.system_prompt,
            max_tokens=settings.llm.max_tokens,
            chunk_length=settings.delivery.chunk_length,
            pacing_seconds=settings.delivery.pacing_seconds,
        )

    @property
    def limits(self) -> UsageLimits:
        return self.ledger.limits

    async def handle(self, user_id: UserId, text: str) -> GateOutcome:
        """Process one non-command text message from user_id."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            outcome = await self._run(user_id, text)
        reason = getattr(outcome, "reason", None)
        record_gate_outcome(outcome.state.value, reason.value if reason else "")
        return outcome

    async def _run(self, user_id: UserId, text: str) -> GateOutcome:
        max_length = self.limits.max_message_length
        if len(text) > max_length:
            logger.info("request_rejected", user_id=user_id, state="rejected_length", length=len(text))
            return RejectedLength(length=len(text), max_length=max_length)

        admission = self.ledger.check_admission(user_id)
        if not admission.allowed:
            logger.info("request_rejected", user_id=user_id, state="rejected_usage", reason=admission.reason.value)
            return RejectedUsage(reason=admission.reason)

        messages = [entry.to_message() for entry in self.conversations.history(user_id)]
        messages.append({"role": "user", "content": text})
        logger.info("request_admitted", user_id=user_id, context_messages=len(messages))

        start = time.perf_counter()
        try:
            response = await self.llm.generate(messages, system=self.system_prompt, max_tokens=self.max_tokens)
        except Exception as e:
            record_completion(time.perf_counter() - start, success=False)
            failure = classify_failure(e)
            if failure is None:
                raise
            logger.warning(
                "completion_failed",
                user_id=user_id,
                category=failure.category,
                status=failure.status,
                error=str(failure),
            )
            return CompletionFailed(error=failure)

        tokens = response.total_tokens
        record_completion(time.perf_counter() - start, success=True, tokens=tokens)
        self.ledger.record(user_id, tokens)
        self.conversations.append(user_id, "user", text)
        self.conversations.append(user_id, "assistant", response.content)
        logger.info("request_recorded", user_id=user_id, tokens=tokens)

        chunks = split_message(response.content, self.chunk_length)
        warning = None
        if self.ledger.usage_warning(user_id):
            warning = UsageWarning(usage=self.ledger.snapshot(user_id), limits=self.limits)
            logger.info("usage_warning", user_id=user_id)
        return Delivered(chunks=chunks, pacing_seconds=self.pacing_seconds, warning=warning, tokens_used=tokens)

    def is_authorized(self, user_id: UserId) -> bool:
        return self.ledger.is_authorized(user_id)

    def clear(self, user_id: UserId) -> None:
        """Forget the user's conversation; usage counters are kept."""
        self.conversations.clear(user_id)
        logger.info("conversation_cleared", user_id=user_id)

    def usage(self, user_id: UserId) -> UsageRecord:
        return self.ledger.snapshot(user_id)

    def stats(self, user_id: UserId) -> ConversationStats:
        return ConversationStats(
            exchanges=self.conversations.exchange_count(user_id),
            max_history=self.conversations.max_history,
            usage=self.ledger.snapshot(user_id),
        )

    @property
    def active_users(self) -> int:
        return self.conversations.active_users
