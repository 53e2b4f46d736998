"""Bounded per-user conversation history used as model context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tgclaude.core.ledger import UserId

Role = Literal["user", "assistant"]
ROLES: tuple[str, ...] = ("user", "assistant")


@dataclass(frozen=True)
class ConversationEntry:
    """One turn of the conversation."""

    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ConversationBuffer:
    """
    Last ``max_history`` exchanges per user, oldest evicted first.

    Callers append the user turn and then the assistant turn, so evicting the
    two oldest entries always removes one complete exchange.
    """

    def __init__(self, max_history: int = 10) -> None:
        if max_history <= 0:
            raise ValueError("max_history must be positive")
        self.max_history = max_history
        self._conversations: dict[UserId, list[ConversationEntry]] = {}

    def history(self, user_id: UserId) -> list[ConversationEntry]:
        """Current context for the user, oldest first (a copy)."""
        return list(self._conversations.get(user_id, ()))

    def append(self, user_id: UserId, role: Role, content: str) -> None:
        if role not in ROLES:
            raise ValueError(f"Unknown conversation role: {role!r}")
        conversation = self._conversations.setdefault(user_id, [])
        conversation.append(ConversationEntry(role=role, content=content))
        if len(conversation) > self.max_history * 2:
            del conversation[:2]

    def clear(self, user_id: UserId) -> None:
        self._conversations.pop(user_id, None)

    def exchange_count(self, user_id: UserId) -> int:
        return len(self._conversations.get(user_id, ())) // 2

    @property
    def active_users(self) -> int:
        return len(self._conversations)
