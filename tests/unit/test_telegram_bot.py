"""Unit tests for the Telegram handlers with mocked updates."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import Update

from tgclaude.core.conversation import ConversationBuffer
from tgclaude.core.gate import RequestGate
from tgclaude.core.ledger import UsageLedger
from tgclaude.interfaces import delivery, messages
from tgclaude.interfaces import telegram_bot
from tgclaude.utils.config import UsageLimits


@pytest.fixture(autouse=True)
def no_pacing(monkeypatch):
    async def fake_sleep(seconds):
        return None

    monkeypatch.setattr(delivery.asyncio, "sleep", fake_sleep)


def _update(text="Hello", user_id=7):
    message = MagicMock()
    message.text = text
    message.reply_text = AsyncMock()
    return SimpleNamespace(
        message=message,
        effective_message=message,
        effective_user=SimpleNamespace(id=user_id, first_name="Ada"),
        effective_chat=SimpleNamespace(id=100),
    )


def _context(gate):
    return SimpleNamespace(
        application=SimpleNamespace(bot_data={"gate": gate}),
        bot=SimpleNamespace(send_chat_action=AsyncMock()),
        error=RuntimeError("kaboom"),
    )


def _sent(update):
    return [c.args[0] for c in update.message.reply_text.call_args_list]


@pytest.mark.asyncio
async def test_text_message_is_answered(gate):
    update, context = _update(), _context(gate)
    await telegram_bot.handle_message(update, context)

    assert _sent(update) == ["Sure."]
    context.bot.send_chat_action.assert_awaited_once_with(chat_id=100, action="typing")
    assert gate.usage(7).daily.messages == 1


@pytest.mark.asyncio
async def test_long_reply_sent_in_chunks(gate, llm):
    gate.chunk_length = 21
    llm.queue("First part of reply. Second part of reply.")
    update = _update()
    await telegram_bot.handle_message(update, _context(gate))
    assert _sent(update) == ["First part of reply.", "Second part of reply."]


@pytest.mark.asyncio
async def test_command_text_is_ignored(gate, llm):
    update = _update("/unknown")
    await telegram_bot.handle_message(update, _context(gate))
    assert _sent(update) == []
    assert llm.calls == []


@pytest.mark.asyncio
async def test_rejection_is_replied(clock, llm):
    gate = RequestGate(UsageLedger(UsageLimits(authorized_user_id=42), clock=clock), ConversationBuffer(), llm)
    update, context = _update(user_id=7), _context(gate)
    await telegram_bot.handle_message(update, context)
    assert _sent(update) == [messages.UNAUTHORIZED]
    context.bot.send_chat_action.assert_not_awaited()


@pytest.mark.asyncio
async def test_warning_sent_after_reply(clock, llm):
    gate = RequestGate(UsageLedger(UsageLimits(daily_token_limit=10), clock=clock), ConversationBuffer(), llm)
    update = _update()
    await telegram_bot.handle_message(update, _context(gate))
    sent = _sent(update)
    assert sent[0] == "Sure."
    assert sent[1].startswith("⚠️ *Usage Warning:*")


@pytest.mark.asyncio
async def test_commands_require_authorization(clock, llm):
    gate = RequestGate(UsageLedger(UsageLimits(authorized_user_id=42), clock=clock), ConversationBuffer(), llm)
    update = _update("/usage", user_id=7)
    await telegram_bot.usage_command(update, _context(gate))
    assert _sent(update) == [messages.UNAUTHORIZED]

    update = _update("/usage", user_id=42)
    await telegram_bot.usage_command(update, _context(gate))
    assert "Your Current Usage" in _sent(update)[0]


@pytest.mark.asyncio
async def test_clear_command(gate):
    gate.conversations.append(7, "user", "hi")
    gate.conversations.append(7, "assistant", "hello")
    update = _update("/clear")
    await telegram_bot.clear_command(update, _context(gate))
    assert _sent(update) == [messages.CLEARED]
    assert gate.conversations.history(7) == []


@pytest.mark.asyncio
async def test_unsupported_media_reply(gate):
    update = _update(text=None)
    await telegram_bot.unsupported_media("sticker")(update, _context(gate))
    assert _sent(update) == [messages.UNSUPPORTED_MEDIA["sticker"]]


@pytest.mark.asyncio
async def test_error_handler_reports_incident_id(gate):
    update = MagicMock(spec=Update)
    update.effective_user = SimpleNamespace(id=7)
    update.effective_message.reply_text = AsyncMock()
    await telegram_bot.on_error(update, _context(gate))
    text = update.effective_message.reply_text.call_args.args[0]
    assert "Error ID: " in text


def test_build_application_registers_handlers(gate):
    app = telegram_bot.build_application("123456:TEST-token", gate)
    assert app.bot_data["gate"] is gate
    assert len(app.handlers[0]) == 10
    assert app.error_handlers
