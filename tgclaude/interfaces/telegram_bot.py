"""Telegram transport: commands, text messages and the error boundary."""

from __future__ import annotations

import os
from functools import wraps
from typing import Any, Awaitable, Callable

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from tgclaude.core.errors import new_incident_id
from tgclaude.core.gate import Delivered, RequestGate
from tgclaude.interfaces import messages
from tgclaude.interfaces.delivery import deliver_chunks
from tgclaude.utils.config import BotSettings, load_settings
from tgclaude.utils.llm_factory import get_llm_from_settings
from tgclaude.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

Handler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[Any]]


def _gate(context: ContextTypes.DEFAULT_TYPE) -> RequestGate:
    return context.application.bot_data["gate"]


def authorized_only(handler: Handler) -> Handler:
    """Reply with the private-bot notice instead of running handler for other users."""

    @wraps(handler)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user = update.effective_user
        if user is None or not _gate(context).is_authorized(user.id):
            logger.warning("telegram_unauthorized", user_id=user.id if user else None)
            if update.effective_message:
                await update.effective_message.reply_text(messages.UNAUTHORIZED)
            return None
        return await handler(update, context)

    return wrapper


@authorized_only
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    first_name = update.effective_user.first_name or "there"
    await update.effective_message.reply_text(
        messages.welcome(first_name, _gate(context).limits), parse_mode=ParseMode.MARKDOWN
    )


@authorized_only
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text(messages.help_text(), parse_mode=ParseMode.MARKDOWN)


@authorized_only
async def clear_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    _gate(context).clear(update.effective_user.id)
    await update.effective_message.reply_text(messages.CLEARED)


@authorized_only
async def usage_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    gate = _gate(context)
    report = messages.usage_report(gate.usage(update.effective_user.id), gate.limits)
    await update.effective_message.reply_text(report, parse_mode=ParseMode.MARKDOWN)


@authorized_only
async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    stats = _gate(context).stats(update.effective_user.id)
    await update.effective_message.reply_text(messages.stats_report(stats), parse_mode=ParseMode.MARKDOWN)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Run a text message through the gate and deliver the reply (or the rejection)."""
    if not update.message or not update.message.text or not update.effective_user:
        return
    text = update.message.text
    if text.startswith("/"):
        return
    user_id = update.effective_user.id
    gate = _gate(context)
    logger.info("telegram_message_received", user_id=user_id, length=len(text))

    if gate.is_authorized(user_id):
        await context.bot.send_chat_action(chat_id=update.effective_chat.id, action="typing")
    outcome = await gate.handle(user_id, text)
    if not isinstance(outcome, Delivered):
        await update.message.reply_text(messages.rejection(outcome, gate.limits))
        return

    chunks = [chunk for chunk in outcome.chunks if chunk.strip()] or [messages.EMPTY_REPLY]
    await deliver_chunks(update.message.reply_text, chunks, outcome.pacing_seconds)
    if outcome.warning:
        await update.message.reply_text(messages.usage_warning(outcome.warning), parse_mode=ParseMode.MARKDOWN)


def unsupported_media(kind: str) -> Handler:
    """Handler answering non-text messages of the given kind."""

    @authorized_only
    async def handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.effective_message.reply_text(messages.UNSUPPORTED_MEDIA[kind])

    handler.__name__ = f"{kind}_handler"
    return handler


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Last-resort boundary: log with an incident id and tell the user; the bot keeps running."""
    incident_id = new_incident_id()
    user_id = None
    if isinstance(update, Update) and update.effective_user:
        user_id = update.effective_user.id
    logger.error("telegram_unhandled_error", incident_id=incident_id, user_id=user_id, exc_info=context.error)
    if isinstance(update, Update) and update.effective_message:
        await update.effective_message.reply_text(messages.unexpected_error(incident_id))


def build_application(token: str, gate: RequestGate) -> Application:
    """Create the PTB application with all handlers registered."""
    app = Application.builder().token(token).build()
    app.bot_data["gate"] = gate
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("clear", clear_command))
    app.add_handler(CommandHandler("usage", usage_command))
    app.add_handler(CommandHandler("stats", stats_command))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))
    app.add_handler(MessageHandler(filters.PHOTO, unsupported_media("photo")))
    app.add_handler(MessageHandler(filters.Document.ALL, unsupported_media("document")))
    app.add_handler(MessageHandler(filters.VOICE, unsupported_media("voice")))
    app.add_handler(MessageHandler(filters.Sticker.ALL, unsupported_media("sticker")))
    app.add_error_handler(on_error)
    return app


def _log_configuration(settings: BotSettings) -> None:
    limits = settings.limits
    logger.info(
        "telegram_bot_configuration",
        max_history=settings.conversation.max_history,
        daily_message_limit=limits.daily_message_limit,
        daily_token_limit=limits.daily_token_limit,
        hourly_message_limit=limits.hourly_message_limit,
        rate_limit_per_minute=limits.rate_limit_per_minute,
        max_message_length=limits.max_message_length,
        authorized_user=limits.authorized_user_id or "public",
        provider=settings.llm.provider,
        model=settings.llm.model or "provider default",
    )


def run_telegram_bot() -> None:
    """Start the Telegram bot (polling). SIGINT/SIGTERM stop it cleanly."""
    setup_logging()
    settings = load_settings()
    port = os.getenv("PROMETHEUS_METRICS_PORT", "")
    if port.isdigit():
        from tgclaude.utils.monitoring import start_metrics_server
        start_metrics_server(int(port))
        logger.info("prometheus_metrics_started", port=int(port))
    if not settings.telegram_token:
        raise RuntimeError("Set TELEGRAM_BOT_TOKEN in .env or telegram_token in the config file")

    gate = RequestGate.from_settings(settings, get_llm_from_settings(settings.llm))
    if settings.health.port:
        from tgclaude.interfaces.health import start_health_server
        start_health_server(gate, settings.health.port, settings.health.host)

    app = build_application(settings.telegram_token, gate)
    _log_configuration(settings)
    logger.info("telegram_bot_starting")
    app.run_polling(allowed_updates=Update.ALL_TYPES)
    logger.info("telegram_bot_stopped")


if __name__ == "__main__":
    run_telegram_bot()
