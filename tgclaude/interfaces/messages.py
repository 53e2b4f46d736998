"""User-facing texts (Telegram Markdown) for gate outcomes and commands."""

from __future__ import annotations

from tgclaude.core.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamServerError,
    UpstreamTimeout,
)
from tgclaude.core.gate import (
    CompletionFailed,
    ConversationStats,
    GateOutcome,
    RejectedLength,
    RejectedUsage,
    UsageWarning,
)
from tgclaude.core.ledger import DenialReason, UsageRecord
from tgclaude.utils.config import UsageLimits

UNAUTHORIZED = "❌ This bot is private and only available to authorized users."
CLEARED = "✅ Conversation history cleared! Starting fresh."
EMPTY_REPLY = "I couldn't generate a response."

UNSUPPORTED_MEDIA = {
    "photo": (
        "📸 I can see you sent a photo, but I can only process text messages right now. "
        "Please describe what you'd like help with or what's in the image!"
    ),
    "document": (
        "📄 I can see you sent a document, but I can only process text messages right now. "
        "You can copy and paste text content for me to analyze!"
    ),
    "voice": "🎤 I can see you sent a voice message, but I can only process text messages right now. Please type your message!",
    "sticker": "😄 Nice sticker! But I can only process text messages. What would you like to chat about?",
}

_UPSTREAM_HINTS: dict[type[UpstreamError], str] = {
    UpstreamAuthError: "🔑 API key issue - please check the bot configuration.",
    UpstreamRateLimited: "⏱️ Rate limit reached - please try again in a moment.",
    UpstreamServerError: "🔧 The AI provider is experiencing issues - please try again later.",
    UpstreamTimeout: "⏱️ Request timed out - please try a shorter message.",
}

COMMANDS_HELP = """*Commands:*
/start - Show the welcome message
/clear - Clear our conversation history
/usage - Check your current usage limits
/help - Show help information
/stats - Show conversation statistics"""


def welcome(first_name: str, limits: UsageLimits) -> str:
    return f"""🤖 *Claude Sonnet 4 Bot*

Hello {first_name}! I'm powered by Claude Sonnet 4, Anthropic's smart and efficient AI model.

I can help you with:
• Answering questions
• Writing and editing
• Analysis and research
• Creative tasks
• Coding assistance
• And much more!

Just send me a message and I'll respond using Claude Sonnet 4.

{COMMANDS_HELP}

*Your Usage Limits:*
• Daily: {limits.daily_message_limit} messages, {limits.daily_token_limit} tokens
• Hourly: {limits.hourly_message_limit} messages
• Rate limit: {limits.rate_limit_per_minute} messages per minute"""


def help_text() -> str:
    return f"""*How to use Claude Sonnet 4 Bot:*

*Basic Usage:*
Just type your question or request, and I'll respond using Claude Sonnet 4.

{COMMANDS_HELP}

*Tips:*
• Be specific in your requests for better results
• I remember our conversation context
• Use /clear if you want to start fresh
• Long messages will be split automatically"""


def message_too_long(rejection: RejectedLength) -> str:
    return (
        f"❌ Message too long! Please keep messages under {rejection.max_length} characters. "
        f"Your message: {rejection.length} characters."
    )


def denial(reason: DenialReason, limits: UsageLimits) -> str:
    if reason is DenialReason.UNAUTHORIZED:
        return UNAUTHORIZED
    if reason is DenialReason.RATE_LIMIT:
        return "⏱️ You're sending messages too quickly! Please wait a minute before sending another message."
    if reason is DenialReason.HOURLY_LIMIT:
        return (
            f"⏰ You've reached your hourly limit of {limits.hourly_message_limit} messages. "
            "Please try again next hour."
        )
    if reason is DenialReason.DAILY_MESSAGE_LIMIT:
        return (
            f"📅 You've reached your daily limit of {limits.daily_message_limit} messages. "
            "Limit resets at midnight."
        )
    if reason is DenialReason.DAILY_TOKEN_LIMIT:
        return f"🎯 You've reached your daily token limit of {limits.daily_token_limit}. Limit resets at midnight."
    return "❌ Usage limit reached. Please try again later."


def completion_failed(error: UpstreamError) -> str:
    text = "❌ Sorry, I encountered an error processing your request."
    hint = _UPSTREAM_HINTS.get(type(error))
    if hint:
        text += f"\n\n{hint}"
    return text


def unexpected_error(incident_id: str) -> str:
    return (
        "❌ An unexpected error occurred. Please try again.\n\n"
        f"Error ID: {incident_id}\n\n"
        "If this persists, please contact the bot administrator."
    )


def rejection(outcome: GateOutcome, limits: UsageLimits) -> str:
    """Text for a non-delivered outcome."""
    if isinstance(outcome, RejectedLength):
        return message_too_long(outcome)
    if isinstance(outcome, RejectedUsage):
        return denial(outcome.reason, limits)
    if isinstance(outcome, CompletionFailed):
        return completion_failed(outcome.error)
    raise TypeError(f"Not a rejection: {outcome!r}")


def _percent(value: int, limit: int) -> int:
    return int(value / limit * 100 + 0.5)


def usage_report(usage: UsageRecord, limits: UsageLimits) -> str:
    daily_pct = _percent(usage.daily.messages, limits.daily_message_limit)
    token_pct = _percent(usage.daily.tokens, limits.daily_token_limit)
    status = "✅"
    if daily_pct > 80 or token_pct > 80:
        status = "⚠️"
    if daily_pct >= 100 or token_pct >= 100:
        status = "❌"

    notes = []
    if usage.daily.messages >= limits.daily_message_limit:
        notes.append("⚠️ Daily message limit reached!")
    if usage.daily.tokens >= limits.daily_token_limit:
        notes.append("⚠️ Daily token limit reached!")
    if usage.hourly.messages >= limits.hourly_message_limit:
        notes.append("⚠️ Hourly limit reached!")

    text = f"""{status} *Your Current Usage:*

*Today ({usage.daily.period}):*
• Messages: {usage.daily.messages}/{limits.daily_message_limit} ({daily_pct}%)
• Tokens: {usage.daily.tokens}/{limits.daily_token_limit} ({token_pct}%)

*This Hour:*
• Messages: {usage.hourly.messages}/{limits.hourly_message_limit}

*Limits:*
• Rate limit: {limits.rate_limit_per_minute} messages per minute
• Daily reset: Midnight
• Hourly reset: Every hour"""
    if notes:
        text += "\n\n" + "\n".join(notes)
    return text


def stats_report(stats: ConversationStats) -> str:
    return f"""📊 *Your Conversation Stats:*

*Current Session:*
• Messages in history: {stats.exchanges} exchanges
• Memory limit: {stats.max_history} exchanges

*Usage Summary:*
• Today's messages: {stats.usage.daily.messages}
• Today's tokens: {stats.usage.daily.tokens}
• Current hour: {stats.usage.hourly.messages} messages

*Tips:*
• Use /clear to reset conversation history
• Longer conversations use more tokens
• History helps maintain context"""


def usage_warning(warning: UsageWarning) -> str:
    usage, limits = warning.usage, warning.limits
    return (
        "⚠️ *Usage Warning:*\n"
        f"{usage.daily.messages}/{limits.daily_message_limit} messages, "
        f"{usage.daily.tokens}/{limits.daily_token_limit} tokens used today."
    )
