"""Console transport: chat with the gate from a terminal, same limits and commands as Telegram."""

from __future__ import annotations

import asyncio
import os

from tgclaude.core.errors import new_incident_id
from tgclaude.core.gate import Delivered, RequestGate
from tgclaude.interfaces import messages
from tgclaude.interfaces.delivery import deliver_chunks
from tgclaude.utils.config import load_settings
from tgclaude.utils.llm_factory import get_llm_from_settings
from tgclaude.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

QUIT = "/quit"


async def handle_line(gate: RequestGate, user_id: int | str, line: str) -> list[str]:
    """Return the replies for one line of input, in the order they would be sent."""
    command = line.strip().lower()
    if command.startswith("/") and command != QUIT:
        if not gate.is_authorized(user_id):
            return [messages.UNAUTHORIZED]
        if command == "/clear":
            gate.clear(user_id)
            return [messages.CLEARED]
        if command == "/usage":
            return [messages.usage_report(gate.usage(user_id), gate.limits)]
        if command == "/stats":
            return [messages.stats_report(gate.stats(user_id))]
        if command in ("/help", "/start"):
            return [messages.help_text()]
        return []

    outcome = await gate.handle(user_id, line)
    if not isinstance(outcome, Delivered):
        return [messages.rejection(outcome, gate.limits)]
    replies = [chunk for chunk in outcome.chunks if chunk.strip()] or [messages.EMPTY_REPLY]
    if outcome.warning:
        replies.append(messages.usage_warning(outcome.warning))
    return replies


async def _print(text: str) -> None:
    print(f"Bot: {text}")


async def run_conversation_loop(user_id: int | str = "cli") -> None:
    """REPL: read user input, run it through the gate, print the reply chunks."""
    setup_logging(level=os.getenv("LOG_LEVEL", "WARNING"))
    settings = load_settings()
    gate = RequestGate.from_settings(settings, get_llm_from_settings(settings.llm))

    print("Claude chat (console). Commands: /clear, /usage, /stats, /help, /quit\n")
    while True:
        try:
            line = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            break
        if not line:
            continue
        if line.lower() == QUIT:
            print("Bye.")
            break
        try:
            replies = await handle_line(gate, user_id, line)
        except Exception as e:
            incident_id = new_incident_id()
            logger.exception("cli_unhandled_error", incident_id=incident_id, error=str(e))
            replies = [messages.unexpected_error(incident_id)]
        await deliver_chunks(_print, replies, gate.pacing_seconds)


def run_cli() -> None:
    """Entry point for CLI."""
    asyncio.run(run_conversation_loop(user_id=os.getenv("CLI_USER_ID", "cli")))


if __name__ == "__main__":
    run_cli()
