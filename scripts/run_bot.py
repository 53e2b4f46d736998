"""Run the Telegram bot."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tgclaude.interfaces.telegram_bot import run_telegram_bot

if __name__ == "__main__":
    run_telegram_bot()
