"""Claude chat bot for Telegram with per-user usage limits."""

__version__ = "0.1.0"
