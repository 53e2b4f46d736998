"""Transports: Telegram, console and the health endpoint."""
