"""Configuration loading from YAML and environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

_project_root = Path(__file__).resolve().parent.parent.parent

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant running on Telegram. Keep responses concise but informative. "
    "Use emojis sparingly and only when they add value. If asked about your capabilities, "
    "mention that you're Claude Sonnet 4 running in a Telegram bot."
)

# env var -> (section, key); empty values are treated as unset
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "AUTHORIZED_USER_ID": ("limits", "authorized_user_id"),
    "DAILY_MESSAGE_LIMIT": ("limits", "daily_message_limit"),
    "DAILY_TOKEN_LIMIT": ("limits", "daily_token_limit"),
    "HOURLY_MESSAGE_LIMIT": ("limits", "hourly_message_limit"),
    "RATE_LIMIT_PER_MINUTE": ("limits", "rate_limit_per_minute"),
    "MAX_MESSAGE_LENGTH": ("limits", "max_message_length"),
    "MAX_HISTORY": ("conversation", "max_history"),
    "CHUNK_DELAY_MS": ("delivery", "chunk_delay_ms"),
    "LLM_PROVIDER": ("llm", "provider"),
    "LLM_MODEL": ("llm", "model"),
    "HEALTH_CHECK_PORT": ("health", "port"),
}


class UsageLimits(BaseModel):
    """Per-user admission limits. ``authorized_user_id`` switches on single-user mode."""

    authorized_user_id: int | None = None
    daily_message_limit: int = Field(default=100, gt=0)
    daily_token_limit: int = Field(default=50_000, gt=0)
    hourly_message_limit: int = Field(default=20, gt=0)
    rate_limit_per_minute: int = Field(default=5, gt=0)
    max_message_length: int = Field(default=4000, gt=0)
    warning_ratio: float = Field(default=0.9, gt=0, le=1)


class ConversationSettings(BaseModel):
    max_history: int = Field(default=10, gt=0)


class DeliverySettings(BaseModel):
    chunk_length: int = Field(default=4000, gt=0)
    chunk_delay_ms: int = Field(default=500, ge=0)

    @property
    def pacing_seconds(self) -> float:
        return self.chunk_delay_ms / 1000


class LLMSettings(BaseModel):
    provider: str = "anthropic"
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = Field(default=4000, gt=0)
    timeout: float = 60.0
    api_key: str | None = None
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


class HealthSettings(BaseModel):
    port: int | None = None
    host: str = "0.0.0.0"


class BotSettings(BaseModel):
    """Validated bot configuration, built from :func:`load_config`."""

    limits: UsageLimits = Field(default_factory=UsageLimits)
    conversation: ConversationSettings = Field(default_factory=ConversationSettings)
    delivery: DeliverySettings = Field(default_factory=DeliverySettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    telegram_token: str | None = None


def get_config_path(config_path: str | Path | None = None) -> Path:
    """Return the path to the config file (BOT_CONFIG_PATH or config/bot_config.yaml)."""
    if config_path is None:
        config_path = os.getenv("BOT_CONFIG_PATH") or _project_root / "config" / "bot_config.yaml"
    return Path(config_path)


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load bot config from YAML file with env var overrides.

    Args:
        config_path: Path to bot_config.yaml. Defaults to config/bot_config.yaml.

    Returns:
        Nested config dict (unvalidated; see :func:`load_settings`).

    Example:
        >>> cfg = load_config()
        >>> cfg["limits"]["daily_message_limit"]
        100
    """
    load_dotenv(_project_root / ".env")
    path = get_config_path(config_path)
    if path.exists():
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    else:
        config = _default_config()
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name, "").strip()
        if value:
            config.setdefault(section, {})[key] = value
    provider = str(config.get("llm", {}).get("provider", "anthropic")).lower()
    key_env = "OPENAI_API_KEY" if provider == "openai" else "ANTHROPIC_API_KEY"
    if api_key := os.getenv(key_env):
        config.setdefault("llm", {})["api_key"] = api_key
    if token := os.getenv("TELEGRAM_BOT_TOKEN"):
        config["telegram_token"] = token
    return config


def load_settings(config: dict[str, Any] | None = None) -> BotSettings:
    """Validate a config dict (default: :func:`load_config`) into :class:`BotSettings`."""
    if config is None:
        config = load_config()
    return BotSettings.model_validate(config)


def _default_config() -> dict[str, Any]:
    """Default config when no file is present."""
    return {
        "limits": {
            "daily_message_limit": 100,
            "daily_token_limit": 50_000,
            "hourly_message_limit": 20,
            "rate_limit_per_minute": 5,
            "max_message_length": 4000,
        },
        "conversation": {"max_history": 10},
        "delivery": {"chunk_length": 4000, "chunk_delay_ms": 500},
        "llm": {
            "provider": "anthropic",
            "temperature": 0.7,
            "max_tokens": 4000,
        },
    }
