"""Shared utilities."""

from tgclaude.utils.config import load_config, load_settings
from tgclaude.utils.logging import setup_logging

__all__ = ["load_config", "load_settings", "setup_logging"]
