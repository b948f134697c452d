#!/usr/bin/env python3
"""
Configuration models for the Discord custom commands bot.
"""

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_COLOR = "#43B581"


@dataclass
class CustomCommand:
    """A slash command declared in the config file."""

    name: str
    description: str
    enabled: bool = False
    allow_in_dm: bool = False
    message: Optional[str] = None
    color: str = DEFAULT_COLOR


@dataclass
class Config:
    """Configuration settings for the bot."""

    # Discord settings
    discord_token: str
    custom_commands: List[CustomCommand] = field(default_factory=list)
    extension_log_level: str = "Info"

    # Placeholder values
    server_address: str = ""
    server_port: str = ""

    # Sync settings
    remote_call_timeout_seconds: Optional[float] = 30.0

    # Storage settings
    sqlite_path: str = "data/bot.db"
    config_path: str = "data/config.json"

    # Logging settings
    log_level: str = "info"
