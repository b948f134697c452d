#!/usr/bin/env python3
"""
Configuration loader for the Discord custom commands bot.
Handles loading from the JSON config file and environment variables.

The config file keeps the key names of the game-server plugin it replaces,
so existing files can be dropped in unchanged. Missing keys are populated
with defaults and the merged file is written back on every load.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

from .models import Config, CustomCommand, DEFAULT_COLOR

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "data/config.json"

KEY_TOKEN = "Discord Bot Token"
KEY_COMMANDS = "Custom Commands"
KEY_EXTENSION_LOG_LEVEL = "Discord Extension Log Level (Verbose, Debug, Info, Warning, Error, Exception, Off)"
KEY_SERVER_ADDRESS = "Server Address"
KEY_SERVER_PORT = "Server Port"
KEY_TIMEOUT = "Remote Call Timeout (Seconds)"
KEY_DATABASE = "Database Path"

KEY_COMMAND = "Command"
KEY_DESCRIPTION = "Description"
KEY_ENABLED = "Enabled"
KEY_ALLOW_IN_DM = "Allow In Direct Messages (DMs)"
KEY_MESSAGE = "Message"
KEY_COLOR = "Color"

EXTENSION_LOG_LEVELS = ("Verbose", "Debug", "Info", "Warning", "Error", "Exception", "Off")

_COMMAND_NAME_RE = re.compile(r"^[-_a-z0-9]{1,32}$")


def default_commands() -> List[CustomCommand]:
    """Commands written to a fresh config file."""
    return [
        CustomCommand(
            name="ip",
            description="Shows the IP and port of the server",
            enabled=False,
            allow_in_dm=True,
        )
    ]


def load_config(path: Optional[str] = None) -> Config:
    """
    Load configuration from the config file and environment variables.

    Args:
        path (str, optional): Config file path. Defaults to CONFIG_PATH or data/config.json

    Returns:
        Config: Configuration object with all settings loaded

    Raises:
        ValueError: If the file is not valid JSON or a command is malformed
    """
    config_path = path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    file_config: Dict[str, Any] = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                file_config = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Could not parse config file {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {config_path} must contain a JSON object")
    else:
        logger.warning("Loading Default Config")

    config = _config_from_dict(file_config)
    config.config_path = config_path

    # The file always reflects every option, including ones it was missing
    save_config(config)

    # Environment takes precedence over the file
    config.discord_token = os.getenv("DISCORD_TOKEN", config.discord_token)
    config.log_level = os.getenv("LOG_LEVEL", config.log_level)
    config.server_address = os.getenv("SERVER_ADDRESS", config.server_address)
    config.server_port = os.getenv("SERVER_PORT", config.server_port)
    config.sqlite_path = os.getenv("SQLITE_PATH", config.sqlite_path)

    validate_config(config)
    return config


def save_config(config: Config) -> None:
    """Write the file-backed settings of `config` to its config path."""
    directory = os.path.dirname(config.config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(config.config_path, "w", encoding="utf-8") as f:
        json.dump(_config_to_dict(config), f, indent=2)


def validate_config(config: Config) -> None:
    """
    Validate the loaded configuration.

    Duplicate command names are allowed here; they are reported when the
    commands are synchronized.

    Args:
        config (Config): Configuration object to validate

    Raises:
        ValueError: If any command or option is invalid
    """
    for command in config.custom_commands:
        if not command.name:
            raise ValueError("Custom command name must not be empty")
        if not _COMMAND_NAME_RE.match(command.name):
            raise ValueError(
                f"Invalid custom command name `{command.name}`: "
                "use 1-32 lowercase letters, digits, '-' or '_'"
            )
        if not 1 <= len(command.description) <= 100:
            raise ValueError(f"Description of `{command.name}` must be 1-100 characters")

    if config.extension_log_level not in EXTENSION_LOG_LEVELS:
        raise ValueError(
            f"Unknown Discord extension log level `{config.extension_log_level}`, "
            f"expected one of {', '.join(EXTENSION_LOG_LEVELS)}"
        )

    if config.remote_call_timeout_seconds is not None and config.remote_call_timeout_seconds < 0:
        raise ValueError("Remote call timeout must not be negative")


def _config_from_dict(data: Dict[str, Any]) -> Config:
    raw_commands = data.get(KEY_COMMANDS)
    if raw_commands is None:
        commands = default_commands()
    else:
        commands = [_command_from_dict(item) for item in raw_commands]

    timeout = data.get(KEY_TIMEOUT, 30)
    return Config(
        discord_token=data.get(KEY_TOKEN) or "",
        custom_commands=commands,
        extension_log_level=data.get(KEY_EXTENSION_LOG_LEVEL) or "Info",
        server_address=str(data.get(KEY_SERVER_ADDRESS) or ""),
        server_port=str(data.get(KEY_SERVER_PORT) or ""),
        remote_call_timeout_seconds=float(timeout) if timeout else None,
        sqlite_path=data.get(KEY_DATABASE) or "data/bot.db",
    )


def _command_from_dict(item: Dict[str, Any]) -> CustomCommand:
    if not isinstance(item, dict):
        raise ValueError(f"Custom command entries must be objects, got {item!r}")
    return CustomCommand(
        name=str(item.get(KEY_COMMAND) or ""),
        description=str(item.get(KEY_DESCRIPTION) or ""),
        enabled=bool(item.get(KEY_ENABLED, False)),
        allow_in_dm=bool(item.get(KEY_ALLOW_IN_DM, False)),
        message=item.get(KEY_MESSAGE),
        color=item.get(KEY_COLOR) or DEFAULT_COLOR,
    )


def _command_to_dict(command: CustomCommand) -> Dict[str, Any]:
    data = {
        KEY_COMMAND: command.name,
        KEY_DESCRIPTION: command.description,
        KEY_ENABLED: command.enabled,
        KEY_ALLOW_IN_DM: command.allow_in_dm,
        KEY_COLOR: command.color,
    }
    if command.message is not None:
        data[KEY_MESSAGE] = command.message
    return data


def _config_to_dict(config: Config) -> Dict[str, Any]:
    return {
        KEY_TOKEN: config.discord_token,
        KEY_COMMANDS: [_command_to_dict(c) for c in config.custom_commands],
        KEY_EXTENSION_LOG_LEVEL: config.extension_log_level,
        KEY_SERVER_ADDRESS: config.server_address,
        KEY_SERVER_PORT: config.server_port,
        KEY_TIMEOUT: config.remote_call_timeout_seconds or 0,
        KEY_DATABASE: config.sqlite_path,
    }
