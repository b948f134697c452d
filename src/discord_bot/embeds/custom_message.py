"""
Helper module for building the embed a custom command replies with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import discord

from config.models import CustomCommand, DEFAULT_COLOR
from discord_bot.placeholders import render

IP_MESSAGE = "The server address is: `{server.address}:{server.port}`"
DEFAULT_MESSAGE = "Your custom message here :)"


@dataclass(frozen=True)
class CommandTemplate:
    description: str
    color: str


def template_for(command: CustomCommand) -> CommandTemplate:
    """Reply template for `command`, falling back to the built-in text."""
    if command.message:
        description = command.message
    elif command.name.lower() == "ip":
        description = IP_MESSAGE
    else:
        description = DEFAULT_MESSAGE
    return CommandTemplate(description=description, color=command.color)


def build_command_embed(template: CommandTemplate, placeholders: Mapping[str, str]) -> discord.Embed:
    """
    Build the reply embed for a custom command.

    Invalid colors fall back to DEFAULT_COLOR.
    """
    try:
        color = discord.Color.from_str(template.color)
    except ValueError:
        color = discord.Color.from_str(DEFAULT_COLOR)

    return discord.Embed(
        description=render(template.description, placeholders),
        color=color,
    )
