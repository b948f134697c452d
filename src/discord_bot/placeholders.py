"""
Placeholder substitution for custom command replies.

Templates use `{group.key}` placeholders, e.g. `{server.address}` or
`{user.mention}`. Placeholders without a value are left as written.
"""

import re
from typing import Dict, Mapping, Optional

import discord

from config.models import Config

_PLACEHOLDER_RE = re.compile(r"\{([a-z_]+(?:\.[a-z_]+)*)\}")


def build_placeholders(config: Config, interaction: Optional[discord.Interaction] = None) -> Dict[str, str]:
    """Placeholder values for a reply to `interaction`."""
    data = {
        "server.address": config.server_address,
        "server.port": config.server_port,
    }
    if interaction is None:
        return data

    user = interaction.user
    data.update({
        "user.name": user.display_name,
        "user.id": str(user.id),
        "user.mention": user.mention,
    })
    if interaction.guild is not None:
        data["guild.name"] = interaction.guild.name
        data["guild.id"] = str(interaction.guild.id)
    channel_name = getattr(interaction.channel, "name", None)
    if channel_name:
        data["channel.name"] = channel_name
    if interaction.command is not None:
        data["command"] = interaction.command.name
    return data


def render(text: str, placeholders: Mapping[str, str]) -> str:
    """Replace every known `{placeholder}` in `text`."""
    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key in placeholders:
            return str(placeholders[key])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, text)
