"""
Routes interactions for custom commands to their templated reply.

The commands are added to the bot's CommandTree only for local dispatch;
registration with Discord happens in `sync.service`.
"""

import logging
from typing import Callable, Dict, Iterable, Mapping, Optional

import discord
from discord import app_commands

from config.models import CustomCommand
from discord_bot.embeds.custom_message import CommandTemplate, build_command_embed, template_for

logger = logging.getLogger(__name__)

PlaceholderSource = Callable[[discord.Interaction], Mapping[str, str]]


def bind_commands(
    tree: app_commands.CommandTree,
    commands: Iterable[CustomCommand],
    placeholders_for: PlaceholderSource,
    previous: Optional[Mapping[str, CommandTemplate]] = None,
) -> Dict[str, CommandTemplate]:
    """
    Add a handler to `tree` for each command and drop the handlers of `previous`.

    If adding fails, e.g. with `app_commands.CommandLimitReached`, the tree is
    restored to its previous handlers and the error is re-raised.

    Returns:
        Dict[str, CommandTemplate]: Command name to the template its handler replies with
    """
    removed = [tree.remove_command(name) for name in previous or {}]

    templates: Dict[str, CommandTemplate] = {}
    try:
        for command in commands:
            template = template_for(command)
            tree.add_command(
                app_commands.Command(
                    name=command.name,
                    description=command.description,
                    callback=_make_callback(command.name, template, placeholders_for),
                ),
                override=True,
            )
            templates[command.name] = template
    except Exception:
        # Put the tree back the way it was
        for name in templates:
            tree.remove_command(name)
        for old in removed:
            if old is not None:
                tree.add_command(old, override=True)
        raise

    logger.info(f"Bound {len(templates)} custom command handlers")
    return templates


def _make_callback(name: str, template: CommandTemplate, placeholders_for: PlaceholderSource):
    async def callback(interaction: discord.Interaction):
        try:
            embed = build_command_embed(template, placeholders_for(interaction))
        except Exception as e:
            logger.error(f"Error rendering /{name}: {e}")
            await interaction.response.send_message("An error occurred while processing your request", ephemeral=True)
            return

        await interaction.response.send_message(embed=embed)
        logger.debug(f"Replied to /{name} for user {interaction.user.id}")

    return callback
