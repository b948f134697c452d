#!/usr/bin/env python3
"""
Unit tests for custom command handlers and their templated replies.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord import app_commands

from config.models import Config, CustomCommand
from discord_bot.dispatch import bind_commands
from discord_bot.embeds.custom_message import (
    DEFAULT_MESSAGE,
    CommandTemplate,
    build_command_embed,
    template_for,
)
from discord_bot.placeholders import build_placeholders, render


def cmd(name, **kwargs):
    return CustomCommand(name=name, description=f"The {name} command", enabled=True, **kwargs)


def bound_commands(tree):
    return {call.args[0].name: call.args[0] for call in tree.add_command.call_args_list}


class TestTemplates:
    """Test the reply template for each command."""

    def test_ip_has_server_address_template(self):
        template = template_for(cmd("ip"))

        assert template.description == "The server address is: `{server.address}:{server.port}`"

    def test_other_commands_get_default_message(self):
        assert template_for(cmd("rules")).description == DEFAULT_MESSAGE

    def test_configured_message_wins(self):
        assert template_for(cmd("ip", message="Join us")).description == "Join us"

    def test_embed_renders_placeholders(self):
        template = CommandTemplate(description="Connect to {server.address}:{server.port}", color="#FF0000")

        embed = build_command_embed(template, {"server.address": "1.2.3.4", "server.port": "28015"})

        assert isinstance(embed, discord.Embed)
        assert embed.description == "Connect to 1.2.3.4:28015"
        assert embed.color == discord.Color(0xFF0000)

    def test_invalid_color_falls_back(self):
        embed = build_command_embed(CommandTemplate(description="hi", color="not-a-color"), {})

        assert embed.color == discord.Color(0x43B581)


class TestPlaceholders:
    """Test placeholder substitution."""

    def test_unknown_placeholders_left_intact(self):
        assert render("{user.name} on {nope.value}", {"user.name": "Ann"}) == "Ann on {nope.value}"

    def test_interaction_placeholders(self):
        config = Config(discord_token="", server_address="1.2.3.4", server_port="28015")
        interaction = MagicMock()
        interaction.user.display_name = "Ann"
        interaction.user.id = 42
        interaction.user.mention = "<@42>"
        interaction.guild.name = "My Server"
        interaction.guild.id = 7
        interaction.channel.name = "general"
        interaction.command.name = "ip"

        data = build_placeholders(config, interaction)

        assert data["server.address"] == "1.2.3.4"
        assert data["user.mention"] == "<@42>"
        assert data["guild.name"] == "My Server"
        assert data["channel.name"] == "general"
        assert data["command"] == "ip"

    def test_direct_message_has_no_guild(self):
        config = Config(discord_token="")
        interaction = MagicMock()
        interaction.guild = None

        data = build_placeholders(config, interaction)

        assert "guild.name" not in data


class TestBindCommands:
    """Test binding handlers into the command tree."""

    def test_returns_template_mapping(self):
        tree = MagicMock()

        templates = bind_commands(tree, [cmd("ip"), cmd("rules")], lambda interaction: {})

        assert list(templates) == ["ip", "rules"]
        assert templates["rules"].description == DEFAULT_MESSAGE
        commands = bound_commands(tree)
        assert isinstance(commands["ip"], app_commands.Command)
        assert commands["ip"].description == "The ip command"

    def test_previous_handlers_are_removed(self):
        tree = MagicMock()
        previous = bind_commands(tree, [cmd("ip"), cmd("old")], lambda interaction: {})

        bind_commands(tree, [cmd("ip")], lambda interaction: {}, previous=previous)

        removed = [call.args[0] for call in tree.remove_command.call_args_list]
        assert sorted(removed) == ["ip", "old"]

    def test_failed_add_restores_previous_handlers(self):
        tree = MagicMock()
        old_handler = MagicMock()
        tree.remove_command.return_value = old_handler

        def add_command(command, override=False):
            if getattr(command, "name", None) == "broken":
                raise app_commands.CommandLimitReached(guild_id=None, limit=100)

        tree.add_command.side_effect = add_command

        with pytest.raises(app_commands.CommandLimitReached):
            bind_commands(tree, [cmd("ip"), cmd("broken")], lambda interaction: {}, previous={"old": None})

        removed = [call.args[0] for call in tree.remove_command.call_args_list]
        assert removed == ["old", "ip"]
        tree.add_command.assert_called_with(old_handler, override=True)

    @pytest.mark.asyncio
    async def test_handler_replies_with_embed(self):
        tree = MagicMock()
        bind_commands(tree, [cmd("ip")], lambda interaction: {"server.address": "1.2.3.4", "server.port": "28015"})
        interaction = AsyncMock()
        interaction.response.send_message = AsyncMock()

        await bound_commands(tree)["ip"].callback(interaction)

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.description == "The server address is: `1.2.3.4:28015`"

    @pytest.mark.asyncio
    async def test_handler_reports_render_error(self):
        tree = MagicMock()

        def broken(interaction):
            raise RuntimeError("no data")

        bind_commands(tree, [cmd("ip")], broken)
        interaction = AsyncMock()
        interaction.response.send_message = AsyncMock()

        await bound_commands(tree)["ip"].callback(interaction)

        interaction.response.send_message.assert_called_once_with(
            "An error occurred while processing your request",
            ephemeral=True
        )
