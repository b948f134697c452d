"""
Global application command calls against the Discord REST API.

Uses the bot's own discord.py HTTP client so requests share its session,
authentication and rate limiting. `CommandTree.sync` is not used because
it overwrites every global command in one request.
"""

import logging
from typing import Any, Dict

from discord import AppCommandType
from discord.http import HTTPClient

from config.models import CustomCommand
from sync.reconciler import LiveCommand

logger = logging.getLogger(__name__)


def build_command_payload(command: CustomCommand) -> Dict[str, Any]:
    """Discord payload for a chat input command."""
    return {
        "name": command.name,
        "description": command.description,
        "type": AppCommandType.chat_input.value,
        "dm_permission": command.allow_in_dm,
    }


class DiscordCommandService:
    def __init__(self, http: HTTPClient, application_id: int):
        self.http = http
        self.application_id = application_id

    async def list_global_commands(self) -> Dict[str, LiveCommand]:
        """Map of global command name to its ID, description and DM flag."""
        data = await self.http.get_global_commands(self.application_id)
        commands = {
            item["name"]: LiveCommand(
                id=int(item["id"]),
                description=item.get("description"),
                dm_permission=item.get("dm_permission"),
            )
            for item in data
        }
        logger.debug(f"Discord reports {len(commands)} global commands")
        return commands

    async def create_command(self, command: CustomCommand) -> int:
        """Create or overwrite a global command. Returns its ID."""
        data = await self.http.upsert_global_command(self.application_id, build_command_payload(command))
        return int(data["id"])

    async def delete_command(self, command_id: int) -> None:
        await self.http.delete_global_command(self.application_id, command_id)
