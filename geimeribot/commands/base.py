"""Base class for slash commands"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import discord

from ..services.interactions import CommandInteraction, ComponentInteraction


class UnknownCommandError(LookupError):
    """No command is registered for an interaction"""


def option(name: str, description: str, option_type: discord.AppCommandOptionType, required: bool = False) -> Dict[str, Any]:
    """Build a command option definition"""
    return {
        "name": name,
        "description": description,
        "type": option_type.value,
        "required": required,
    }


class SlashCommand:
    """A slash command: its registration payload and its handlers"""

    name: str = ""
    description: str = ""
    options: List[Dict[str, Any]] = []

    @classmethod
    def definition(cls) -> Dict[str, Any]:
        """Payload used when registering the command"""
        return {"name": cls.name, "description": cls.description, "options": list(cls.options)}

    async def execute(self, interaction: CommandInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        raise NotImplementedError

    async def handle_component(self, interaction: ComponentInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        raise UnknownCommandError(f"/{self.name} has no components")
