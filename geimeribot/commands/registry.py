"""Lookup of slash commands by name and dispatch of interactions to them"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .base import SlashCommand, UnknownCommandError
from ..services.interactions import CommandInteraction, ComponentInteraction
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class CommandRegistry:
    """Commands keyed by name; components are routed by their custom id namespace"""

    def __init__(self, commands: Iterable[SlashCommand] = ()):
        self._commands: Dict[str, SlashCommand] = {}
        for command in commands:
            self.register(command)

    def register(self, command: SlashCommand):
        if command.name in self._commands:
            raise ValueError(f"Command /{command.name} registered twice")
        self._commands[command.name] = command

    def get(self, name: str) -> Optional[SlashCommand]:
        return self._commands.get(name)

    def definitions(self) -> List[Dict[str, Any]]:
        return [command.definition() for command in self._commands.values()]

    async def dispatch_command(self, interaction: CommandInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        command = self.get(interaction.name)
        if command is None:
            raise UnknownCommandError(f"Unknown command: {interaction.name}")
        logger.info(f"/{interaction.name} invoked by {interaction.user_name}")
        return await command.execute(interaction, now)

    async def dispatch_component(self, interaction: ComponentInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        command = self.get(interaction.custom_id.namespace)
        if command is None:
            raise UnknownCommandError(f"Unknown component namespace: {interaction.custom_id.namespace}")
        return await command.handle_component(interaction, now)
