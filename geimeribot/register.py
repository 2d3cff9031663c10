"""Register the slash commands with Discord"""
import argparse
import sys
from typing import Any, Dict, List, Optional

import requests

from .commands.countdown import CountdownCommand
from .commands.ketalines import KetalinesCommand
from .commands.viikongeimeri import ViikonGeimeriCommand
from .utils.logger import setup_logger

logger = setup_logger(__name__)

API_BASE = "https://discord.com/api/v10"
COMMAND_CLASSES = (ViikonGeimeriCommand, CountdownCommand, KetalinesCommand)


def command_definitions() -> List[Dict[str, Any]]:
    return [command.definition() for command in COMMAND_CLASSES]


def commands_url(application_id: str, guild_id: Optional[str] = None) -> str:
    """Guild commands update instantly; global ones may take a while to propagate"""
    if guild_id:
        return f"{API_BASE}/applications/{application_id}/guilds/{guild_id}/commands"
    return f"{API_BASE}/applications/{application_id}/commands"


def register_commands(token: str, application_id: str, guild_id: Optional[str] = None) -> bool:
    """
    Overwrite the registered commands with the current definitions

    Returns:
        True if Discord accepted the commands
    """
    definitions = command_definitions()
    logger.info(f"Registering {len(definitions)} commands...")
    try:
        response = requests.put(
            commands_url(application_id, guild_id),
            headers={"Authorization": f"Bot {token}"},
            json=definitions,
            timeout=30
        )
    except requests.RequestException as e:
        logger.error(f"Error registering commands: {e}")
        return False

    if response.ok:
        logger.info("Successfully registered commands!")
        return True
    logger.error(f"Error registering commands: {response.status_code} {response.text}")
    return False


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Register slash commands with Discord")
    parser.add_argument("token", help="Bot token")
    parser.add_argument("application_id", help="Application ID")
    parser.add_argument("guild_id", nargs="?", help="Register to this guild only")

    args = parser.parse_args()
    if not register_commands(args.token, args.application_id, args.guild_id):
        sys.exit(1)


if __name__ == "__main__":
    main()
