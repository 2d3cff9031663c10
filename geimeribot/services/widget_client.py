"""Client for the public guild widget feed"""
from dataclasses import dataclass
from typing import List
import requests

from .errors import ProviderError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class WidgetMember:
    """A connected member as reported by the widget"""
    username: str
    discriminator: str
    game_name: str = ""

    @property
    def tag(self) -> str:
        return f"{self.username}#{self.discriminator}"


class WidgetClient:
    """Fetches the members currently connected to a guild"""
    
    def __init__(self, guild_id: str, base_url: str = "https://discord.com/api", timeout: int = 30):
        self.guild_id = guild_id
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
    
    def fetch_members(self) -> List[WidgetMember]:
        """
        Fetch the widget member list
        
        Raises:
            ProviderError: if the widget could not be fetched or decoded
        """
        url = f"{self.base_url}/guilds/{self.guild_id}/widget.json"
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ProviderError(f"Failed to fetch guild widget: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Invalid JSON from guild widget: {e}") from e
        
        members = []
        for raw in data.get("members") or []:
            game = raw.get("game") or {}
            members.append(WidgetMember(
                username=raw.get("username", ""),
                discriminator=str(raw.get("discriminator", "0")),
                game_name=game.get("name") or ""
            ))
        logger.debug(f"Widget reported {len(members)} members")
        return members
