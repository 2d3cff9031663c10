"""Inbound interaction payloads and request signature verification"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import discord
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from ..utils.logger import setup_logger

logger = setup_logger(__name__)

EPHEMERAL = 64
UNKNOWN_USER = "Tuntematon"


class InteractionError(ValueError):
    """An interaction payload is malformed or of an unsupported type"""


def verify_signature(body: bytes, signature: Optional[str], timestamp: Optional[str], public_key: str) -> bool:
    """
    Verify the Ed25519 signature of an interaction request

    Args:
        body: Raw request body
        signature: Hex signature from the X-Signature-Ed25519 header
        timestamp: Value of the X-Signature-Timestamp header
        public_key: Application public key (hex)
    """
    if not signature or not timestamp:
        return False
    try:
        VerifyKey(bytes.fromhex(public_key)).verify(timestamp.encode() + body, bytes.fromhex(signature))
        return True
    except (BadSignatureError, ValueError) as e:
        logger.debug(f"Signature verification failed: {e}")
        return False


@dataclass(frozen=True)
class CustomId:
    """Component identifier of the form namespace:instance_id:action"""
    namespace: str
    instance_id: str
    action: str

    @classmethod
    def parse(cls, value: str) -> "CustomId":
        parts = value.split(":")
        if len(parts) != 3 or not all(parts):
            raise InteractionError(f"Malformed custom id: {value!r}")
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.instance_id}:{self.action}"


@dataclass
class PingInteraction:
    id: str


@dataclass
class CommandInteraction:
    id: str
    name: str
    user_name: str
    options: Dict[str, Any] = field(default_factory=dict)

    def option(self, name: str, default: Any = None) -> Any:
        value = self.options.get(name)
        return value if value not in (None, "") else default


@dataclass
class ComponentInteraction:
    id: str
    custom_id: CustomId
    user_name: str


Interaction = Union[PingInteraction, CommandInteraction, ComponentInteraction]


def _user_name(payload: Dict[str, Any]) -> str:
    member_user = (payload.get("member") or {}).get("user") or {}
    user = payload.get("user") or {}
    return member_user.get("username") or user.get("username") or UNKNOWN_USER


def parse_interaction(payload: Dict[str, Any]) -> Interaction:
    """
    Turn a raw interaction payload into a typed interaction

    Raises:
        InteractionError: for unsupported types or missing fields
    """
    if not isinstance(payload, dict):
        raise InteractionError("Interaction payload must be an object")
    interaction_id = str(payload.get("id", ""))
    kind = payload.get("type")
    data = payload.get("data") or {}

    if kind == discord.InteractionType.ping.value:
        return PingInteraction(id=interaction_id)

    if kind == discord.InteractionType.application_command.value:
        name = data.get("name")
        if not name:
            raise InteractionError("Command interaction without a name")
        options = {o["name"]: o.get("value") for o in data.get("options") or [] if "name" in o}
        return CommandInteraction(
            id=interaction_id,
            name=name,
            user_name=_user_name(payload),
            options=options
        )

    if kind == discord.InteractionType.component.value:
        custom_id = data.get("custom_id")
        if not custom_id:
            raise InteractionError("Component interaction without a custom_id")
        return ComponentInteraction(
            id=interaction_id,
            custom_id=CustomId.parse(custom_id),
            user_name=_user_name(payload)
        )

    raise InteractionError(f"Unsupported interaction type: {kind!r}")


def message_response(content: str, ephemeral: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {"content": content}
    if ephemeral:
        data["flags"] = EPHEMERAL
    return {"type": discord.InteractionResponseType.channel_message.value, "data": data}


def embed_response(embed: discord.Embed, components: Optional[list] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"embeds": [embed.to_dict()]}
    if components is not None:
        data["components"] = components
    return {"type": discord.InteractionResponseType.channel_message.value, "data": data}


def update_message_response(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": discord.InteractionResponseType.message_update.value, "data": data}


def pong_response() -> Dict[str, Any]:
    return {"type": discord.InteractionResponseType.pong.value}
