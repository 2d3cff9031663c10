import json

import pytest
from aiohttp import test_utils
from nacl.signing import SigningKey

from geimeribot.commands.base import SlashCommand
from geimeribot.commands.registry import CommandRegistry
from geimeribot.services.interactions import message_response, update_message_response
from geimeribot.services.webhook_server import InteractionServer

TIMESTAMP = "1700000000"


class EchoCommand(SlashCommand):
    name = "echo"
    description = "Echo"

    def __init__(self):
        self.components = []

    async def execute(self, interaction, now=None):
        return message_response(f"{interaction.user_name}: {interaction.option('text', '')}")

    async def handle_component(self, interaction, now=None):
        self.components.append(interaction.custom_id.action)
        return update_message_response({"content": interaction.custom_id.action})


class PlainCommand(SlashCommand):
    name = "plain"
    description = "No buttons"

    async def execute(self, interaction, now=None):
        return message_response("plain")


class Harness:
    def __init__(self):
        self.key = SigningKey.generate()
        self.command = EchoCommand()
        registry = CommandRegistry([self.command, PlainCommand()])
        self.server = InteractionServer(registry, self.key.verify_key.encode().hex())

    def headers(self, body: bytes, timestamp: str = TIMESTAMP):
        return {
            "X-Signature-Ed25519": self.key.sign(timestamp.encode() + body).signature.hex(),
            "X-Signature-Timestamp": timestamp,
            "Content-Type": "application/json",
        }

    async def post(self, client, payload, path="/", signed=True):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        headers = self.headers(body) if signed else {"Content-Type": "application/json"}
        return await client.post(path, data=body, headers=headers)


@pytest.fixture
def harness():
    return Harness()


@pytest.mark.asyncio
async def test_unsigned_request_rejected(harness):
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        response = await harness.post(client, {"type": 1}, signed=False)

        assert response.status == 401
        assert await response.text() == "Bad request signature"


@pytest.mark.asyncio
async def test_ping_answered_with_pong(harness):
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        response = await harness.post(client, {"id": "1", "type": 1})

        assert response.status == 200
        assert await response.json() == {"type": 1}


@pytest.mark.asyncio
async def test_command_dispatched_on_both_paths(harness):
    payload = {
        "id": "2",
        "type": 2,
        "data": {"name": "echo", "options": [{"name": "text", "value": "moi"}]},
        "member": {"user": {"username": "matti"}},
    }
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        for path in ("/", "/interactions"):
            response = await harness.post(client, payload, path=path)

            assert response.status == 200
            assert await response.json() == {"type": 4, "data": {"content": "matti: moi"}}


@pytest.mark.asyncio
async def test_component_routed_by_namespace(harness):
    payload = {"id": "3", "type": 3, "data": {"custom_id": "echo:abc:t1"}}
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        response = await harness.post(client, payload)

        assert response.status == 200
        assert (await response.json())["type"] == 7
        assert harness.command.components == ["t1"]


@pytest.mark.asyncio
async def test_malformed_payloads_rejected(harness):
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        not_json = await harness.post(client, b"{not json")
        bad_type = await harness.post(client, {"id": "4", "type": 42})
        bad_custom_id = await harness.post(client, {"id": "5", "type": 3, "data": {"custom_id": "echo"}})

        assert not_json.status == 400
        assert bad_type.status == 400
        assert bad_custom_id.status == 400


@pytest.mark.asyncio
async def test_unknown_command_not_found(harness):
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        command = await harness.post(client, {"id": "6", "type": 2, "data": {"name": "nope"}})
        component = await harness.post(client, {"id": "7", "type": 3, "data": {"custom_id": "nope:a:b"}})

        assert command.status == 404
        assert component.status == 404


@pytest.mark.asyncio
async def test_health(harness):
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        response = await client.get("/health")

        assert response.status == 200
        assert (await response.json())["status"] == "healthy"


@pytest.mark.asyncio
async def test_component_for_command_without_buttons_not_found(harness):
    async with test_utils.TestClient(test_utils.TestServer(harness.server.app)) as client:
        response = await harness.post(client, {"id": "8", "type": 3, "data": {"custom_id": "plain:a:b"}})

        assert response.status == 404
