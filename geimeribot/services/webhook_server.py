"""
HTTP endpoint receiving Discord interactions

Runs alongside the Discord bot. Requests are signature checked, parsed once
into typed interactions and dispatched to the command registry.
"""
import json
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web

from .interactions import (
    CommandInteraction,
    ComponentInteraction,
    InteractionError,
    PingInteraction,
    parse_interaction,
    pong_response,
    verify_signature,
)
from ..commands.registry import CommandRegistry, UnknownCommandError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


class InteractionServer:
    """aiohttp application serving the interactions endpoint"""

    def __init__(self, registry: CommandRegistry, public_key: str):
        """
        Initialize the server

        Args:
            registry: Commands to dispatch interactions to
            public_key: Application public key used to verify request signatures
        """
        self.registry = registry
        self.public_key = public_key
        self.app = web.Application()
        self.setup_routes()
        self.runner: Optional[web.AppRunner] = None

    def setup_routes(self):
        """Set up routes"""
        self.app.router.add_get('/health', self.health)
        self.app.router.add_post('/', self.interactions)
        self.app.router.add_post('/interactions', self.interactions)

    async def health(self, request: web.Request) -> web.Response:
        """Health check endpoint"""
        return web.json_response({
            'status': 'healthy',
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    async def interactions(self, request: web.Request) -> web.Response:
        """Verify, parse and dispatch one interaction"""
        body = await request.read()
        if not verify_signature(
            body,
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(TIMESTAMP_HEADER),
            self.public_key
        ):
            logger.warning("Rejected interaction with a bad signature")
            return web.Response(status=401, text='Bad request signature')

        try:
            interaction = parse_interaction(json.loads(body))
        except (json.JSONDecodeError, UnicodeDecodeError, InteractionError) as e:
            logger.warning(f"Malformed interaction: {e}")
            return web.Response(status=400, text='Malformed interaction')

        try:
            if isinstance(interaction, PingInteraction):
                return web.json_response(pong_response())
            if isinstance(interaction, CommandInteraction):
                return web.json_response(await self.registry.dispatch_command(interaction))
            if isinstance(interaction, ComponentInteraction):
                return web.json_response(await self.registry.dispatch_component(interaction))
        except UnknownCommandError as e:
            logger.warning(str(e))
        return web.Response(status=404, text='Not Found')

    async def start(self, host: str = '0.0.0.0', port: int = 8080):
        """Start serving in the background"""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, host, port)
        await site.start()
        logger.info(f"Interactions endpoint listening on http://{host}:{port}")

    async def stop(self):
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
