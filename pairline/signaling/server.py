"""WebSocket signaling server."""

import json
from http import HTTPStatus
from typing import Any, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from pairline.signaling.errors import MessageError, Unrouted
from pairline.signaling.messages import SignalingMessage
from pairline.signaling.router import SignalingRouter
from pairline.utils.config import ServerConfig
from pairline.utils.logger import get_logger

logger = get_logger(__name__)


class SignalingServer:
    """Two-party signaling server."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        config: Optional[ServerConfig] = None,
        router: Optional[SignalingRouter] = None,
    ):
        """Initialize signaling server.

        Args:
            host: Server host (overrides config)
            port: Server port (overrides config)
            config: Server configuration
            router: Signaling router (a fresh one when omitted)
        """
        self.config = config or ServerConfig()
        self.host = host if host is not None else self.config.host
        self.port = port if port is not None else self.config.port
        self.router = router or SignalingRouter()
        self._server: Optional[Server] = None

        logger.info(f"Signaling server initialized on {self.host}:{self.port}")

    async def listen(self) -> Server:
        """Bind the listening socket and start accepting connections."""
        self._server = await serve(
            self.handle_client,
            self.host,
            self.port,
            process_request=self._process_request,
            ping_interval=self.config.ping_interval,
            ping_timeout=self.config.ping_timeout,
            max_size=self.config.max_message_size,
        )
        # Resolve port 0 to the port the OS picked
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info(f"Signaling server listening on ws://{self.host}:{self.port}")
        return self._server

    async def start(self) -> None:
        """Start the signaling server and run until stopped."""
        server = await self.listen()
        try:
            await server.serve_forever()
        finally:
            await self.stop()

    async def stop(self) -> None:
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()
        await server.wait_closed()
        logger.info("Signaling server stopped")

    def _process_request(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        """Answer health checks over plain HTTP; let websocket upgrades through."""
        path = request.path.split("?", 1)[0]
        if path != self.config.health_path:
            return None
        body = json.dumps({
            "status": "ok",
            "rooms": len(self.router.registry),
            "connections": len(self.router.connections),
        })
        response = connection.respond(HTTPStatus.OK, body + "\n")
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    async def handle_client(self, websocket: Any) -> None:
        """Handle client connection.

        Every exit path, clean close or abrupt loss, ends in the same
        disconnect teardown.

        Args:
            websocket: WebSocket connection
        """
        connection = self.router.attach(websocket)
        log = logger.bind(connection=connection.id)

        try:
            async for raw in websocket:
                try:
                    await self._handle_frame(connection.id, raw)
                except MessageError as e:
                    log.warning(f"Dropping malformed message: {e}")
                except Unrouted as e:
                    log.warning(f"Dropping message: {e}")
        except ConnectionClosed as e:
            log.info(f"Connection lost: {e}")
        finally:
            await self.router.disconnect(connection.id)

    async def _handle_frame(self, connection_id: str, raw: Any) -> None:
        message = SignalingMessage.from_json(raw)
        await self.router.dispatch(connection_id, message)
