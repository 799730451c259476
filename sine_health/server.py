"""WebSocket relay of heart rate updates to presentation clients."""

import asyncio
import json
import logging
from collections.abc import Sequence

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)


class HeartRateServer:
    """WebSocket server that broadcasts HR data to all connected clients.

    The last HR update and status are replayed to clients as they connect, so
    a display joining mid-session starts from the current reading.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8765,
        broadcast_timeout: float = 0.5,
    ):
        self.host = host
        self.port = port
        self._broadcast_timeout = broadcast_timeout
        self._clients: set[ServerConnection] = set()
        self._server = None
        self._last_hr: dict | None = None
        self._last_status: dict | None = None

    def _client_info(self, websocket: ServerConnection) -> str:
        """Get client info string for logging."""
        addr = websocket.remote_address
        if addr:
            return f"{addr[0]}:{addr[1]}"
        return "unknown"

    async def _send_current_state(self, websocket: ServerConnection) -> None:
        """Replay the last status and HR update to a new client."""
        if self._last_status is not None:
            await websocket.send(json.dumps(self._last_status))
        # Read after the await, a broadcast may have replaced it
        if self._last_hr is not None:
            await websocket.send(json.dumps(self._last_hr))

    async def _handler(self, websocket: ServerConnection) -> None:
        """Handle a WebSocket connection."""
        self._clients.add(websocket)
        logger.info("Client connected: %s (%d total)", self._client_info(websocket), len(self._clients))
        try:
            await self._send_current_state(websocket)
            async for _ in websocket:
                pass  # Clients only listen
        except ConnectionClosed:
            pass  # Abrupt client disconnects are expected
        finally:
            self._clients.discard(websocket)
            logger.info("Client disconnected: %s (%d total)", self._client_info(websocket), len(self._clients))

    async def broadcast(self, message: dict) -> None:
        """Broadcast a message to all connected clients."""
        if not self._clients:
            return
        # Snapshot clients, the set may change while sends are pending
        clients = list(self._clients)
        data = json.dumps(message)
        try:
            results = await asyncio.wait_for(
                asyncio.gather(
                    *[client.send(data) for client in clients],
                    return_exceptions=True,
                ),
                timeout=self._broadcast_timeout,
            )
            self._remove_failed_clients(clients, results)
        except TimeoutError:
            logger.warning("Broadcast timeout, slow client(s) skipped")

    def _remove_failed_clients(self, clients: list[ServerConnection], results: list) -> None:
        """Remove clients that failed to receive a message."""
        for client, result in zip(clients, results, strict=True):
            if isinstance(result, Exception):
                self._clients.discard(client)
                logger.debug("Removed failed client: %s", result)

    async def broadcast_hr(self, bpm: int, history: Sequence[int], timestamp_ms: int) -> None:
        """Broadcast the latest heart rate and the rolling history."""
        msg = {"bpm": bpm, "history": list(history), "timestamp": timestamp_ms}
        self._last_hr = msg
        await self.broadcast(msg)

    async def broadcast_status(self, status: str, device: str | None = None) -> None:
        """Broadcast status message."""
        msg = {"status": status}
        if device:
            msg["device"] = device
        self._last_status = msg
        if status != "connected":
            # The monitor clears history whenever it is not connected
            self._last_hr = None
        await self.broadcast(msg)

    async def start(self) -> None:
        """Start the WebSocket server."""
        self._server = await serve(self._handler, self.host, self.port)
        logger.debug("Server started on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Stop the WebSocket server."""
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            logger.debug("Server stopped")

    @property
    def client_count(self) -> int:
        """Number of connected clients."""
        return len(self._clients)
