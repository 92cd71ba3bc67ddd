import logging
from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from .client_registry import ClientRegistry

logger = logging.getLogger(__name__)

class MonitoringEndpoint:
    """WebSocket route that keeps a browser registered until it speaks or leaves.

    Nothing is ever sent from here; reload messages come from
    ``ClientRegistry.broadcast``.
    """

    def __init__(self, registry: ClientRegistry):
        self.registry = registry

    async def handle(self, websocket: WebSocket):
        await websocket.accept()
        key = self.registry.register(websocket)
        logger.debug(f"Client {key} connected from {websocket.client}")
        try:
            # Any event at all ends the connection, message or disconnect
            message = await websocket.receive()
        finally:
            self.registry.deregister(key)
        if message["type"] != "websocket.disconnect" and \
                websocket.application_state == WebSocketState.CONNECTED:
            try:
                await websocket.close()
            except WebSocketDisconnect:
                logger.debug(f"Client {key} went away before close")
        logger.debug(f"Client {key} closed")
