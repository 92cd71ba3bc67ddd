import asyncio
import itertools
import logging
from typing import Dict, Protocol

logger = logging.getLogger(__name__)

class Connection(Protocol):
    async def send_text(self, data: str) -> None: ...

class ClientRegistry:
    """Live browser connections, keyed by a never-reused integer"""

    def __init__(self):
        self.connections: Dict[int, Connection] = {}
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self.connections)

    def __contains__(self, key: int) -> bool:
        return key in self.connections

    def register(self, connection: Connection) -> int:
        """Add a connection and return its key"""
        key = next(self._counter)
        self.connections[key] = connection
        logger.debug(f"Registered client {key} ({len(self.connections)} connected)")
        return key

    def deregister(self, key: int):
        """Remove a connection; unknown keys are ignored"""
        if self.connections.pop(key, None) is not None:
            logger.debug(f"Deregistered client {key} ({len(self.connections)} connected)")

    async def broadcast(self, message: str):
        """Send message to every connection, dropping those that fail"""
        # Snapshot, entries can be removed while sends are suspended
        clients = list(self.connections.items())
        if not clients:
            return
        logger.info(f"Broadcasting {message!r} to {len(clients)} client(s)")
        await asyncio.gather(
            *(self._send(key, connection, message) for key, connection in clients)
        )

    async def _send(self, key: int, connection: Connection, message: str):
        try:
            await connection.send_text(message)
        except Exception as e:
            logger.debug(f"Dropping client {key}: {e!r}")
            self.deregister(key)
