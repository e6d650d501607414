import asyncio
import logging

from parley.core.connections.registry import ConnectionRegistry
from parley.core.helpers.spawn import TaskSpawner
from parley.core.ports.media import MediaRoom
from parley.core.transport.server import MessageServer


class LifecycleService:
    """
    Starts the signaling server and tears everything down in order on
    stop: client sessions first, then media peers still attached, then the
    media room, then whatever background work is left.
    """

    def __init__(
        self,
        server: MessageServer,
        registry: ConnectionRegistry,
        room: MediaRoom,
        spawner: TaskSpawner,
        drain_timeout: float = 5.0,
    ) -> None:
        self._server = server
        self._registry = registry
        self._room = room
        self._spawner = spawner
        self._drain_timeout = drain_timeout
        self._logger = logging.getLogger("core.service.lifecycle")

    async def start(self) -> None:
        await self._server.start()
        self._logger.info("Signaling server started at %s:%d", *self._server.listen)

    async def stop(self) -> None:
        if self._server.running:
            self._logger.info("Shutting down signaling server.")
            await self._server.shutdown()
        else:
            self._logger.info("Signaling server is not running, skip shutting down.")

        if remaining := len(self._registry):
            self._logger.info(f"Disconnecting {remaining} remaining connection(s).")
            self._registry.disconnect_all()

        self._logger.info("Closing media room.")
        await self._room.close()

        try:
            await asyncio.wait_for(self._drain(), timeout=self._drain_timeout)
        except asyncio.TimeoutError:
            self._logger.error(
                f"Cancel {self._spawner.remaining_tasks} background task(s), "
                f"timeout exceeded"
            )
            await self._spawner.cancel_all()

    async def _drain(self) -> None:
        while remaining := self._spawner.remaining_tasks:
            self._logger.info(f"Waiting for {remaining} background tasks to complete.")
            await asyncio.sleep(0.1)
