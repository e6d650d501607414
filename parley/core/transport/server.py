import asyncio
import logging

from parley.core.models.config import ServerConfig
from parley.core.models.state import ServerState
from parley.core.ports.serializer import Serializer
from parley.core.transport.protocol import Protocol


class MessageServer:
    """
    Owns the lifecycle of the TCP server that signaling clients connect to.

    It binds to the configured host and port, optionally behind TLS, and
    creates one Protocol per accepted client. Each Protocol shares the
    server's ServerState, which tracks live client connections and the
    session tasks started for them.

    No application logic lives here: the server only wires the configured
    Application, the Serializer and the Protocol together.

    On shutdown, MessageServer closes the listening socket, closes every
    client connection, and waits for sessions to wind down. Tasks still
    running when the graceful shutdown timeout expires are cancelled.
    """
    def __init__(
        self,
        config: ServerConfig,
        serializer: Serializer,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._serializer = serializer
        self._loop = loop or asyncio.get_event_loop()
        self.state = ServerState()
        self._logger = logging.getLogger("core.transport.server")

        self._server: asyncio.AbstractServer | None = None

    @property
    def running(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def listen(self) -> tuple[str, int]:
        """Address actually bound, useful when the configured port is 0."""
        if self._server and self._server.sockets:
            host, port = self._server.sockets[0].getsockname()[:2]
            return host, port
        return self._config.host, self._config.port

    def create_protocol(self) -> asyncio.Protocol:
        return Protocol(
            config=self._config,
            server_state=self.state,
            serializer=self._serializer,
            loop=self._loop
        )

    async def start(self) -> None:
        config = self._config

        self._server = await self._loop.create_server(
            self.create_protocol,
            host=config.host,
            port=config.port,
            backlog=config.backlog,
            ssl=config.ssl_ctx
        )

    async def shutdown(self) -> None:
        if self._server:
            self._server.close()

        for connection in self.state.connections.copy():
            connection.shutdown()

        try:
            await asyncio.wait_for(
                self._wait_task_complete(),
                timeout=self._config.timeout_graceful_shutdown
            )
        except asyncio.TimeoutError:
            self._logger.error(
                f"Cancel {len(self.state.tasks)} running task(s), "
                f"timeout graceful shutdown: {self.state.tasks}"
            )
            for task in self.state.tasks:
                task.cancel("Task cancelled, timeout graceful shutdown exceeded")

    async def _wait_task_complete(self) -> None:
        if self.state.connections:
            self._logger.info("Waiting for client connections to close.")

        while self.state.connections:
            await asyncio.sleep(0.1)

        if self.state.tasks:
            self._logger.info("Waiting for client sessions to complete.")

        while self.state.tasks:
            await asyncio.sleep(0.1)

        if self._server:
            await self._server.wait_closed()
