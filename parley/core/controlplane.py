import asyncio
import logging
from typing import Callable

from parley.bootstrap.config.settings import ParleyConfig
from parley.core.connections.registry import ConnectionRegistry
from parley.core.facade import ParleyCore
from parley.core.helpers.spawn import TaskSpawner
from parley.core.models.config import ServerConfig
from parley.core.ports.media import MediaRoom
from parley.core.ports.serializer import Serializer
from parley.core.routing.app import SignalingApplication
from parley.core.service.call import CallService
from parley.core.service.lifecycle import LifecycleService
from parley.core.transport.server import MessageServer


class ControlPlane:
    def __init__(
        self,
        config: ParleyConfig,
        app: SignalingApplication,
        serializer: Serializer,
        room_factory: Callable[[], MediaRoom],
    ) -> None:
        self._config = config
        self._app = app
        self._serializer = serializer
        self._loop = self._create_event_loop()
        # rooms may bind to the loop, build it first
        self._room = room_factory()

        self._logger = logging.getLogger("parley.controlplane")

        self._spawner = TaskSpawner(loop=self._loop)
        self._app.bind(self._spawner)
        self._registry = ConnectionRegistry()
        self._server = MessageServer(
            config=self._build_server_config(),
            serializer=self._serializer,
            loop=self._loop,
        )
        self._call_service = CallService(
            room=self._room,
            registry=self._registry,
            spawner=self._spawner,
        )
        self._lifecycle_service = LifecycleService(
            server=self._server,
            registry=self._registry,
            room=self._room,
            spawner=self._spawner,
            drain_timeout=self._config.server.timeout_graceful_shutdown,
        )

    def build_core(self) -> ParleyCore:
        return ParleyCore(call_service=self._call_service)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    async def start(self, stop_event: asyncio.Event) -> None:
        await self._lifecycle_service.start()
        await stop_event.wait()
        await self._lifecycle_service.stop()

    def _build_server_config(self) -> ServerConfig:
        server_config = self._config.server

        return ServerConfig(
            app=self._app,
            host=server_config.host,
            port=server_config.port,
            backlog=server_config.backlog,
            ssl_ctx=self._config.get_server_ssl_ctx(),
            limit_concurrency=server_config.limit_concurrency,
            max_buffer_size=server_config.max_buffer_size,
            max_message_size=server_config.max_message_size,
            timeout_graceful_shutdown=server_config.timeout_graceful_shutdown,
        )

    @staticmethod
    def _create_event_loop() -> asyncio.AbstractEventLoop:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        return loop
