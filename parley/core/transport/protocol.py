import asyncio
import logging
import struct

from parley.core.models.config import ServerConfig
from parley.core.models.message import Message, ko
from parley.core.models.state import ServerState
from parley.core.ports.serializer import Serializer
from parley.core.transport.addr import get_local_addr, get_remote_addr
from parley.core.transport.stream import Streamer

HEADER_SIZE = 4


class Protocol(asyncio.Protocol):
    """
    Framing and connection lifecycle for a single signaling client.

    Raw bytes from the transport are accumulated until a complete frame is
    available. Each frame is a 4-byte big-endian length prefix followed by
    the serialized payload. Complete frames are deserialized into Message
    objects and pushed to the Streamer that runs the session's Application.

    When the connection is made, the Protocol registers itself in the
    server state and starts the Streamer task. Clients beyond the
    configured concurrency limit are turned away immediately.

    The connection is closed when the buffer grows past the configured
    maximum, or a frame announces a length above it. Frames that do not
    decode to a `{type: str, data: dict}` envelope are replaced by a `ko`
    message so the application can answer.

    When the connection is lost, the Protocol removes itself from the
    server state, releases any pending write, and pushes a None sentinel to
    tell the Application that the client is gone.
    """
    def __init__(
        self,
        config: ServerConfig,
        server_state: ServerState,
        serializer: Serializer,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._transport: asyncio.Transport = None   # type: ignore[assignment]
        self._streamer: Streamer | None = None

        self._config = config
        self._app = config.app
        self._loop = loop or asyncio.get_event_loop()
        self._connections = server_state.connections
        self._tasks = server_state.tasks
        self._serializer = serializer
        self._buffer = bytearray()
        self._expected_length: int | None = None
        self._client: tuple[str, int] | None = None
        self._logger = logging.getLogger("core.transport.protocol")

    @property
    def client(self) -> str:
        return "%s:%d" % self._client if self._client else "unknown"

    def connection_made(self, transport: asyncio.Transport) -> None:  # type: ignore[override]
        self._transport = transport
        self._client = get_remote_addr(transport)

        if len(self._connections) >= self._config.limit_concurrency:
            self._logger.warning(
                f"{self.client} - Too many connections ({len(self._connections)}), refused"
            )
            transport.close()
            return

        self._connections.add(self)
        self._streamer = Streamer(
            transport=transport,
            serializer=self._serializer,
            queue=asyncio.Queue(),
        )
        task = self._loop.create_task(self._streamer.run_app(self._app))
        task.add_done_callback(self._tasks.discard)
        self._tasks.add(task)

        local = get_local_addr(transport)
        self._logger.debug(
            f"{self.client} - Connection made on "
            f"{'%s:%d' % local if local else 'unknown address'}"
        )

    def connection_lost(self, exc: Exception | None) -> None:
        self._connections.discard(self)
        self._logger.debug(f"{self.client} - Connection lost.")

        if exc is None:
            self._transport.close()

        if self._streamer is not None:
            self._streamer.resume_writing()
            self._streamer.queue.put_nowait(None)

    def eof_received(self) -> None:
        pass

    def data_received(self, data: bytes) -> None:
        if self._streamer is None:
            return

        self._buffer.extend(data)

        if len(self._buffer) > self._config.max_buffer_size:
            self._logger.warning(f"{self.client} - Buffer overflow, closing connection")
            self._transport.close()
            return

        while True:
            if self._expected_length is None:
                if len(self._buffer) < HEADER_SIZE:
                    return

                (self._expected_length,) = struct.unpack("!I", self._buffer[:HEADER_SIZE])
                del self._buffer[:HEADER_SIZE]

                if self._expected_length > self._config.max_message_size:
                    self._logger.warning(f"{self.client} - Frame too large, closing connection")
                    self._transport.close()
                    return

            if len(self._buffer) < self._expected_length:
                return

            frame = bytes(self._buffer[:self._expected_length])
            del self._buffer[:self._expected_length]
            self._expected_length = None

            self._streamer.queue.put_nowait(self._decode_message(frame))

    def pause_writing(self) -> None:
        if self._streamer is not None:
            self._streamer.pause_writing()

    def resume_writing(self) -> None:
        if self._streamer is not None:
            self._streamer.resume_writing()

    def shutdown(self) -> None:
        self._transport.close()

    def _decode_message(self, frame: bytes) -> Message:
        try:
            payload = self._serializer.deserialize(frame)
            msg_type = payload["type"]
            data = payload.get("data", {})
            if not isinstance(msg_type, str) or not isinstance(data, dict):
                raise TypeError("envelope must be {type: str, data: dict}")
        except Exception as exc:
            self._logger.warning(f"{self.client} - Invalid frame format: {exc}")
            return ko("Invalid frame format")

        return Message(type=msg_type, data=data)
