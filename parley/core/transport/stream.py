import asyncio
import logging
import struct

from parley.core.models.message import Message
from parley.core.ports.serializer import Serializer
from parley.core.transport.application import Application


class Streamer:
    """
    Manages the bidirectional flow of messages for a single client session.

    It receives decoded Message objects from the Protocol through an internal
    queue and exposes them to the Application via `receive()`. When the
    Application sends a message, the Streamer serializes it and writes a
    length-prefixed frame to the transport, the same framing the Protocol
    expects on the way in.

    The Protocol relays the asyncio pause/resume callbacks through
    `pause_writing()` and `resume_writing()`; while paused, `send()` waits
    instead of piling data onto a slow client. A message that cannot be
    serialized or written closes the session.

    `run_app()` executes the Application for the lifetime of the connection
    and closes the transport when it returns or raises.
    """
    def __init__(
        self,
        transport: asyncio.Transport,
        serializer: Serializer,
        queue: asyncio.Queue[Message | None]
    ) -> None:
        self.queue = queue
        self._transport = transport
        self._serializer = serializer
        self._writable = asyncio.Event()
        self._writable.set()
        self._logger = logging.getLogger("core.transport.stream")

    @property
    def write_paused(self) -> bool:
        return not self._writable.is_set()

    def pause_writing(self) -> None:
        self._writable.clear()

    def resume_writing(self) -> None:
        self._writable.set()

    async def send(self, message: Message) -> None:
        if self._transport.is_closing():
            self._logger.debug(f"Transport closing, discard {message.type} message")
            return

        await self._writable.wait()

        try:
            payload = self._serializer.serialize(message.to_dict())
            self._transport.write(struct.pack("!I", len(payload)) + payload)
        except Exception as exc:
            self._logger.error(f"Failed to send message: {exc}")
            self._transport.close()

    async def receive(self) -> Message | None:
        return await self.queue.get()

    async def run_app(self, app: Application) -> None:
        try:
            await app(self.receive, self.send)
        except BaseException as exc:
            self._logger.error("Exception in Application", exc_info=exc)
        finally:
            self._transport.close()
