import logging
import uuid
from typing import Callable, Mapping

from parley.core.helpers.spawn import TaskSpawner
from parley.core.models.message import ReceiveMessage, SendMessage, ko
from parley.core.models.session import Session
from parley.core.routing.router import Router, RouteHandler, CloseHandler
from parley.core.transport.channel import StreamChannel


class SignalingApplication:
    """
    Application that runs one signaling session per client and dispatches
    its messages to handlers registered in a `Router`.

    - A Session is opened for each client, holding a StreamChannel over
      `send` so that handlers can hand it out as a Connection transport.
    - Each incoming message is resolved by its `type`. Unknown types get a
      `ko` reply.
    - Handlers are awaited one message at a time, with a copy of the message
      data in which a `request_id` is injected if missing. A returned
      Message is sent back; None means no reply.
    - Any exception raised by a handler is logged and answered with a `ko`
      carrying the error text and the request_id of the failed message.

    When `receive()` returns None the client is gone: the channel is closed
    and the close handlers run for the session.
    """

    def __init__(self, spawner: TaskSpawner | None = None) -> None:
        self.router = Router()
        self._spawner = spawner
        self._logger = logging.getLogger("core.routing.app")

    def bind(self, spawner: TaskSpawner) -> None:
        """Set the spawner used for outbound channel writes."""
        self._spawner = spawner

    async def __call__(self, receive: ReceiveMessage, send: SendMessage) -> None:
        if self._spawner is None:
            raise RuntimeError("SignalingApplication is not bound to a TaskSpawner")

        session = Session(channel=StreamChannel(send, self._spawner))

        try:
            while True:
                msg = await receive()
                if msg is None:
                    break

                handler = self.router.resolve(msg.type) if isinstance(msg.type, str) else None

                if handler is None:
                    await send(ko(f"Unknown message type {msg.type!r}"))
                    continue

                data = dict(msg.data) if isinstance(msg.data, Mapping) else {}
                request_id = data.setdefault("request_id", str(uuid.uuid4()))

                try:
                    result = await handler(session, data)
                    if result is not None:
                        await send(result)
                        self._logger.debug(f"Sent message: {result}")
                except Exception as exc:
                    self._logger.error(f"Error in handler '{msg.type}': {exc}", exc_info=exc)
                    await send(ko(str(exc), request_id))
        finally:
            session.channel.close()
            for on_close in self.router.close_handlers():
                try:
                    await on_close(session)
                except Exception as exc:
                    self._logger.error(f"Error in close handler: {exc}", exc_info=exc)

    def request(self, event_type: str) -> Callable[[RouteHandler], RouteHandler]:
        return self.router.request(event_type)

    def closed(self, func: CloseHandler) -> CloseHandler:
        return self.router.closed(func)
