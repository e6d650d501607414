import logging

from parley.core.helpers.spawn import TaskSpawner
from parley.core.models.message import Message, SendMessage
from parley.core.ports.transport import ReadyState


class StreamChannel:
    """
    Transport over the `send` coroutine handed to an Application.

    The channel is OPEN while the client session runs and CLOSED once the
    application has seen the end of the stream. `send` never blocks: each
    message is written by a background task, and tasks are started in call
    order so the client receives messages in the order they were sent.
    """

    def __init__(self, send: SendMessage, spawner: TaskSpawner) -> None:
        self._send = send
        self._spawner = spawner
        self._ready_state = ReadyState.OPEN
        self._logger = logging.getLogger("core.transport.channel")

    @property
    def ready_state(self) -> ReadyState:
        return self._ready_state

    def send(self, message: Message) -> None:
        if self._ready_state != ReadyState.OPEN:
            self._logger.warning(
                f"Channel {self._ready_state.name.lower()}, discard {message.type} message"
            )
            return

        self._spawner.spawn(self._send(message))

    def close(self) -> None:
        self._ready_state = ReadyState.CLOSED
