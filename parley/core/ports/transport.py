from enum import IntEnum
from typing import Protocol

from parley.core.models.message import Message


class ReadyState(IntEnum):
    """
    Readiness of a client channel. Values follow the WebSocket
    readyState numbering so that adapters over websocket libraries can
    expose their state unchanged.
    """
    CONNECTING = 0
    OPEN = 1
    CLOSING = 2
    CLOSED = 3


class Transport(Protocol):
    """
    Outbound side of a client channel, as seen by a Connection.

    The channel is owned by the transport layer; a Connection only reads its
    readiness and pushes messages into it. `send` must not block: delivery
    happens in the background, and failures are reported by the channel
    itself.
    """

    @property
    def ready_state(self) -> ReadyState:
        """Current readiness of the channel."""

    def send(self, message: Message) -> None:
        """Queue a message for delivery to the client."""
