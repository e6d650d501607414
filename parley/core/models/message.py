from dataclasses import dataclass, asdict
from typing import Any, Callable, Awaitable


MEDIA_MESSAGE = "mediaMessage"
"""
Envelope type carrying media protocol messages, in both directions.
"""


PeerMessage = dict[str, Any]
"""
Opaque media protocol message. Only the optional boolean `notification`
field is ever inspected on this side; everything else belongs to the
media engine.
"""


@dataclass
class Message:
    """
    Internal representation of an application-level message.
    The transport layer encodes/decodes messages via the Serializer,
    while the application manipulates them in this native Python form.
    """
    type: str
    """
    type of message, e.g. "join", "mediaMessage", "ko"
    """

    data: dict[Any, Any]
    """
    A dictionary of serializable data
    """

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dictionary representation of the message."""
        return asdict(self)


def media_envelope(message: PeerMessage) -> Message:
    """Wrap a peer-generated message for delivery to the client."""
    return Message(type=MEDIA_MESSAGE, data=message)


def ko(reason: str, request_id: Any = None) -> Message:
    """
    Error reply. `request_id` ties it to the client message that failed;
    frame and routing errors have none to give.
    """
    data: dict[str, Any] = {"message": reason}
    if request_id is not None:
        data["request_id"] = request_id
    return Message(type="ko", data=data)


ReceiveMessage = Callable[[], Awaitable[Message | None]]
"""
Coroutine provided to the application for receiving a message.
It suspends until a message is available, and returns None once the
client is gone.
"""


SendMessage = Callable[[Message], Awaitable[None]]
"""
Coroutine provided to the application for sending a message to the client.
"""
