from typing import Protocol

from parley.core.models.message import ReceiveMessage, SendMessage


class Application(Protocol):
    """
    Per-session handler executed by the Streamer for one client.

    The Application receives `receive`, which waits for the next decoded
    Message from the client and returns None once the client is gone, and
    `send`, which writes a Message back. It runs for the whole lifetime of
    the client session; when it returns or raises, the Streamer closes the
    underlying connection.

    Framing and serialization are not its concern.
    """
    async def __call__(self, receive: ReceiveMessage, send: SendMessage) -> None:
        ...
