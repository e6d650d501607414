from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from parley.core.transport.channel import StreamChannel

if TYPE_CHECKING:
    from parley.core.connections.connection import Connection


@dataclass
class Session:
    """
    Per-client state shared by the handlers of one signaling session.
    """
    channel: StreamChannel
    """
    Outbound channel to the client, attached as the Connection's transport.
    """

    connection: "Connection | None" = field(default=None)
    """
    Set by `join`; cleared again when the participant leaves.
    """
