from typing import Protocol, Any


class Serializer(Protocol):
    """
    Encoding of the signaling envelopes exchanged with clients.

    Implementations must be pure and must raise on malformed input rather
    than return partial data; the Protocol turns failures into `ko` replies.
    """

    def serialize(self, message: Any) -> bytes:
        """Encode a Python object into bytes suitable for network transport."""

    def deserialize(self, data: bytes) -> Any:
        """Decode bytes received from the network into a Python object."""
