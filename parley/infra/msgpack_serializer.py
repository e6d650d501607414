import msgpack
from typing import Any

from parley.core.ports.serializer import Serializer


class MsgPackSerializer(Serializer):
    """
    MsgPack-based implementation of the Serializer interface.

    Compact binary encoding; raw bytes (e.g. DTLS fingerprints or RTP
    parameters carried as binary) survive the round trip, and strings come
    back as str.
    """
    def serialize(self, message: Any) -> bytes:
        return msgpack.packb(message, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        return msgpack.unpackb(data, raw=False)
