import logging
from typing import Iterator

from parley.core.connections.connection import Connection


class ConnectionRegistry:
    """
    Index of the connections currently known to the server, keyed by
    connection_id.

    The registry is only touched from the event loop thread, so plain
    dictionary operations are enough. Removing a connection releases its
    notification forwarding; closing the media peer is the caller's call
    (see `Connection.disconnect`).
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._logger = logging.getLogger("core.connections.registry")

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def add(self, connection: Connection) -> None:
        if connection.connection_id in self._connections:
            raise RuntimeError(
                f"Connection {connection.connection_id} is already registered"
            )

        self._connections[connection.connection_id] = connection
        self._logger.info(
            f"Registered {connection.name} as {connection.connection_id} "
            f"({len(self._connections)} connected)"
        )

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def remove(self, connection_id: str) -> Connection | None:
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            return None

        connection.release()
        self._logger.info(
            f"Unregistered {connection.connection_id} "
            f"({len(self._connections)} connected)"
        )
        return connection

    def active(self) -> list[Connection]:
        """Connections whose media peer and transport are both live."""
        return [c for c in self._connections.values() if c.active]

    def disconnect_all(self) -> None:
        """Request closure of every media peer and empty the registry."""
        for connection in list(self._connections.values()):
            connection.disconnect()
            self.remove(connection.connection_id)
