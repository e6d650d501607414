import logging
from typing import Any, Mapping

from parley.core.connections.connection import Connection, PeerNotReadyError
from parley.core.connections.registry import ConnectionRegistry
from parley.core.helpers.spawn import TaskSpawner
from parley.core.models.message import Message, ko
from parley.core.models.session import Session
from parley.core.ports.media import MediaRoom


class CallService:
    """
    Signaling operations of a call: joining, relaying media protocol
    messages, and leaving.

    A participant's Connection is created on its first `join`, with the
    session channel attached as transport, and registered right away. The
    media peer is requested from the MediaRoom afterwards; if that fails the
    Connection stays registered without a peer, media messages are refused
    with "Peer not ready", and a later `join` may retry.
    """

    def __init__(
        self,
        room: MediaRoom,
        registry: ConnectionRegistry,
        spawner: TaskSpawner,
    ) -> None:
        self._room = room
        self._registry = registry
        self._spawner = spawner
        self._logger = logging.getLogger("core.service.call")

    async def join(self, session: Session, data: Mapping[str, Any]) -> Message:
        name = data.get("name")
        if not isinstance(name, str) or not name:
            return ko("Missing participant name", data.get("request_id"))

        connection = session.connection
        if connection is not None and connection.media_peer is not None:
            return ko("Already joined", data.get("request_id"))

        if connection is None:
            connection = Connection(name=name, spawner=self._spawner)
            connection.attach_transport(session.channel)
            self._registry.add(connection)
            session.connection = connection

        peer = await self._room.create_peer(connection.connection_id, connection.name)
        connection.attach_media_peer(peer)
        self._logger.info(f"{connection.name} joined as {connection.connection_id}")

        return Message(
            type="joined",
            data={
                "request_id": data["request_id"],
                "connection_id": connection.connection_id,
                "name": connection.name,
            }
        )

    async def relay(self, session: Session, data: Mapping[str, Any]) -> Message | None:
        """
        Hand a client media message to the participant's media peer.
        Requests are answered with a `mediaResponse`, notifications are not.
        """
        connection = session.connection
        if connection is None:
            raise PeerNotReadyError("Peer not ready")

        request_id = data.get("request_id")
        message = {k: v for k, v in data.items() if k != "request_id"}

        response = await connection.receive_message(message)
        if message.get("notification"):
            return None

        return Message(
            type="mediaResponse",
            data={"request_id": request_id, "response": response}
        )

    async def leave(self, session: Session, request_id: str | None = None) -> Message:
        connection = session.connection
        if connection is None:
            return ko("Not joined", request_id)

        session.connection = None
        connection.disconnect()
        self._registry.remove(connection.connection_id)
        self._logger.info(f"{connection.name} left ({connection.connection_id})")

        data = {"connection_id": connection.connection_id}
        if request_id is not None:
            data["request_id"] = request_id
        return Message(type="left", data=data)
