import asyncio
import itertools
import logging
import secrets
import time
from typing import Any, AsyncIterator

from parley.core.helpers.spawn import TaskSpawner
from parley.core.models.attachment import Attached, Unattached
from parley.core.models.message import PeerMessage, media_envelope
from parley.core.ports.media import MediaPeer
from parley.core.ports.transport import ReadyState, Transport


_sequence = itertools.count()


def new_connection_id() -> str:
    """
    Build an opaque identifier from the current time, a process-wide
    sequence number and a few random bytes. The sequence keeps ids
    distinct even when two connections are created within the same clock
    tick.
    """
    return f"{time.time_ns():x}{next(_sequence):04x}{secrets.token_hex(3)}"


class PeerNotReadyError(RuntimeError):
    """Raised when a message reaches a connection with no media peer yet."""


class Connection:
    """
    A single participant connected to the call, on the server side.

    A Connection pairs the client channel (the transport) with the
    participant's media session (the media peer) and relays protocol
    messages between them:

    - messages from the client are handed to the media peer, as requests
      or notifications depending on their `notification` flag
    - notifications raised by the media peer are wrapped in a
      `mediaMessage` envelope and sent to the client

    Both collaborators are created and owned elsewhere and attached once
    they exist, in any order. Each can be attached only once; attaching the
    same object again is a no-op, attaching a different one is an error.
    Whether they are closed is tracked by the collaborators themselves, and
    `active` reads it afresh on every access.

    Errors raised by the media peer or the transport are never caught here.
    """

    def __init__(self, name: str, spawner: TaskSpawner) -> None:
        self._connection_id = new_connection_id()
        self._name = name
        self._spawner = spawner

        self._media_peer: Unattached | Attached[MediaPeer] = Unattached()
        self._transport: Unattached | Attached[Transport] = Unattached()
        self._forwarding: asyncio.Task | None = None

        self._logger = logging.getLogger("core.connections.connection")

    def __repr__(self) -> str:
        return f"Connection(id={self._connection_id!r}, name={self._name!r})"

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def active(self) -> bool:
        """
        True when both a media peer and a transport are attached, the peer
        is not closed and the transport is open.
        """
        match self._media_peer, self._transport:
            case Attached(peer), Attached(transport):
                return not peer.closed and transport.ready_state == ReadyState.OPEN
            case _:
                return False

    @property
    def media_peer(self) -> MediaPeer | None:
        match self._media_peer:
            case Attached(peer):
                return peer
            case _:
                return None

    @property
    def transport(self) -> Transport | None:
        match self._transport:
            case Attached(transport):
                return transport
            case _:
                return None

    def attach_media_peer(self, media_peer: MediaPeer) -> None:
        """
        Attach the participant's media session and start forwarding every
        notification it raises to the client, for as long as the peer's
        notification stream stays open.
        """
        match self._media_peer:
            case Attached(current) if current is media_peer:
                return
            case Attached():
                raise RuntimeError(
                    f"A media peer is already attached to {self._connection_id}"
                )

        self._media_peer = Attached(media_peer)

        # subscribe now: notifications raised before the task runs must not be lost
        stream = aiter(media_peer.notifications)
        self._forwarding = self._spawner.spawn(
            self._forward(stream),
            name=f"forward-{self._connection_id}",
        )
        self._logger.debug(f"Media peer attached to {self._connection_id}")

    def attach_transport(self, transport: Transport) -> None:
        match self._transport:
            case Attached(current) if current is transport:
                return
            case Attached():
                raise RuntimeError(
                    f"A transport is already attached to {self._connection_id}"
                )

        self._transport = Attached(transport)
        self._logger.debug(f"Transport attached to {self._connection_id}")

    def disconnect(self) -> None:
        """
        Ask the media peer to close, without waiting for it. The peer stays
        attached and the transport is left untouched. No-op without a peer.
        """
        match self._media_peer:
            case Attached(peer):
                self._logger.debug(f"Closing media peer of {self._connection_id}")
                self._spawner.spawn(
                    peer.close(), name=f"close-{self._connection_id}"
                )
            case Unattached():
                pass

    def release(self) -> None:
        """Stop forwarding peer notifications. Safe to call more than once."""
        if self._forwarding is not None:
            self._forwarding.cancel()
            self._forwarding = None

    async def receive_message(self, message: PeerMessage) -> Any:
        """
        Hand a client message to the media peer and return the peer's
        result. Notifications go to the notification handler, anything else
        is treated as a request.

        Raises PeerNotReadyError when no media peer is attached yet.
        """
        match self._media_peer:
            case Unattached():
                raise PeerNotReadyError("Peer not ready")
            case Attached(peer):
                if message.get("notification"):
                    return await peer.receive_notification(message)
                return await peer.receive_request(message)

    def send_peer_message(self, message: PeerMessage) -> None:
        """
        Deliver a peer-generated message to the client. Messages are dropped
        when no transport is attached.
        """
        match self._transport:
            case Attached(transport):
                transport.send(media_envelope(message))
            case Unattached():
                self._logger.warning(
                    f"No transport attached to {self._connection_id}, "
                    f"dropping media message"
                )

    async def _forward(self, stream: AsyncIterator[PeerMessage]) -> None:
        async for message in stream:
            self.send_peer_message(message)

        self._logger.debug(f"Notification stream ended for {self._connection_id}")
