from typing import Any, Protocol

from parley.core.helpers.sub import Subscription
from parley.core.models.message import PeerMessage


class MediaPeer(Protocol):
    """
    Server-side media session of one participant.

    The media engine negotiates capabilities, creates transports and handles
    codecs behind this interface; none of that is visible here. A MediaPeer
    consumes protocol messages coming from its client, and emits protocol
    notifications of its own through `notifications`.

    Implementations own the notification stream and must close it once the
    peer is closed, which ends any forwarding attached to it.
    """

    @property
    def closed(self) -> bool:
        """True once the peer has been closed, by either side."""

    @property
    def notifications(self) -> Subscription[PeerMessage]:
        """Stream of notifications the peer wants delivered to its client."""

    async def close(self) -> None:
        """Tear down the media session. Closing twice must be harmless."""

    async def receive_request(self, request: PeerMessage) -> Any:
        """
        Handle a request from the client and return its response.
        Failures are raised to the caller.
        """

    async def receive_notification(self, notification: PeerMessage) -> Any:
        """Handle a fire-and-forget notification from the client."""


class MediaRoom(Protocol):
    """
    Factory for MediaPeer instances sharing a media context (one call).

    A concrete room is supplied by the media engine integration and loaded
    from configuration; see `media.room_factory`.
    """

    async def create_peer(self, connection_id: str, name: str) -> MediaPeer:
        """Create the media session for a newly joined participant."""

    async def close(self) -> None:
        """Release the room and every peer still attached to it."""
