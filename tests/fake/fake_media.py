import asyncio

from parley.core.helpers.sub import Subscription


class FakeMediaPeer:
    """
    In-memory media peer. Requests and notifications are recorded in
    separate lists so tests can check which handler a message reached.
    """

    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.notifications = Subscription(asyncio.get_running_loop())
        self.requests: list[dict] = []
        self.received_notifications: list[dict] = []
        self.close_calls = 0
        self._closed = False
        self._response = response
        self._error = error

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        self.close_calls += 1
        self._closed = True
        self.notifications.close()

    async def receive_request(self, request: dict):
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return self._response

    async def receive_notification(self, notification: dict):
        self.received_notifications.append(notification)
        if self._error is not None:
            raise self._error

    def notify(self, message: dict) -> None:
        self.notifications.publish(message)


class FakeMediaRoom:
    def __init__(
        self,
        error: Exception | None = None,
        response=None,
        peer_error: Exception | None = None,
    ) -> None:
        self.peers: dict[str, FakeMediaPeer] = {}
        self.closed = False
        self._error = error
        self._response = response
        self._peer_error = peer_error

    async def create_peer(self, connection_id: str, name: str) -> FakeMediaPeer:
        if self._error is not None:
            raise self._error
        peer = FakeMediaPeer(response=self._response, error=self._peer_error)
        self.peers[connection_id] = peer
        return peer

    async def close(self) -> None:
        self.closed = True
        for peer in self.peers.values():
            await peer.close()


def create_room() -> FakeMediaRoom:
    return FakeMediaRoom(response={"ok": True})
