import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")


class Subscription(Generic[T]):
    """
    Multicast, unbuffered publish/subscribe stream.

    Values are chained through futures: every publish resolves the current
    future with the value and the next future in the chain. Each subscriber
    holds its own cursor into that chain, so all subscribers observe the same
    sequence at their own pace, and a slow subscriber never blocks publishers.

    A subscriber sees every value published after it called `aiter()` on the
    subscription. Values published while nobody is subscribed are lost.
    Closing the subscription terminates every pending iteration.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._next: asyncio.Future = loop.create_future()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, value: T) -> None:
        """Deliver a value to every current subscriber."""
        if self._closed:
            return

        future = self._loop.create_future()
        self._next.set_result((value, future))
        self._next = future

    def close(self) -> None:
        """End the stream. Subscribers finish their iteration normally."""
        if self._closed:
            return

        self._closed = True
        self._next.set_result(None)

    def __aiter__(self) -> "_Cursor[T]":
        return _Cursor(self._next)


class _Cursor(Generic[T]):
    def __init__(self, future: asyncio.Future) -> None:
        self._future = future

    def __aiter__(self) -> "_Cursor[T]":
        return self

    async def __anext__(self) -> T:
        # shielded: the future is shared with other subscribers
        item = await asyncio.shield(self._future)
        if item is None:
            raise StopAsyncIteration

        value, self._future = item
        return value
