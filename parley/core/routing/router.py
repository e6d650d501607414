import functools
import logging
from typing import Any, Awaitable, Callable, Mapping

from parley.core.models.message import Message
from parley.core.models.session import Session


RouteHandler = Callable[[Session, Mapping[str, Any]], Awaitable[Message | None]]
CloseHandler = Callable[[Session], Awaitable[None]]


class Router:
    """
    Maps client message types to asynchronous handlers.

    Each handler receives the session the message arrived on and a mapping
    of the message data, and returns the reply to send, or None when the
    message calls for no reply. Close handlers run once per session, after
    the client is gone.

    Handlers are registered exactly once per message type. Attempting to
    register a second handler for the same type raises a RuntimeError.
    """

    def __init__(self) -> None:
        self._routes: dict[str, RouteHandler] = {}
        self._close_handlers: list[CloseHandler] = []
        self._logger = logging.getLogger("core.routing.router")

    def request(self, method: str) -> Callable[[RouteHandler], RouteHandler]:
        def decorator(func: RouteHandler) -> RouteHandler:
            if method in self._routes:
                raise RuntimeError(f"Handler already registered for '{method}'")

            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                return await func(*args, **kwargs)

            self._routes[method] = wrapper
            self._logger.debug(f"Registered handler for '{method}'")
            return wrapper

        return decorator

    def closed(self, func: CloseHandler) -> CloseHandler:
        self._close_handlers.append(func)
        return func

    def resolve(self, method: str) -> RouteHandler | None:
        return self._routes.get(method)

    def routes(self) -> dict[str, RouteHandler]:
        return dict(self._routes)

    def close_handlers(self) -> list[CloseHandler]:
        return list(self._close_handlers)
