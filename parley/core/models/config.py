import ssl
from dataclasses import dataclass

from parley.core.transport.application import Application


@dataclass
class ServerConfig:
    """
    Static configuration for a Parley MessageServer.

    This structure defines all parameters required to start a server:
    networking, TLS, resource limits, and graceful shutdown behavior.
    """
    app: Application
    """
    The per-session application coroutine with the signature:
        async def app(receive, send)
    """

    host: str
    """
    IP address or hostname on which the server listens.
    """

    port: int
    """
    TCP port to bind. If set to 0, the OS selects an available port.
    """

    backlog: int = 128
    """
    Maximum number of pending TCP connections waiting for accept().
    """

    ssl_ctx: ssl.SSLContext | None = None
    """
    TLS context for incoming client connections, or None for plain TCP
    (e.g. behind a TLS-terminating proxy).
    """

    limit_concurrency: int = 1024
    """
    Maximum number of simultaneously connected clients. Extra clients are
    disconnected as soon as they are accepted.
    """

    max_buffer_size: int = 4 * 1024 * 1024  # 4MB
    """
    Maximum size of the per-connection receive buffer.
    """

    max_message_size: int = 1 * 1024 * 1024  # 1MB
    """
    Maximum size of a single frame payload.
    """

    timeout_graceful_shutdown: float = 5.0
    """
    Maximum time (in seconds) allowed for client sessions to finish once
    shutdown starts. Remaining tasks are cancelled afterwards.
    """
