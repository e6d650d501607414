import asyncio


def _as_addr(info: object) -> tuple[str, int] | None:
    if isinstance(info, (tuple, list)) and len(info) >= 2:
        return str(info[0]), int(info[1])
    return None


def get_remote_addr(transport: asyncio.BaseTransport) -> tuple[str, int] | None:
    """Best-effort (host, port) of the client behind `transport`."""
    sock = transport.get_extra_info("socket")
    if sock is not None:
        try:
            return _as_addr(sock.getpeername())
        except OSError:
            return None

    return _as_addr(transport.get_extra_info("peername"))


def get_local_addr(transport: asyncio.BaseTransport) -> tuple[str, int] | None:
    """Best-effort (host, port) the server accepted `transport` on."""
    sock = transport.get_extra_info("socket")
    if sock is not None:
        try:
            return _as_addr(sock.getsockname())
        except OSError:
            return None

    return _as_addr(transport.get_extra_info("sockname"))
