import asyncio
import contextlib
import functools
import importlib
import logging
import pkgutil
import sys
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any, Generator

SHUTDOWN_SIGNALS = (
    signal.SIGINT,
    signal.SIGTERM,
)

if sys.platform == "win32":
    SHUTDOWN_SIGNALS += (signal.SIGBREAK,)


@contextlib.contextmanager
def setup_signal_handler() -> Generator[asyncio.Event, None, None]:
    stop_event = asyncio.Event()

    if threading.current_thread() is not threading.main_thread():
        yield stop_event
        return

    captured_signals: list[signal.Signals | int] = []

    def handle(sig: int, frame: FrameType | None) -> None:
        captured_signals.append(sig)
        stop_event.set()

    original_handlers = {
        sig: signal.signal(sig, handle)
        for sig in SHUTDOWN_SIGNALS
    }

    try:
        yield stop_event
    finally:
        for sig, old in original_handlers.items():
            signal.signal(sig, old)

        # replay with the real handler
        for sig in reversed(captured_signals):
            if original_handlers[sig] is not handle:
                signal.raise_signal(sig)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


def load_object(path: str) -> Any:
    """
    Resolve an import path of the form ``package.module:attribute``.

    Nested attributes are allowed after the colon (``module:Class.factory``).
    Raises ImportError when the module or attribute cannot be found.
    """
    module_name, sep, qualname = path.partition(":")
    if not sep or not module_name or not qualname:
        raise ImportError(
            f"Invalid import path '{path}', expected 'package.module:attribute'"
        )

    obj: Any = importlib.import_module(module_name)
    for attr in qualname.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ImportError(f"Module '{module_name}' has no attribute '{qualname}'")

    return obj


def scan(package: str):
    """
    Decorator that imports every module of `package` before calling the
    decorated function, so that handler modules get the chance to register
    their routes.
    """
    def decorator(func: Callable):

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            py_package = importlib.import_module(package)

            for module_info in pkgutil.iter_modules(py_package.__path__):
                module_name = f"{package}.{module_info.name}"
                importlib.import_module(module_name)

            return func(*args, **kwargs)

        return wrapper

    return decorator
