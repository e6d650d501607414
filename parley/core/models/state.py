import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from parley.core.transport.protocol import Protocol


@dataclass
class ServerState:
    """
    Shared runtime state for a MessageServer.

    This object is mutated by:
    - Protocol: adds/removes live client connections and session tasks
    - MessageServer.shutdown(): waits for both to drain
    """
    connections: set["Protocol"] = field(default_factory=set)
    """
    Set of live Protocol instances, one per client.
    """

    tasks: set[asyncio.Task[None]] = field(default_factory=set)
    """
    Session tasks, removed through task.add_done_callback(tasks.discard).
    """
