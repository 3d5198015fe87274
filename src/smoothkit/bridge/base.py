"""Abstract host bridge."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional

EventHandler = Callable[[Any], None]
Unlisten = Callable[[], None]


class HostBridge(ABC):
    """Request/response calls plus named event channels.

    ``invoke`` blocks until the host answers and raises ``BridgeError``
    carrying the host's text on rejection; callers run it off the UI thread.
    Event handlers may be called from any thread.
    """

    #: Whether events sent through ``listen`` are ever delivered.
    supports_events = False

    @abstractmethod
    def invoke(self, command: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Issue a request and return the host's result."""

    @abstractmethod
    def listen(self, event: str, handler: EventHandler) -> Unlisten:
        """Subscribe to an event channel. Returns a callable that unsubscribes."""

    def close(self) -> None:
        """Release host resources."""
