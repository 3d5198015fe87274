"""How a started job is finalized.

Two hosts look the same from the start request alone: one that will send
``pipeline_done`` later and one that never will. The strategy is picked
once, from host presence, and decides whether the start request's own
return ends the job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from smoothkit.core.events import StartResult
from smoothkit.core.models import JobKind

DEFAULT_SYNC_KINDS = frozenset({JobKind.REENCODE_ONLY})


class CompletionStrategy(ABC):
    """Decides when a job is finished."""

    name = "abstract"
    uses_events = False

    @abstractmethod
    def finalizes_on_return(self, kind: JobKind, result: StartResult) -> bool:
        """Return True if the start request's return value ends the job."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EventDrivenCompletion(CompletionStrategy):
    """Wait for ``pipeline_done`` unless the call already said it finished.

    Args:
        sync_kinds: Job kinds whose backend does its work inside the call and
            is not guaranteed to emit a completion event.
    """

    name = "event"
    uses_events = True

    def __init__(self, sync_kinds: Optional[Iterable[JobKind]] = None) -> None:
        self.sync_kinds = frozenset(DEFAULT_SYNC_KINDS if sync_kinds is None else sync_kinds)

    def finalizes_on_return(self, kind: JobKind, result: StartResult) -> bool:
        return result.completion is not None or kind in self.sync_kinds

    def __repr__(self) -> str:
        kinds = ", ".join(sorted(kind.value for kind in self.sync_kinds))
        return f"EventDrivenCompletion(sync_kinds=[{kinds}])"


class CallReturnCompletion(CompletionStrategy):
    """No event stream: a successful return is completion."""

    name = "call-return"

    def finalizes_on_return(self, kind: JobKind, result: StartResult) -> bool:
        return True


def select_completion_strategy(
    host_present: bool, sync_kinds: Optional[Iterable[JobKind]] = None
) -> CompletionStrategy:
    """Pick the strategy for a session."""
    if host_present:
        return EventDrivenCompletion(sync_kinds)
    return CallReturnCompletion()
