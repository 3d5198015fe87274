"""Job state machine: start a pipeline job and follow it to Done or Failed.

States run ``IDLE -> STARTING -> RUNNING* -> DONE | FAILED``; a terminal
state is left only by the next start. There is no cancel and no timeout.

A job ends in one of two ways, chosen by the injected completion strategy:
the host's ``pipeline_done`` event, or the start request's own return. Both
paths go through ``_finalize``, which only acts while the job is busy, so
a host that sends a return value and a later event finalizes once. The
exception is a job kind that finishes on return while the host keeps
working: its later log lines are still appended, and a failing
``pipeline_done`` for that run turns Done into Failed.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from smoothkit import constants
from smoothkit.core.completion import CallReturnCompletion, CompletionStrategy
from smoothkit.core.events import (
    CompletionEvent,
    LogEvent,
    ProgressEvent,
    StageEvent,
    parse_event,
    parse_start_result,
)
from smoothkit.core.models import JobKind, JobPhase, JobRequest, JobState
from smoothkit.exceptions import MalformedPayloadError, PreconditionError
from smoothkit.services.base import BridgeService
from smoothkit.services.directory_store import DirectoryPreferenceStore
from smoothkit.ui.qt_compat import Signal

logger = logging.getLogger(__name__)


class JobOrchestrator(BridgeService):
    """Owns the single job slot and everything the window shows about it.

    Args:
        bridge: Host bridge for requests and event channels.
        strategy: Completion strategy picked once from host presence.
        preferences: Store for the remembered frames_out directory. It is
            loaded here, once.
        worker_factory: Builds request workers; defaults to ``BridgeCallWorker``.
        parent: Parent QObject.
    """

    state_changed = Signal(object)  # JobState
    frames_dir_changed = Signal(str)  # remembered frames_out directory
    diagnostic = Signal(str)

    # Host events may arrive on any thread; re-emitting moves them onto ours.
    _event_received = Signal(str, object)

    def __init__(
        self,
        bridge,
        strategy: CompletionStrategy,
        preferences: DirectoryPreferenceStore,
        worker_factory=None,
        parent=None,
    ) -> None:
        super().__init__(bridge, worker_factory, parent)
        self._strategy = strategy
        self._preferences = preferences
        self._state = JobState()
        self._job_token = 0
        self._job_strategy: CompletionStrategy = strategy
        self._trailing_token: Optional[int] = None
        self._session_frames_dir = ""
        self._subscriptions: dict[str, Callable[[], None]] = {}
        self._subscription_failed = False
        self._event_received.connect(self._on_event)

        loaded = preferences.load()
        if not loaded.ok:
            logger.warning("Could not read remembered frames folder: %s", loaded.error)
        self._frames_out_dir = loaded.value

    # ------------------------------------------------------------- properties

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def strategy(self) -> CompletionStrategy:
        return self._strategy

    @property
    def is_busy(self) -> bool:
        return self._state.is_busy

    @property
    def is_active(self) -> bool:
        return bool(self._subscriptions)

    @property
    def awaiting_outcome(self) -> bool:
        """True while a job marked done on its start call may still report failure."""
        return self._trailing_token is not None and self._trailing_token == self._job_token

    @property
    def frames_out_dir(self) -> str:
        """Directory the user picked or the backend last reported."""
        return self._frames_out_dir

    @property
    def session_frames_dir(self) -> str:
        """Frames directory produced by the last full run in this session."""
        return self._session_frames_dir

    # ------------------------------------------------------------ activation

    def activate(self) -> None:
        """Subscribe to the pipeline event channels.

        A channel that cannot be subscribed is reported through
        ``diagnostic``; jobs then finish on their start call's return.
        """
        if self._subscriptions:
            return
        if not self._strategy.uses_events:
            logger.debug("Completion strategy %r ignores events; not subscribing", self._strategy)
            return
        self._subscription_failed = False
        for event in constants.PIPELINE_EVENTS:
            try:
                self._subscriptions[event] = self._bridge.listen(event, self._make_handler(event))
            except Exception as exc:
                self._subscription_failed = True
                message = f"{constants.MSG_NO_LIVE_PROGRESS}: could not subscribe to {event} ({exc})"
                logger.error(message)
                self.diagnostic.emit(message)
        logger.debug("Subscribed to %s", ", ".join(self._subscriptions))

    def deactivate(self) -> None:
        """Release every subscription; one failing does not stop the others."""
        subscriptions, self._subscriptions = self._subscriptions, {}
        for event, unlisten in reversed(list(subscriptions.items())):
            try:
                unlisten()
            except Exception as exc:
                logger.warning("Failed to unsubscribe from %s: %s", event, exc)

    def _make_handler(self, event: str) -> Callable[[Any], None]:
        def _handler(payload: Any) -> None:
            self._event_received.emit(event, payload)

        return _handler

    def _events_available(self) -> bool:
        return (
            self._strategy.uses_events
            and not self._subscription_failed
            and constants.EVENT_DONE in self._subscriptions
        )

    # ----------------------------------------------------- frames directories

    def set_frames_out_dir(self, path: str) -> None:
        """Remember a frames_out directory the user picked."""
        path = (path or "").strip()
        if not path:
            return
        self._remember_frames_dir(path)

    def adopt_session_frames_dir(self) -> str:
        """Fill the remembered directory from this session's run if unset."""
        directory = self.resolve_frames_dir()
        if directory and directory != self._frames_out_dir:
            self._remember_frames_dir(directory)
        return directory

    def resolve_frames_dir(self, explicit: str = "") -> str:
        """Frames directory for a reencode-only job, or '' if none is known."""
        for candidate in (explicit, self._frames_out_dir, self._session_frames_dir):
            candidate = (candidate or "").strip()
            if candidate:
                return candidate
        return ""

    def _remember_frames_dir(self, path: str) -> None:
        changed = path != self._frames_out_dir
        self._frames_out_dir = path
        result = self._preferences.save(path)
        if not result.ok:
            logger.warning("Could not persist frames folder %s: %s", path, result.error)
        if changed:
            self.frames_dir_changed.emit(path)

    # ------------------------------------------------------------ job start

    def validate_request(self, request: JobRequest) -> str:
        """Check start preconditions.

        Returns:
            The frames directory to use ('' for full runs).

        Raises:
            PreconditionError: If the job must not be started.
        """
        if not request.input_video_path.strip():
            raise PreconditionError(constants.MSG_PICK_INPUT)
        if not request.output_video_path.strip():
            raise PreconditionError(constants.MSG_PICK_OUTPUT)
        if request.kind is JobKind.REENCODE_ONLY:
            frames_dir = self.resolve_frames_dir(request.frames_dir)
            if not frames_dir:
                raise PreconditionError(constants.MSG_PICK_FRAMES_DIR)
            return frames_dir
        return ""

    def can_start(self, request: JobRequest) -> bool:
        if self.is_busy:
            return False
        try:
            self.validate_request(request)
        except PreconditionError:
            return False
        return True

    def start(self, request: JobRequest) -> bool:
        """Start a job.

        Returns:
            True if the start request was issued.
        """
        if self.is_busy:
            logger.warning("Start ignored: %s", constants.MSG_JOB_BUSY)
            self.diagnostic.emit(constants.MSG_JOB_BUSY)
            return False

        try:
            frames_dir = self.validate_request(request)
        except PreconditionError as exc:
            logger.warning("Cannot start %s job: %s", request.kind.value, exc)
            self._set_state(JobState(phase=JobPhase.FAILED, kind=request.kind, error=str(exc)))
            return False

        self._job_token += 1
        self._trailing_token = None
        self._job_strategy = (
            self._strategy if self._events_available() else CallReturnCompletion()
        )
        self._set_state(JobState(phase=JobPhase.STARTING, kind=request.kind, frames_dir=frames_dir))
        if request.kind is JobKind.REENCODE_ONLY:
            self._remember_frames_dir(frames_dir)

        logger.info("=" * 50)
        logger.info("Starting %s job (%s)", request.kind.value, self._job_strategy.name)
        logger.info("Input: %s", request.input_video_path)
        logger.info("Output: %s", request.output_video_path)
        self._call(
            request.kind.command,
            request.to_params(frames_dir),
            self._on_start_returned,
            self._on_start_rejected,
            tag=(self._job_token, request.kind),
        )
        return True

    def _on_start_returned(self, tag, payload) -> None:
        token, kind = tag
        if token != self._job_token:
            logger.debug("Ignoring return of superseded job %d", token)
            return
        try:
            result = parse_start_result(payload)
        except MalformedPayloadError as exc:
            logger.error("Malformed start result: %s", exc)
            if self._state.is_busy:
                self._set_state(
                    replace(self._state, phase=JobPhase.FAILED, error=str(exc), message="")
                )
            return

        if kind is JobKind.FULL and result.frames_dir:
            self._record_produced_frames_dir(result.frames_dir, overwrite=False)

        if not self._state.is_busy:
            # The completion event beat the return.
            return
        if not self._job_strategy.finalizes_on_return(kind, result):
            logger.debug("Start accepted; waiting for %s", constants.EVENT_DONE)
            return
        if result.completion is None and self._job_strategy.uses_events:
            # The host keeps working after returning and may still send pipeline_done.
            self._trailing_token = token
        completion = result.completion or CompletionEvent(ok=True, message=constants.MSG_DONE)
        self._finalize(completion)

    def _on_start_rejected(self, tag, error: str) -> None:
        token, kind = tag
        if token != self._job_token or not self._state.is_busy:
            return
        logger.error("%s job failed to start: %s", kind.value, error)
        self._set_state(replace(self._state, phase=JobPhase.FAILED, error=error, message=""))

    # ---------------------------------------------------------------- events

    def _on_event(self, name: str, payload: Any) -> None:
        try:
            event = parse_event(name, payload)
        except MalformedPayloadError as exc:
            logger.error("Malformed %s payload: %s", name, exc)
            self.diagnostic.emit(f"Malformed {name} payload: {exc}")
            return

        if not self._state.is_busy:
            if self.awaiting_outcome and isinstance(event, (LogEvent, CompletionEvent)):
                self._on_trailing_event(event)
            else:
                logger.debug("Ignoring %s while %s", name, self._state.phase.value)
            return

        if isinstance(event, ProgressEvent):
            self._set_state(replace(self._state, phase=JobPhase.RUNNING, progress=event.percent))
        elif isinstance(event, LogEvent):
            self._set_state(self._state.with_log_line(event.line))
        elif isinstance(event, StageEvent):
            self._set_state(replace(self._state, phase=JobPhase.RUNNING, stage=event.label))
        elif isinstance(event, CompletionEvent):
            self._finalize(event)

    def _on_trailing_event(self, event) -> None:
        """Follow a job that was marked done when its start call returned."""
        if isinstance(event, LogEvent):
            self._set_state(self._state.with_log_line(event.line))
            return
        self._trailing_token = None
        if event.frames_dir:
            self._record_produced_frames_dir(event.frames_dir, overwrite=True)
        if event.ok:
            logger.info("Job confirmed: %s", event.message)
            self._set_state(replace(self._state, message=event.message or self._state.message))
        else:
            logger.error("Job failed after its start call returned: %s", event.message)
            self._set_state(
                replace(self._state, phase=JobPhase.FAILED, message="", error=event.message)
            )

    def _finalize(self, completion: CompletionEvent) -> None:
        if not self._state.is_busy:
            return
        if completion.frames_dir:
            self._record_produced_frames_dir(completion.frames_dir, overwrite=True)
        if completion.ok:
            logger.info("Job finished: %s", completion.message)
            self._set_state(
                replace(self._state, phase=JobPhase.DONE, message=completion.message, error="")
            )
        else:
            logger.error("Job failed: %s", completion.message)
            self._set_state(
                replace(self._state, phase=JobPhase.FAILED, message="", error=completion.message)
            )

    def _record_produced_frames_dir(self, path: str, overwrite: bool) -> None:
        self._session_frames_dir = path
        if self._state.is_busy or self._state.is_terminal:
            self._set_state(replace(self._state, frames_dir=path))
        if overwrite or not self._frames_out_dir:
            self._remember_frames_dir(path)

    def _set_state(self, state: JobState) -> None:
        previous: Optional[JobState] = self._state
        self._state = state
        if previous.phase is not state.phase:
            logger.debug("Job %s -> %s", previous.phase.value, state.phase.value)
        self.state_changed.emit(state)
