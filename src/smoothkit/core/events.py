"""Typed host event payloads.

Hosts send loosely shaped JSON. Everything is validated here, at the
boundary, so the orchestrator only ever sees one of the closed variants
below. Anything that does not fit raises ``MalformedPayloadError``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from smoothkit import constants
from smoothkit.exceptions import MalformedPayloadError


@dataclass(frozen=True)
class ProgressEvent:
    percent: float


@dataclass(frozen=True)
class LogEvent:
    line: str


@dataclass(frozen=True)
class StageEvent:
    label: str


@dataclass(frozen=True)
class CompletionEvent:
    ok: bool
    message: str
    frames_dir: Optional[str] = None
    frame_pattern: Optional[str] = None


PipelineEvent = Union[ProgressEvent, LogEvent, StageEvent, CompletionEvent]


@dataclass(frozen=True)
class StartResult:
    """What a job-start request returned.

    ``completion`` is set when the host finished the whole job inside the
    call and said so (a finalized result).
    """

    frames_dir: Optional[str] = None
    frame_pattern: Optional[str] = None
    output: Optional[str] = None
    completion: Optional[CompletionEvent] = None


def _optional_str(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedPayloadError(f"'{key}' must be a string, got {value!r}")
    return value.strip() or None


def parse_progress(payload: Any) -> ProgressEvent:
    if isinstance(payload, bool) or not isinstance(payload, (int, float)):
        raise MalformedPayloadError(f"Progress must be a number, got {payload!r}")
    percent = float(payload)
    if not math.isfinite(percent):
        raise MalformedPayloadError(f"Progress must be finite, got {payload!r}")
    return ProgressEvent(percent=min(100.0, max(0.0, percent)))


def parse_log(payload: Any) -> LogEvent:
    if not isinstance(payload, str):
        raise MalformedPayloadError(f"Log line must be a string, got {payload!r}")
    return LogEvent(line=payload.rstrip("\r\n"))


def parse_stage(payload: Any) -> StageEvent:
    if not isinstance(payload, str):
        raise MalformedPayloadError(f"Stage must be a string, got {payload!r}")
    return StageEvent(label=payload.strip())


def parse_completion(payload: Any) -> CompletionEvent:
    # Older hosts signal completion with a bare "ok" / "failed".
    if isinstance(payload, str):
        word = payload.strip().lower()
        if word == "ok":
            return CompletionEvent(ok=True, message=constants.MSG_DONE)
        if word == "failed":
            return CompletionEvent(ok=False, message="Failed")
        raise MalformedPayloadError(f"Unknown completion word: {payload!r}")
    if not isinstance(payload, dict):
        raise MalformedPayloadError(f"Completion must be an object, got {payload!r}")
    ok = payload.get("ok")
    if not isinstance(ok, bool):
        raise MalformedPayloadError("Completion is missing boolean 'ok'")
    message = payload.get("message")
    if message is not None and not isinstance(message, str):
        raise MalformedPayloadError("Completion 'message' must be a string")
    if not message:
        message = constants.MSG_DONE if ok else "Failed"
    return CompletionEvent(
        ok=ok,
        message=message,
        frames_dir=_optional_str(payload, "frames_dir"),
        frame_pattern=_optional_str(payload, "frame_pattern"),
    )


_PARSERS = {
    constants.EVENT_PROGRESS: parse_progress,
    constants.EVENT_LOG: parse_log,
    constants.EVENT_STAGE: parse_stage,
    constants.EVENT_DONE: parse_completion,
}


def parse_event(name: str, payload: Any) -> PipelineEvent:
    """Parse a payload received on one of the pipeline channels."""
    try:
        parser = _PARSERS[name]
    except KeyError:
        raise MalformedPayloadError(f"Unknown event channel: {name!r}") from None
    return parser(payload)


def parse_start_result(payload: Any) -> StartResult:
    """Parse a ``smooth_video`` / ``reencode_only`` return value.

    ``None`` and plain strings are opaque acknowledgements.
    """
    if payload is None or isinstance(payload, str):
        return StartResult()
    if not isinstance(payload, dict):
        raise MalformedPayloadError(f"Start result must be an object, got {payload!r}")
    completion = None
    if "ok" in payload and "message" in payload:
        completion = parse_completion(payload)
    elif "ok" in payload and payload["ok"] is False:
        raise MalformedPayloadError("Start result reported ok=false without a message")
    return StartResult(
        frames_dir=_optional_str(payload, "frames_dir"),
        frame_pattern=_optional_str(payload, "frame_pattern"),
        output=_optional_str(payload, "output"),
        completion=completion,
    )
