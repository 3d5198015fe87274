"""Domain types shared by the services and the window."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from smoothkit import constants
from smoothkit.exceptions import MalformedPayloadError


class ToolKind(Enum):
    """External tools the pipeline needs. Values are the wire names."""

    FFMPEG = "ffmpeg"
    INTERPOLATOR = "rife"

    @property
    def label(self) -> str:
        return "FFmpeg" if self is ToolKind.FFMPEG else "RIFE"

    @classmethod
    def from_wire(cls, value: str) -> "ToolKind":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown tool: {value!r}") from None


class ToolStatus(Enum):
    INSTALLED = "installed"
    MISSING = "missing"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, payload: Any) -> "ToolStatus":
        """Parse a host ``tool_status`` result."""
        if not isinstance(payload, str):
            raise MalformedPayloadError(f"Tool status must be a string, got {payload!r}")
        try:
            return cls(payload.strip().lower())
        except ValueError:
            raise MalformedPayloadError(f"Unknown tool status: {payload!r}") from None


@dataclass(frozen=True)
class ToolValidationResult:
    """Outcome of running one tool during validation."""

    ok: bool
    resolved_path: Optional[str]
    captured_output: str

    @classmethod
    def from_payload(cls, payload: Any) -> "ToolValidationResult":
        if not isinstance(payload, dict):
            raise MalformedPayloadError(f"Tool validation must be an object, got {payload!r}")
        if not isinstance(payload.get("ok"), bool):
            raise MalformedPayloadError("Tool validation is missing boolean 'ok'")
        path = payload.get("path")
        if path is not None and not isinstance(path, str):
            raise MalformedPayloadError("Tool validation 'path' must be a string or null")
        output = payload.get("output", "")
        if not isinstance(output, str):
            raise MalformedPayloadError("Tool validation 'output' must be a string")
        return cls(ok=payload["ok"], resolved_path=path, captured_output=output)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "path": self.resolved_path, "output": self.captured_output}


@dataclass(frozen=True)
class ValidationReport:
    """Both tools' validation results from a single round trip."""

    ffmpeg: ToolValidationResult
    interpolator: ToolValidationResult

    def __getitem__(self, kind: ToolKind) -> ToolValidationResult:
        return self.ffmpeg if kind is ToolKind.FFMPEG else self.interpolator

    @property
    def all_ok(self) -> bool:
        return self.ffmpeg.ok and self.interpolator.ok

    @classmethod
    def from_payload(cls, payload: Any) -> "ValidationReport":
        if not isinstance(payload, dict):
            raise MalformedPayloadError(f"Validation report must be an object, got {payload!r}")
        results = {}
        for kind in ToolKind:
            if kind.value not in payload:
                raise MalformedPayloadError(f"Validation report is missing '{kind.value}'")
            results[kind] = ToolValidationResult.from_payload(payload[kind.value])
        return cls(ffmpeg=results[ToolKind.FFMPEG], interpolator=results[ToolKind.INTERPOLATOR])

    def to_dict(self) -> dict[str, Any]:
        return {kind.value: self[kind].to_dict() for kind in ToolKind}


@dataclass
class Tool:
    """Registry-owned record for one tool."""

    kind: ToolKind
    status: ToolStatus = ToolStatus.UNKNOWN
    candidate_path: str = ""
    validation: Optional[ToolValidationResult] = None


class JobKind(Enum):
    FULL = "full"
    REENCODE_ONLY = "reencode_only"

    @property
    def command(self) -> str:
        if self is JobKind.FULL:
            return constants.CMD_SMOOTH_VIDEO
        return constants.CMD_REENCODE_ONLY


@dataclass(frozen=True)
class JobRequest:
    """A user's intent to run a job.

    ``max_threads`` of 0 lets the backend pick. ``frames_dir`` is only read
    for reencode-only jobs; when blank the orchestrator falls back to the
    remembered and then the session frames directory.
    """

    kind: JobKind
    input_video_path: str
    output_video_path: str
    max_threads: int = 0
    frames_dir: str = ""

    def to_params(self, frames_dir: str = "") -> dict[str, Any]:
        params: dict[str, Any] = {
            "video_path": self.input_video_path.strip(),
            "output_path": self.output_video_path.strip(),
            "max_threads": max(0, int(self.max_threads)),
        }
        if self.kind is JobKind.REENCODE_ONLY:
            params["frames_dir"] = frames_dir
        return params


class JobPhase(Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


BUSY_PHASES = frozenset({JobPhase.STARTING, JobPhase.RUNNING})
TERMINAL_PHASES = frozenset({JobPhase.DONE, JobPhase.FAILED})


@dataclass(frozen=True)
class JobState:
    """Snapshot of the single job slot. Replaced, never mutated."""

    phase: JobPhase = JobPhase.IDLE
    kind: Optional[JobKind] = None
    progress: Optional[float] = None
    stage: str = ""
    log_lines: tuple[str, ...] = field(default_factory=tuple)
    message: str = ""
    error: str = ""
    frames_dir: str = ""

    @property
    def is_busy(self) -> bool:
        return self.phase in BUSY_PHASES

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def log_text(self) -> str:
        return "\n".join(self.log_lines)

    @property
    def status_text(self) -> str:
        if self.phase is JobPhase.STARTING:
            return constants.MSG_STARTING
        if self.phase is JobPhase.RUNNING:
            if self.progress is None:
                return self.stage or "Running…"
            text = f"Running… {round(self.progress)}%"
            return f"{self.stage} {text}" if self.stage else text
        if self.phase is JobPhase.DONE:
            return self.message or constants.MSG_DONE
        if self.phase is JobPhase.FAILED:
            return constants.MSG_FAILED
        return ""

    def with_log_line(self, line: str) -> "JobState":
        return replace(self, log_lines=self.log_lines + (line,))
