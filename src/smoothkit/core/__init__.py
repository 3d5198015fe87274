"""Core modules for job models, host payloads, completion strategies and configuration."""

from smoothkit.core.completion import (
    CallReturnCompletion,
    CompletionStrategy,
    EventDrivenCompletion,
    select_completion_strategy,
)
from smoothkit.core.config import AppConfig, AppConfigBuilder
from smoothkit.core.models import JobKind, JobPhase, JobRequest, JobState, ToolKind, ToolStatus

__all__ = [
    "AppConfig",
    "AppConfigBuilder",
    "CallReturnCompletion",
    "CompletionStrategy",
    "EventDrivenCompletion",
    "JobKind",
    "JobPhase",
    "JobRequest",
    "JobState",
    "ToolKind",
    "ToolStatus",
    "select_completion_strategy",
]
