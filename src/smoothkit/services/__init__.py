"""Controllers sitting between the window and the host bridge."""

from smoothkit.services.directory_store import DirectoryPreferenceStore, StoreResult
from smoothkit.services.environment_probe import EnvironmentProbe
from smoothkit.services.job_orchestrator import JobOrchestrator
from smoothkit.services.tool_registry import ToolRegistry

__all__ = [
    "DirectoryPreferenceStore",
    "EnvironmentProbe",
    "JobOrchestrator",
    "StoreResult",
    "ToolRegistry",
]
