"""Front-end controller for RIFE frame interpolation via a host bridge."""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["JobOrchestrator", "build_session"]


def __getattr__(name: str):
    if name == "JobOrchestrator":
        from smoothkit.services.job_orchestrator import JobOrchestrator

        return JobOrchestrator
    if name == "build_session":
        from smoothkit.app import build_session

        return build_session
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)
