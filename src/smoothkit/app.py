"""Session wiring shared by the window and the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from smoothkit.bridge import HostBridge, JsonLineHostBridge, PreviewHostBridge, detect_host_presence
from smoothkit.core.completion import CompletionStrategy, select_completion_strategy
from smoothkit.core.config import AppConfig
from smoothkit.services import (
    DirectoryPreferenceStore,
    EnvironmentProbe,
    JobOrchestrator,
    ToolRegistry,
)

logger = logging.getLogger(__name__)


@dataclass
class AppSession:
    """Everything one window or CLI invocation talks to."""

    config: AppConfig
    bridge: HostBridge
    host_present: bool
    strategy: CompletionStrategy
    preferences: DirectoryPreferenceStore
    tools: ToolRegistry
    environment: EnvironmentProbe
    jobs: JobOrchestrator

    def close(self) -> None:
        """Unsubscribe, stop the host and wait for outstanding requests."""
        self.jobs.deactivate()
        try:
            self.bridge.close()
        except Exception as exc:
            logger.warning("Error closing host bridge: %s", exc)
        for service in (self.tools, self.environment, self.jobs):
            service.wait_for_workers()


def create_bridge(config: AppConfig) -> HostBridge:
    if config.uses_live_host:
        return JsonLineHostBridge(config.host_command)
    return PreviewHostBridge()


def build_session(
    config: Optional[AppConfig] = None,
    bridge: Optional[HostBridge] = None,
    worker_factory=None,
    parent=None,
) -> AppSession:
    """Create the bridge and services for one session.

    Host presence is detected here, once, and fixes the completion strategy
    for the whole session.

    Args:
        config: Session configuration. Defaults to ``AppConfig.from_env()``.
        bridge: Use this bridge instead of creating one from ``config``.
        worker_factory: Request worker factory passed to every service.
        parent: Parent QObject for the services.
    """
    if config is None:
        config = AppConfig.from_env()
    if bridge is None:
        bridge = create_bridge(config)

    host_present = detect_host_presence(bridge)
    if config.force_preview:
        host_present = False
    strategy = select_completion_strategy(host_present, config.sync_job_kinds)
    logger.info("Completion strategy: %r", strategy)

    if config.settings_path:
        preferences = DirectoryPreferenceStore.from_path(config.settings_path)
    else:
        preferences = DirectoryPreferenceStore.native(
            config.settings_organization, config.settings_application
        )

    return AppSession(
        config=config,
        bridge=bridge,
        host_present=host_present,
        strategy=strategy,
        preferences=preferences,
        tools=ToolRegistry(bridge, worker_factory, parent),
        environment=EnvironmentProbe(bridge, worker_factory, parent),
        jobs=JobOrchestrator(bridge, strategy, preferences, worker_factory, parent),
    )
