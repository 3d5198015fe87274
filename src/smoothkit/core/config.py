"""Application configuration using the Builder pattern."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from typing import Mapping, Optional

from smoothkit import constants
from smoothkit.core.completion import DEFAULT_SYNC_KINDS
from smoothkit.core.models import JobKind
from smoothkit.exceptions import ConfigurationError


@dataclass
class AppConfig:
    """Configuration for one application session."""

    host_command: Optional[list[str]] = None  # None => preview host
    force_preview: bool = False
    settings_path: Optional[str] = None  # INI file; None => native QSettings
    settings_organization: str = constants.SETTINGS_ORGANIZATION
    settings_application: str = constants.SETTINGS_APPLICATION
    default_max_threads: int = 0  # 0 = backend chooses
    sync_job_kinds: frozenset = field(default_factory=lambda: DEFAULT_SYNC_KINDS)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.host_command is not None:
            if not self.host_command or not all(
                isinstance(part, str) and part for part in self.host_command
            ):
                raise ConfigurationError("Host command must be a non-empty list of arguments")
        if self.default_max_threads < 0:
            raise ConfigurationError("Max threads cannot be negative")
        if not self.settings_organization or not self.settings_application:
            raise ConfigurationError("Settings organization and application are required")
        self.sync_job_kinds = frozenset(self.sync_job_kinds)
        for kind in self.sync_job_kinds:
            if not isinstance(kind, JobKind):
                raise ConfigurationError(f"Invalid job kind: {kind!r}")

    @property
    def uses_live_host(self) -> bool:
        return self.host_command is not None and not self.force_preview

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build a configuration from SMOOTHKIT_* environment variables."""
        env = os.environ if environ is None else environ
        builder = AppConfigBuilder()
        host = env.get(constants.ENV_HOST, "").strip()
        if host:
            builder.with_host_command(shlex.split(host))
        if env.get(constants.ENV_PREVIEW, "").strip().lower() in constants.TRUTHY_VALUES:
            builder.with_preview(True)
        settings_path = env.get(constants.ENV_SETTINGS_PATH, "").strip()
        if settings_path:
            builder.with_settings_path(settings_path)
        return builder.build()


class AppConfigBuilder:
    """Builder for AppConfig."""

    def __init__(self) -> None:
        """Initialize the builder."""
        self._host_command: Optional[list[str]] = None
        self._force_preview: bool = False
        self._settings_path: Optional[str] = None
        self._settings_organization: str = constants.SETTINGS_ORGANIZATION
        self._settings_application: str = constants.SETTINGS_APPLICATION
        self._default_max_threads: int = 0
        self._sync_job_kinds: frozenset = DEFAULT_SYNC_KINDS

    def with_host_command(self, command) -> "AppConfigBuilder":
        """Set the command that launches the host process."""
        if isinstance(command, str):
            command = shlex.split(command)
        self._host_command = list(command)
        return self

    def with_preview(self, enabled: bool = True) -> "AppConfigBuilder":
        """Force preview mode even when a host command is set."""
        self._force_preview = enabled
        return self

    def with_settings_path(self, path: str) -> "AppConfigBuilder":
        """Store preferences in an INI file instead of native settings."""
        self._settings_path = str(path)
        return self

    def with_settings_scope(self, organization: str, application: str) -> "AppConfigBuilder":
        """Set the native QSettings organization and application names."""
        self._settings_organization = organization
        self._settings_application = application
        return self

    def with_max_threads(self, max_threads: int) -> "AppConfigBuilder":
        """Set the default max threads (0 = auto)."""
        self._default_max_threads = max_threads
        return self

    def with_sync_job_kinds(self, kinds) -> "AppConfigBuilder":
        """Set job kinds finalized by their start call even when events are available."""
        self._sync_job_kinds = frozenset(kinds)
        return self

    def build(self) -> AppConfig:
        """Build the AppConfig object."""
        return AppConfig(
            host_command=self._host_command,
            force_preview=self._force_preview,
            settings_path=self._settings_path,
            settings_organization=self._settings_organization,
            settings_application=self._settings_application,
            default_max_threads=self._default_max_threads,
            sync_job_kinds=self._sync_job_kinds,
        )
