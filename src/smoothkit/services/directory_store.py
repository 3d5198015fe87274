"""Persistence for the last frames_out directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from smoothkit import constants
from smoothkit.ui.qt_compat import SETTINGS_INI_FORMAT, SETTINGS_NO_ERROR, QSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a best-effort read or write."""

    ok: bool
    value: str = ""
    error: str = ""


class DirectoryPreferenceStore:
    """Remembers one directory across runs.

    The preference is a convenience: ``load`` and ``save`` never raise.
    Failures come back in the ``StoreResult`` for the caller to log.

    Args:
        settings: QSettings to read and write. Defaults to the native store
            for the SmoothKit organization.
        key: Settings key holding the directory.
    """

    def __init__(
        self, settings: Optional[QSettings] = None, key: str = constants.LAST_FRAMES_OUT_DIR_KEY
    ) -> None:
        self._settings = settings
        self._key = key
        self._value = ""

    @classmethod
    def from_path(cls, path: str) -> "DirectoryPreferenceStore":
        """Store backed by an INI file."""
        return cls(QSettings(str(path), SETTINGS_INI_FORMAT))

    @classmethod
    def native(
        cls,
        organization: str = constants.SETTINGS_ORGANIZATION,
        application: str = constants.SETTINGS_APPLICATION,
    ) -> "DirectoryPreferenceStore":
        return cls(QSettings(organization, application))

    @property
    def value(self) -> str:
        """Last loaded or saved directory."""
        return self._value

    def _ensure_settings(self) -> QSettings:
        if self._settings is None:
            self._settings = QSettings(
                constants.SETTINGS_ORGANIZATION, constants.SETTINGS_APPLICATION
            )
        return self._settings

    def load(self) -> StoreResult:
        try:
            raw = self._ensure_settings().value(self._key, "")
        except Exception as exc:
            self._value = ""
            return StoreResult(ok=False, error=str(exc))
        if raw is None:
            raw = ""
        if not isinstance(raw, str):
            self._value = ""
            return StoreResult(ok=False, error=f"Stored value for {self._key} is not a string")
        self._value = raw.strip()
        return StoreResult(ok=True, value=self._value)

    def save(self, path: str) -> StoreResult:
        path = (path or "").strip()
        if not path:
            return StoreResult(ok=False, error="Refusing to store an empty directory")
        self._value = path
        try:
            settings = self._ensure_settings()
            settings.setValue(self._key, path)
            settings.sync()
            status = settings.status()
        except Exception as exc:
            return StoreResult(ok=False, value=path, error=str(exc))
        if status != SETTINGS_NO_ERROR:
            return StoreResult(ok=False, value=path, error=f"Settings write failed ({status})")
        logger.debug("Remembered %s = %s", self._key, path)
        return StoreResult(ok=True, value=path)
