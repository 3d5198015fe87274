"""Install and validation status of the external tools."""

from __future__ import annotations

import logging
from typing import Optional

from smoothkit import constants
from smoothkit.core.models import Tool, ToolKind, ToolStatus, ValidationReport
from smoothkit.exceptions import MalformedPayloadError
from smoothkit.services.base import BridgeService
from smoothkit.ui.qt_compat import Signal

logger = logging.getLogger(__name__)


class ToolRegistry(BridgeService):
    """Single source of truth for whether FFmpeg and RIFE are usable.

    Status queries for the two tools are independent: one failing leaves
    that tool ``unknown`` and reports the error, the other still resolves.
    ``validate`` is one combined request, so both results arrive together.
    Re-entrant validation is not deduplicated; watch ``validating_changed``
    and disable the trigger while one is outstanding.
    """

    status_changed = Signal(object, object)  # ToolKind, ToolStatus
    paths_changed = Signal(list)
    validation_ready = Signal(object)  # ValidationReport
    validating_changed = Signal(bool)
    installed = Signal(object, str)  # ToolKind, host text
    error = Signal(str)
    refreshed = Signal()  # paths and every status of a refresh have answered

    def __init__(self, bridge, worker_factory=None, parent=None) -> None:
        super().__init__(bridge, worker_factory, parent)
        self._tools = {kind: Tool(kind) for kind in ToolKind}
        self._paths: list[str] = []
        self._report: Optional[ValidationReport] = None
        self._pending_validations = 0
        self._pending_refresh = 0

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    @property
    def report(self) -> Optional[ValidationReport]:
        return self._report

    @property
    def validating(self) -> bool:
        return self._pending_validations > 0

    def status(self, kind: ToolKind) -> ToolStatus:
        return self._tools[kind].status

    def tool(self, kind: ToolKind) -> Tool:
        tool = self._tools[kind]
        return Tool(tool.kind, tool.status, tool.candidate_path, tool.validation)

    def set_candidate_path(self, kind: ToolKind, path: str) -> None:
        self._tools[kind].candidate_path = path

    # ------------------------------------------------------------------ status

    def refresh_status(self) -> None:
        """Re-query managed paths and each tool's status.

        ``refreshed`` fires once all of those answers, or their errors, are in.
        """
        self._pending_refresh += 1 + len(ToolKind)
        self._call(constants.CMD_GET_APP_PATHS, None, self._on_paths, self._on_paths_failed)
        for kind in ToolKind:
            self._call(
                constants.CMD_TOOL_STATUS,
                {"tool": kind.value},
                self._on_status,
                self._on_status_failed,
                tag=kind,
            )

    def _on_paths(self, tag, result) -> None:
        if not isinstance(result, list) or not all(isinstance(p, str) for p in result):
            self._report_error(f"Unexpected app paths payload: {result!r}")
        else:
            self._paths = list(result)
            self.paths_changed.emit(self.paths)
        self._refresh_answered()

    def _on_paths_failed(self, tag, error: str) -> None:
        logger.warning("App paths query failed: %s", error)
        self._report_error(error)
        self._refresh_answered()

    def _on_status(self, kind: ToolKind, result) -> None:
        try:
            status = ToolStatus.parse(result)
        except MalformedPayloadError as exc:
            self._on_status_failed(kind, str(exc))
            return
        self._set_status(kind, status)
        self._refresh_answered()

    def _on_status_failed(self, kind: ToolKind, error: str) -> None:
        logger.warning("%s status query failed: %s", kind.label, error)
        self._set_status(kind, ToolStatus.UNKNOWN)
        self._report_error(error)
        self._refresh_answered()

    def _set_status(self, kind: ToolKind, status: ToolStatus) -> None:
        self._tools[kind].status = status
        self.status_changed.emit(kind, status)

    def _refresh_answered(self) -> None:
        self._pending_refresh = max(0, self._pending_refresh - 1)
        if self._pending_refresh == 0:
            self.refreshed.emit()

    # ----------------------------------------------------------------- install

    def install(self, kind: ToolKind, candidate_path: Optional[str] = None) -> bool:
        """Install a tool from a user-supplied file or folder.

        Returns:
            False if there was nothing to install (blank path), True if the
            request was issued.
        """
        if candidate_path is not None:
            self.set_candidate_path(kind, candidate_path)
        source = self._tools[kind].candidate_path.strip()
        if not source:
            return False
        logger.info("Installing %s from %s", kind.label, source)
        self._call(
            constants.CMD_INSTALL_TOOL,
            {"source_path": source, "tool": kind.value, "version": constants.TOOL_FORMAT_VERSION},
            self._on_installed,
            self._on_install_failed,
            tag=kind,
        )
        return True

    def _on_installed(self, kind: ToolKind, result) -> None:
        text = "" if result is None else str(result)
        logger.info("%s installed: %s", kind.label, text)
        self.installed.emit(kind, text)
        self.refresh_status()

    def _on_install_failed(self, kind: ToolKind, error: str) -> None:
        logger.error("%s install failed: %s", kind.label, error)
        self._report_error(error)

    # --------------------------------------------------------------- validate

    def validate(self) -> None:
        """Validate both tools in one round trip."""
        self._pending_validations += 1
        if self._pending_validations == 1:
            self.validating_changed.emit(True)
        self._call(
            constants.CMD_VALIDATE_TOOLS, None, self._on_validated, self._on_validate_failed
        )

    def _on_validated(self, tag, result) -> None:
        try:
            report = ValidationReport.from_payload(result)
        except MalformedPayloadError as exc:
            self._on_validate_failed(tag, str(exc))
            return
        self._report = report
        for kind in ToolKind:
            self._tools[kind].validation = report[kind]
        self._finish_validation()
        self.validation_ready.emit(report)

    def _on_validate_failed(self, tag, error: str) -> None:
        logger.error("Tool validation failed: %s", error)
        self._finish_validation()
        self._report_error(error)

    def _finish_validation(self) -> None:
        self._pending_validations = max(0, self._pending_validations - 1)
        if self._pending_validations == 0:
            self.validating_changed.emit(False)

    def _report_error(self, message: str) -> None:
        self.error.emit(message)
