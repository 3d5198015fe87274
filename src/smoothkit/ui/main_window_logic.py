"""Logic and event handling mixin for the SmoothKit main window."""

from __future__ import annotations

import json
import logging

from smoothkit.core.models import JobKind, JobPhase, JobRequest, JobState, ToolKind, ToolStatus
from smoothkit.exceptions import PreconditionError
from smoothkit.logging_utils import setup_logging
from smoothkit.ui import path_dialogs
from smoothkit.ui.main_window_widgets import UiLogForwarder
from smoothkit.ui.qt_compat import QApplication

logger = logging.getLogger("smoothkit.ui.main_window")


class MainWindowLogicMixin:
    """Signal handlers, start gating, and service wiring."""

    def _setup_logging(self) -> None:
        """Route smoothkit logs into the UI log widget."""
        if self._log_forwarder is not None:
            return
        forwarder = UiLogForwarder(self)
        forwarder.message.connect(self._on_log_message)
        setup_logging(ui_sink=forwarder.message.emit, enable_console=False)
        self._log_forwarder = forwarder

    def _setup_connections(self) -> None:
        """Set up signal connections."""
        session = self.session

        self.refresh_btn.clicked.connect(self._refresh)
        self.check_env_btn.clicked.connect(session.environment.check)
        self.validate_btn.clicked.connect(self._validate_tools)

        for kind in ToolKind:
            self.tool_path_edits[kind].textChanged.connect(
                lambda text, kind=kind: self._on_tool_path_changed(kind, text)
            )
            self.tool_browse_btns[kind].clicked.connect(
                lambda _checked=False, kind=kind: self._browse_tool(kind)
            )
            self.tool_install_btns[kind].clicked.connect(
                lambda _checked=False, kind=kind: self._install_tool(kind)
            )

        self.browse_input_btn.clicked.connect(self._browse_input_path)
        self.browse_output_btn.clicked.connect(self._browse_output_path)
        self.browse_frames_btn.clicked.connect(self._browse_frames_dir)
        self.input_path_edit.textChanged.connect(self._update_start_gate)
        self.output_path_edit.textChanged.connect(self._update_start_gate)
        self.frames_dir_edit.textChanged.connect(self._update_start_gate)
        self.frames_dir_edit.editingFinished.connect(self._on_frames_dir_edited)
        self.reencode_check.toggled.connect(self._on_reencode_toggled)
        self.start_btn.clicked.connect(self._start_job)
        self.start_btn.setShortcut("Ctrl+Return")

        session.environment.result_changed.connect(self.env_label.setText)
        session.tools.status_changed.connect(self._on_tool_status_changed)
        session.tools.paths_changed.connect(self._on_paths_changed)
        session.tools.validation_ready.connect(self._on_validation_ready)
        session.tools.validating_changed.connect(self._on_validating_changed)
        session.tools.installed.connect(self._on_tool_installed)
        session.tools.error.connect(self.env_error_label.setText)
        session.jobs.state_changed.connect(self._on_job_state_changed)
        session.jobs.frames_dir_changed.connect(self._on_frames_dir_changed)
        session.jobs.diagnostic.connect(self._on_diagnostic)

        self.max_threads_spin.setValue(session.config.default_max_threads)
        self.frames_dir_edit.setText(session.jobs.frames_out_dir)
        self._on_reencode_toggled(self.reencode_check.isChecked())

    # ----------------------------------------------------------------- tools

    def _refresh(self) -> None:
        self.env_error_label.clear()
        self.session.tools.refresh_status()
        self.session.environment.check()

    def _validate_tools(self) -> None:
        self.env_error_label.clear()
        self.session.tools.validate()

    def _on_validating_changed(self, validating: bool) -> None:
        self.validate_btn.setEnabled(not validating)
        self.validate_btn.setText("Validating..." if validating else "Validate Tools")

    def _on_validation_ready(self, report) -> None:
        self.validation_text.setPlainText(json.dumps(report.to_dict(), indent=2))

    def _on_tool_status_changed(self, kind: ToolKind, status: ToolStatus) -> None:
        label = self.tool_status_labels[kind]
        label.setText(status.value)
        label.setProperty("status", status.value)

    def _on_paths_changed(self, paths: list) -> None:
        self.paths_label.setText("\n".join(paths))

    def _on_tool_path_changed(self, kind: ToolKind, text: str) -> None:
        self.session.tools.set_candidate_path(kind, text)
        self.tool_install_btns[kind].setEnabled(bool(text.strip()))

    def _browse_tool(self, kind: ToolKind) -> None:
        path = path_dialogs.pick_tool_source(self, self.tool_path_edits[kind].text())
        if path:
            self.tool_path_edits[kind].setText(path)

    def _install_tool(self, kind: ToolKind) -> None:
        self.env_error_label.clear()
        if not self.session.tools.install(kind, self.tool_path_edits[kind].text()):
            self.tool_install_btns[kind].setEnabled(False)

    def _on_tool_installed(self, kind: ToolKind, text: str) -> None:
        self.statusBar().showMessage(f"{kind.label} installed", 5000)

    # -------------------------------------------------------------- pipeline

    def _browse_input_path(self) -> None:
        path = path_dialogs.pick_input_video(self, self.input_path_edit.text())
        if path:
            self.input_path_edit.setText(path)

    def _browse_output_path(self) -> None:
        path = path_dialogs.pick_output_video(self, self.output_path_edit.text())
        if path:
            self.output_path_edit.setText(path)

    def _browse_frames_dir(self) -> None:
        path = path_dialogs.pick_directory(
            self, "Select frames_out Folder", self.frames_dir_edit.text()
        )
        if path:
            self.frames_dir_edit.setText(path)
            self.session.jobs.set_frames_out_dir(path)

    def _on_frames_dir_edited(self) -> None:
        self.session.jobs.set_frames_out_dir(self.frames_dir_edit.text())

    def _on_frames_dir_changed(self, path: str) -> None:
        if self.frames_dir_edit.text() != path:
            self.frames_dir_edit.setText(path)

    def _on_reencode_toggled(self, checked: bool) -> None:
        if checked:
            adopted = self.session.jobs.adopt_session_frames_dir()
            if adopted and not self.frames_dir_edit.text().strip():
                self.frames_dir_edit.setText(adopted)
        self.frames_dir_edit.setEnabled(checked)
        self.browse_frames_btn.setEnabled(checked)
        self.start_btn.setText("Re-encode" if checked else "Smooth")
        self._update_start_gate()

    def _current_request(self) -> JobRequest:
        kind = JobKind.REENCODE_ONLY if self.reencode_check.isChecked() else JobKind.FULL
        return JobRequest(
            kind=kind,
            input_video_path=self.input_path_edit.text(),
            output_video_path=self.output_path_edit.text(),
            max_threads=self.max_threads_spin.value(),
            frames_dir=self.frames_dir_edit.text() if kind is JobKind.REENCODE_ONLY else "",
        )

    def _update_start_gate(self, *args) -> None:
        request = self._current_request()
        enabled = self.session.jobs.can_start(request)
        self.start_btn.setEnabled(enabled)
        if self.session.jobs.is_busy:
            self.start_btn.setToolTip("A job is running.")
            return
        try:
            self.session.jobs.validate_request(request)
        except PreconditionError as exc:
            self.start_btn.setToolTip(str(exc))
        else:
            self.start_btn.setToolTip("Start the job.")

    def _start_job(self) -> None:
        self.job_log_text.clear()
        self._shown_log_lines = 0
        self.session.jobs.start(self._current_request())

    def _on_job_state_changed(self, state: JobState) -> None:
        self.status_label.setText(state.status_text)
        self.job_error_label.setText(state.error)
        if state.progress is not None:
            self.progress_bar.setValue(int(round(state.progress)))
        elif state.phase is JobPhase.STARTING:
            self.progress_bar.setValue(0)
        elif state.phase is JobPhase.DONE:
            self.progress_bar.setValue(100)

        if len(state.log_lines) < self._shown_log_lines:
            self.job_log_text.clear()
            self._shown_log_lines = 0
        for line in state.log_lines[self._shown_log_lines :]:
            self.job_log_text.appendPlainText(line)
        self._shown_log_lines = len(state.log_lines)

        frames_dir = state.frames_dir or self.session.jobs.frames_out_dir
        self.frames_info_label.setText(f"Frames folder: {frames_dir}" if frames_dir else "")

        busy = state.is_busy
        self.reencode_check.setEnabled(not busy)
        self.refresh_btn.setEnabled(not busy)
        self._update_start_gate()
        if state.is_terminal:
            self.statusBar().showMessage(state.status_text, 5000)
            if state.phase is JobPhase.DONE:
                self._ping_user()

    def _on_diagnostic(self, message: str) -> None:
        self.statusBar().showMessage(message, 10000)

    def _ping_user(self) -> None:
        """Notify the user that the job finished."""
        if not self.isActiveWindow():
            QApplication.alert(self, 3000)

    def _on_log_message(self, message: str) -> None:
        """Append a forwarded log record."""
        self.log_text.appendPlainText(message)
