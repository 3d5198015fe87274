"""Tests for the SmoothKit main window wiring.

Runs under the offscreen Qt platform; no display server needed.
"""

import pytest

from smoothkit import constants
from smoothkit.app import build_session
from smoothkit.core.config import AppConfigBuilder
from smoothkit.core.models import JobPhase, ToolKind
from smoothkit.ui import path_dialogs

from conftest import FakeHostBridge, InlineWorker

VALIDATION_PAYLOAD = {
    "ffmpeg": {"ok": True, "path": "/tools/ffmpeg", "output": "ffmpeg version 6.1"},
    "rife": {"ok": False, "path": None, "output": "not found"},
}


@pytest.fixture
def host():
    return FakeHostBridge(
        {
            constants.CMD_GET_APP_PATHS: ["/data/bin"],
            constants.CMD_TOOL_STATUS: "installed",
            constants.CMD_CHECK_ENVIRONMENT: "OS: linux | ARCH: x86_64",
            constants.CMD_VALIDATE_TOOLS: VALIDATION_PAYLOAD,
            constants.CMD_SMOOTH_VIDEO: {"ok": True, "frames_dir": "/v/produced"},
            constants.CMD_REENCODE_ONLY: None,
        }
    )


@pytest.fixture
def make_window(qtbot, host, settings_path, monkeypatch):
    monkeypatch.delenv("SMOOTHKIT_PREVIEW", raising=False)

    def _make(bridge=None):
        from smoothkit.ui.main_window import SmoothKitWindow

        config = AppConfigBuilder().with_settings_path(settings_path).build()
        session = build_session(config, bridge=bridge or host, worker_factory=InlineWorker)
        window = SmoothKitWindow(session, forward_logs=False)
        qtbot.addWidget(window)
        return window

    return _make


def test_show_activates_and_refreshes(make_window, host) -> None:
    window = make_window()
    window.show()

    assert window.session.jobs.is_active
    assert window.env_label.text() == "OS: linux | ARCH: x86_64"
    assert window.tool_status_labels[ToolKind.FFMPEG].text() == "installed"
    assert window.paths_label.text() == "/data/bin"

    window.close()
    assert window.session.jobs.is_active is False
    assert host.handlers == {event: [] for event in constants.PIPELINE_EVENTS}


def test_install_button_requires_path(make_window, host) -> None:
    window = make_window()
    button = window.tool_install_btns[ToolKind.INTERPOLATOR]
    assert button.isEnabled() is False

    window.tool_path_edits[ToolKind.INTERPOLATOR].setText("/downloads/rife.zip")
    assert button.isEnabled() is True

    window.tool_path_edits[ToolKind.INTERPOLATOR].setText("  ")
    assert button.isEnabled() is False


def test_validate_shows_report(make_window) -> None:
    window = make_window()
    window.validate_btn.click()

    text = window.validation_text.toPlainText()
    assert '"ffmpeg"' in text
    assert '"rife"' in text
    assert window.validate_btn.isEnabled() is True


def test_start_gate(make_window) -> None:
    window = make_window()
    assert window.start_btn.isEnabled() is False

    window.input_path_edit.setText("/v/in.mp4")
    window.output_path_edit.setText("/v/out.mp4")
    assert window.start_btn.isEnabled() is True

    window.reencode_check.setChecked(True)
    assert window.start_btn.text() == "Re-encode"
    assert window.start_btn.isEnabled() is False
    assert window.start_btn.toolTip() == constants.MSG_PICK_FRAMES_DIR


def test_full_run_event_driven(make_window, host) -> None:
    window = make_window()
    window.show()
    window.input_path_edit.setText("/v/in.mp4")
    window.output_path_edit.setText("/v/out.mp4")

    window.start_btn.click()
    assert window.status_label.text() == "Starting…"
    assert window.start_btn.isEnabled() is False
    assert window.reencode_check.isEnabled() is False

    host.emit(constants.EVENT_PROGRESS, 55)
    host.emit(constants.EVENT_LOG, "interpolating 110/200")
    assert window.status_label.text() == "Running… 55%"
    assert window.progress_bar.value() == 55
    assert window.job_log_text.toPlainText() == "interpolating 110/200"

    host.emit(constants.EVENT_DONE, {"ok": True, "message": "Done.", "frames_dir": "/v/frames_out"})
    assert window.session.jobs.state.phase is JobPhase.DONE
    assert window.status_label.text() == "Done."
    assert window.frames_dir_edit.text() == "/v/frames_out"
    assert window.start_btn.isEnabled() is True


def test_reencode_toggle_adopts_session_frames(make_window, host) -> None:
    window = make_window()
    window.show()
    window.input_path_edit.setText("/v/in.mp4")
    window.output_path_edit.setText("/v/out.mp4")
    window.start_btn.click()
    host.emit(constants.EVENT_DONE, "ok")

    window.reencode_check.setChecked(True)

    assert window.frames_dir_edit.text() == "/v/produced"
    assert window.start_btn.isEnabled() is True

    window.start_btn.click()
    command, params = host.calls[-1]
    assert command == constants.CMD_REENCODE_ONLY
    assert params["frames_dir"] == "/v/produced"
    assert window.status_label.text() == "Done."


def test_failed_job_shows_error(make_window, host) -> None:
    from smoothkit.exceptions import BridgeError

    host.responses[constants.CMD_SMOOTH_VIDEO] = BridgeError("ffmpeg not installed")
    window = make_window()
    window.show()
    window.input_path_edit.setText("/v/in.mp4")
    window.output_path_edit.setText("/v/out.mp4")

    window.start_btn.click()

    assert window.status_label.text() == "Failed."
    assert window.job_error_label.text() == "ffmpeg not installed"
    assert window.start_btn.isEnabled() is True


def test_preview_mode_banner(make_window) -> None:
    window = make_window(FakeHostBridge(supports_events=False))
    assert "Preview mode" in window.statusBar().currentMessage()
    assert window.session.host_present is False


def test_browse_cancel_keeps_fields(make_window, monkeypatch) -> None:
    window = make_window()
    window.input_path_edit.setText("/v/in.mp4")
    monkeypatch.setattr(path_dialogs, "pick_input_video", lambda parent, current: None)
    window.browse_input_btn.click()
    assert window.input_path_edit.text() == "/v/in.mp4"


def test_browse_frames_dir_remembers(make_window, monkeypatch, settings_path) -> None:
    from smoothkit.services.directory_store import DirectoryPreferenceStore

    window = make_window()
    window.reencode_check.setChecked(True)
    monkeypatch.setattr(
        path_dialogs, "pick_directory", lambda parent, title, current: "/picked/frames_out"
    )
    window.browse_frames_btn.click()

    assert window.frames_dir_edit.text() == "/picked/frames_out"
    assert DirectoryPreferenceStore.from_path(settings_path).load().value == "/picked/frames_out"


def test_video_filter() -> None:
    assert path_dialogs.video_filter(("mp4", "mov")) == (
        "Video Files (*.mp4 *.mov);;All Files (*)"
    )


def test_reencode_failure_after_done(make_window, host, settings_path) -> None:
    from smoothkit.services.directory_store import DirectoryPreferenceStore

    DirectoryPreferenceStore.from_path(settings_path).save("/v/frames_out")
    window = make_window()
    window.show()
    window.input_path_edit.setText("/v/in.mp4")
    window.output_path_edit.setText("/v/out.mp4")
    window.reencode_check.setChecked(True)

    window.start_btn.click()
    assert window.status_label.text() == "Done."

    host.emit(constants.EVENT_LOG, "ffmpeg error: bad")
    host.emit(constants.EVENT_DONE, {"ok": False, "message": "ffmpeg exited with 1"})

    assert window.status_label.text() == "Failed."
    assert window.job_error_label.text() == "ffmpeg exited with 1"
    assert window.job_log_text.toPlainText() == "ffmpeg error: bad"
