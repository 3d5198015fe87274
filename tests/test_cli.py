"""Tests for the command-line interface."""

import logging
import sys
import textwrap

import pytest
from click.testing import CliRunner

from smoothkit.cli.main import main
from test_json_line_bridge import HOST_SCRIPT

TOOLS_HOST_SCRIPT = textwrap.dedent(
    """
    import json
    import sys
    import threading
    import time

    lock = threading.Lock()

    def send(message):
        with lock:
            print(json.dumps(message), flush=True)

    def answer_paths_later(request_id):
        time.sleep(0.5)
        send({"id": request_id, "ok": True, "result": ["/apps/bin"]})

    for line in sys.stdin:
        request = json.loads(line)
        command = request["command"]
        if command == "get_app_paths":
            threading.Thread(target=answer_paths_later, args=(request["id"],)).start()
        elif command == "tool_status":
            send({"id": request["id"], "ok": True, "result": "installed"})
        elif command == "reencode_only":
            send({"id": request["id"], "ok": True, "result": None})
            time.sleep(0.2)
            send({"event": "pipeline_log", "payload": "ffmpeg error: bad"})
            send({"event": "pipeline_done", "payload": {"ok": False, "message": "ffmpeg exited with 1"}})
        else:
            send({"id": request["id"], "ok": False, "error": "unknown command " + command})
    """
)


@pytest.fixture
def cli(qapp, tmp_path, monkeypatch):
    monkeypatch.setenv("SMOOTHKIT_LOG_PATH", str(tmp_path / "smoothkit.log"))
    monkeypatch.delenv("SMOOTHKIT_HOST", raising=False)
    monkeypatch.delenv("SMOOTHKIT_PREVIEW", raising=False)
    settings = str(tmp_path / "prefs.ini")
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(main, ["--settings", settings, *args])

    yield _invoke

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "smoothkit_handler", None):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def host_option(tmp_path):
    script = tmp_path / "host.py"
    script.write_text(HOST_SCRIPT, encoding="utf-8")
    return f'"{sys.executable}" "{script}"'


@pytest.fixture
def tools_host_option(tmp_path):
    script = tmp_path / "tools_host.py"
    script.write_text(TOOLS_HOST_SCRIPT, encoding="utf-8")
    return f'"{sys.executable}" "{script}"'


def test_version(cli) -> None:
    result = cli("--version")
    assert result.exit_code == 0


def test_check_env_preview(cli) -> None:
    result = cli("--preview", "check-env")
    assert result.exit_code == 0, result.output
    assert "Preview mode" in result.output


def test_status_preview(cli) -> None:
    result = cli("status")
    assert result.exit_code == 0, result.output
    assert "FFmpeg: unknown" in result.output
    assert "RIFE: unknown" in result.output


def test_validate_without_host_fails(cli) -> None:
    result = cli("validate")
    assert result.exit_code == 1
    assert "preview mode" in result.output


def test_install_rejects_unknown_tool(cli) -> None:
    result = cli("install", "gimp", "/downloads/gimp.zip")
    assert result.exit_code == 2


def test_run_reencode_without_frames_dir(cli) -> None:
    result = cli("run", "in.mp4", "out.mp4", "--reencode-only")
    assert result.exit_code == 1
    assert "Pick a frames_out folder first." in result.output


def test_run_without_host_fails(cli) -> None:
    result = cli("run", "in.mp4", "out.mp4")
    assert result.exit_code == 1
    assert "Failed." in result.output


def test_run_with_live_host(cli, host_option) -> None:
    result = cli("--host", host_option, "run", "in.mp4", "out.mp4", "--max-threads", "2")
    assert result.exit_code == 0, result.output
    assert "Running… 55%" in result.output
    assert "Done." in result.output


def test_negative_max_threads_rejected(cli) -> None:
    result = cli("run", "in.mp4", "out.mp4", "--max-threads", "-1")
    assert result.exit_code == 2


def test_status_waits_for_slow_paths(cli, tools_host_option) -> None:
    result = cli("--host", tools_host_option, "status")
    assert result.exit_code == 0, result.output
    assert "FFmpeg: installed" in result.output
    assert "RIFE: installed" in result.output
    assert "/apps/bin" in result.output


def test_reencode_failure_reported_after_return(cli, tools_host_option) -> None:
    args = ["--host", tools_host_option, "run", "in.mp4", "out.mp4", "--reencode-only"]
    result = cli(*args, "--frames-dir", "/v/frames_out")
    assert result.exit_code == 1, result.output
    assert "ffmpeg error: bad" in result.output
    assert "ffmpeg exited with 1" in result.output
