"""Tests for the tool registry and the environment probe."""

import pytest

from smoothkit import constants
from smoothkit.core.models import ToolKind, ToolStatus
from smoothkit.exceptions import BridgeError
from smoothkit.services.environment_probe import EnvironmentProbe
from smoothkit.services.tool_registry import ToolRegistry

VALIDATION_PAYLOAD = {
    "ffmpeg": {"ok": True, "path": "/tools/ffmpeg", "output": "ffmpeg version 6.1"},
    "rife": {"ok": False, "path": None, "output": "rife-ncnn-vulkan: not found"},
}


@pytest.fixture
def registry(qapp, bridge, inline_worker):
    bridge.responses.update(
        {
            constants.CMD_GET_APP_PATHS: ["/data/bin", "/data/logs"],
            constants.CMD_TOOL_STATUS: lambda params: (
                "installed" if params["tool"] == "ffmpeg" else "missing"
            ),
        }
    )
    return ToolRegistry(bridge, inline_worker)


def test_initial_status_unknown(registry) -> None:
    for kind in ToolKind:
        assert registry.status(kind) is ToolStatus.UNKNOWN


def test_refresh_status(registry, bridge) -> None:
    seen = []
    registry.status_changed.connect(lambda kind, status: seen.append((kind, status)))

    registry.refresh_status()

    assert registry.status(ToolKind.FFMPEG) is ToolStatus.INSTALLED
    assert registry.status(ToolKind.INTERPOLATOR) is ToolStatus.MISSING
    assert registry.paths == ["/data/bin", "/data/logs"]
    assert sorted(params["tool"] for cmd, params in bridge.calls if cmd == "tool_status") == [
        "ffmpeg",
        "rife",
    ]
    assert len(seen) == 2


def test_refresh_is_idempotent(registry) -> None:
    registry.refresh_status()
    first = {kind: registry.status(kind) for kind in ToolKind}
    registry.refresh_status()
    assert {kind: registry.status(kind) for kind in ToolKind} == first


def test_one_tool_failing_does_not_block_the_other(registry, bridge) -> None:
    def _status(params):
        if params["tool"] == "rife":
            return BridgeError("rife query failed", "tool_status")
        return "installed"

    bridge.responses[constants.CMD_TOOL_STATUS] = _status
    errors = []
    registry.error.connect(errors.append)

    registry.refresh_status()

    assert registry.status(ToolKind.FFMPEG) is ToolStatus.INSTALLED
    assert registry.status(ToolKind.INTERPOLATOR) is ToolStatus.UNKNOWN
    assert errors == ["rife query failed"]


def test_malformed_status_resolves_unknown(registry, bridge) -> None:
    bridge.responses[constants.CMD_TOOL_STATUS] = 7
    errors = []
    registry.error.connect(errors.append)
    registry.refresh_status()
    assert registry.status(ToolKind.FFMPEG) is ToolStatus.UNKNOWN
    assert len(errors) == 2


def test_refreshed_waits_for_paths(qapp, bridge, deferred_workers) -> None:
    registry = ToolRegistry(bridge, deferred_workers)
    refreshed = []
    registry.refreshed.connect(lambda: refreshed.append(registry.paths))

    registry.refresh_status()
    paths_call, *status_calls = deferred_workers.pending
    assert paths_call.command == constants.CMD_GET_APP_PATHS
    for worker in status_calls:
        worker.succeed("installed")

    assert registry.status(ToolKind.FFMPEG) is ToolStatus.INSTALLED
    assert refreshed == []

    paths_call.succeed(["/apps/bin"])

    assert refreshed == [["/apps/bin"]]


def test_refreshed_after_paths_failure(registry, bridge) -> None:
    bridge.responses[constants.CMD_GET_APP_PATHS] = BridgeError("host unreachable")
    refreshed = []
    registry.refreshed.connect(lambda: refreshed.append(True))

    registry.refresh_status()

    assert refreshed == [True]
    assert registry.paths == []


def test_install_blank_path_is_noop(registry, bridge) -> None:
    assert registry.install(ToolKind.FFMPEG, "   ") is False
    assert constants.CMD_INSTALL_TOOL not in bridge.commands()


def test_install_success_refreshes(registry, bridge) -> None:
    bridge.responses[constants.CMD_INSTALL_TOOL] = "Installed to /data/bin/rife/v1"
    installed = []
    registry.installed.connect(lambda kind, text: installed.append((kind, text)))

    assert registry.install(ToolKind.INTERPOLATOR, "/downloads/rife.zip") is True

    command, params = bridge.calls[0]
    assert command == constants.CMD_INSTALL_TOOL
    assert params == {"source_path": "/downloads/rife.zip", "tool": "rife", "version": "v1"}
    assert installed == [(ToolKind.INTERPOLATOR, "Installed to /data/bin/rife/v1")]
    assert constants.CMD_TOOL_STATUS in bridge.commands()
    assert registry.status(ToolKind.INTERPOLATOR) is ToolStatus.MISSING


def test_install_failure_keeps_status(registry, bridge) -> None:
    registry.refresh_status()
    bridge.calls.clear()
    bridge.responses[constants.CMD_INSTALL_TOOL] = BridgeError("archive is corrupt")
    errors = []
    registry.error.connect(errors.append)

    registry.install(ToolKind.FFMPEG, "/downloads/ffmpeg.zip")

    assert errors == ["archive is corrupt"]
    assert registry.status(ToolKind.FFMPEG) is ToolStatus.INSTALLED
    assert bridge.commands() == [constants.CMD_INSTALL_TOOL]


def test_install_uses_candidate_path(registry, bridge) -> None:
    bridge.responses[constants.CMD_INSTALL_TOOL] = "ok"
    registry.set_candidate_path(ToolKind.FFMPEG, "/downloads/ffmpeg")
    assert registry.install(ToolKind.FFMPEG) is True
    assert bridge.calls[0][1]["source_path"] == "/downloads/ffmpeg"
    assert registry.tool(ToolKind.FFMPEG).candidate_path == "/downloads/ffmpeg"


def test_validation_is_one_atomic_report(registry, bridge) -> None:
    bridge.responses[constants.CMD_VALIDATE_TOOLS] = VALIDATION_PAYLOAD
    reports = []
    validating = []
    registry.validation_ready.connect(reports.append)
    registry.validating_changed.connect(validating.append)

    registry.validate()

    assert bridge.commands() == [constants.CMD_VALIDATE_TOOLS]
    assert len(reports) == 1
    report = reports[0]
    assert report[ToolKind.FFMPEG].ok is True
    assert report[ToolKind.INTERPOLATOR].ok is False
    assert registry.tool(ToolKind.INTERPOLATOR).validation == report[ToolKind.INTERPOLATOR]
    assert validating == [True, False]
    assert registry.validating is False


def test_validation_failure(registry, bridge) -> None:
    bridge.responses[constants.CMD_VALIDATE_TOOLS] = BridgeError("host crashed")
    errors = []
    registry.error.connect(errors.append)
    registry.validate()
    assert errors == ["host crashed"]
    assert registry.report is None
    assert registry.validating is False


def test_validating_stays_true_while_outstanding(qapp, bridge, deferred_workers) -> None:
    registry = ToolRegistry(bridge, deferred_workers)
    registry.validate()
    registry.validate()
    assert registry.validating is True

    deferred_workers.pending[0].succeed(VALIDATION_PAYLOAD)
    assert registry.validating is True
    deferred_workers.pending[0].succeed(VALIDATION_PAYLOAD)
    assert registry.validating is False


def test_environment_probe_keeps_raw_text(qapp, bridge, inline_worker) -> None:
    bridge.responses[constants.CMD_CHECK_ENVIRONMENT] = "OS: linux | ARCH: x86_64 | python ok"
    probe = EnvironmentProbe(bridge, inline_worker)
    seen = []
    probe.result_changed.connect(seen.append)

    probe.check()

    assert probe.text == "OS: linux | ARCH: x86_64 | python ok"
    assert seen == [probe.text]


def test_environment_probe_shows_error_text(qapp, bridge, inline_worker) -> None:
    bridge.responses[constants.CMD_CHECK_ENVIRONMENT] = BridgeError("host unreachable")
    probe = EnvironmentProbe(bridge, inline_worker)
    probe.check()
    assert probe.text == "host unreachable"
