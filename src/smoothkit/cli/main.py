"""CLI interface for SmoothKit."""

import json
import logging
import sys
from typing import Callable, Optional

import click

from smoothkit import __version__, constants
from smoothkit.app import AppSession, build_session
from smoothkit.core.config import AppConfig, AppConfigBuilder
from smoothkit.core.models import JobKind, JobPhase, JobRequest, JobState, ToolKind
from smoothkit.exceptions import ConfigurationError
from smoothkit.logging_utils import setup_logging
from smoothkit.ui.qt_compat import QCoreApplication, QTimer

logger = logging.getLogger("smoothkit.cli.main")


def _core_app() -> QCoreApplication:
    return QCoreApplication.instance() or QCoreApplication(sys.argv[:1])


def _run_event_loop(start: Callable[[Callable[[], None]], None]) -> None:
    """Run the Qt event loop until ``start``'s ``finish`` callback is called."""
    app = _core_app()
    QTimer.singleShot(0, lambda: start(app.quit))
    app.exec()


def _open_session(ctx: click.Context) -> AppSession:
    session = build_session(ctx.obj["config"])
    ctx.call_on_close(session.close)
    return session


@click.group()
@click.version_option(__version__)
@click.option(
    "--host",
    envvar=constants.ENV_HOST,
    default=None,
    help="Command that starts the host backend (shell syntax).",
)
@click.option(
    "--preview",
    is_flag=True,
    envvar=constants.ENV_PREVIEW,
    default=False,
    help="Ignore the host and run in preview mode.",
)
@click.option(
    "--settings",
    "settings_path",
    envvar=constants.ENV_SETTINGS_PATH,
    type=click.Path(dir_okay=False),
    default=None,
    help="INI file for preferences (default: platform settings store).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    host: Optional[str],
    preview: bool,
    settings_path: Optional[str],
    verbose: bool,
) -> None:
    """SmoothKit - frame interpolation front-end."""
    builder = AppConfigBuilder().with_preview(preview)
    if host:
        builder.with_host_command(host)
    if settings_path:
        builder.with_settings_path(settings_path)
    try:
        config = builder.build()
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e
    if ctx.invoked_subcommand != "gui":
        setup_logging(level=logging.DEBUG if verbose else None)
    ctx.obj = {"config": config}


@main.command()
@click.pass_context
def gui(ctx: click.Context) -> None:
    """Open the SmoothKit window."""
    from smoothkit.ui.main_window import run_ui

    ctx.exit(run_ui(ctx.obj["config"]))


@main.command("check-env")
@click.pass_context
def check_env(ctx: click.Context) -> None:
    """Print the host's environment diagnostic."""
    session = _open_session(ctx)

    def _start(finish):
        session.environment.result_changed.connect(lambda text: finish())
        session.environment.check()

    _run_event_loop(_start)
    click.echo(session.environment.text)


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Print each tool's install status and the managed paths."""
    session = _open_session(ctx)

    def _start(finish):
        session.tools.refreshed.connect(finish)
        session.tools.error.connect(lambda message: click.echo(f"Error: {message}", err=True))
        session.tools.refresh_status()

    _run_event_loop(_start)
    for kind in ToolKind:
        click.echo(f"{kind.label}: {session.tools.status(kind).value}")
    for path in session.tools.paths:
        click.echo(path)


@main.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Run both tools once and print the validation report as JSON."""
    session = _open_session(ctx)
    failures = []

    def _start(finish):
        session.tools.validation_ready.connect(lambda report: finish())
        session.tools.error.connect(lambda message: (failures.append(message), finish()))
        session.tools.validate()

    _run_event_loop(_start)
    if failures:
        click.echo(f"Error: {failures[0]}", err=True)
        ctx.exit(1)
    report = session.tools.report
    click.echo(json.dumps(report.to_dict(), indent=2))
    if not report.all_ok:
        ctx.exit(1)


@main.command()
@click.argument("tool", type=click.Choice([kind.value for kind in ToolKind], case_sensitive=False))
@click.argument("source_path", type=str)
@click.pass_context
def install(ctx: click.Context, tool: str, source_path: str) -> None:
    """Install TOOL (ffmpeg or rife) from SOURCE_PATH.

    SOURCE_PATH may be an executable, an archive or a folder.
    """
    kind = ToolKind.from_wire(tool)
    if not source_path.strip():
        raise click.BadParameter("must not be blank", param_hint="SOURCE_PATH")
    session = _open_session(ctx)
    failures = []
    installed = []

    def _start(finish):
        def _on_installed(installed_kind, text):
            installed.append(installed_kind)
            click.echo(text)

        def _on_error(message):
            failures.append(message)
            if not installed:
                finish()

        session.tools.installed.connect(_on_installed)
        session.tools.refreshed.connect(finish)
        session.tools.error.connect(_on_error)
        session.tools.install(kind, source_path)

    _run_event_loop(_start)
    if failures:
        click.echo(f"Error: {failures[0]}", err=True)
        ctx.exit(1)
    click.echo(f"{kind.label}: {session.tools.status(kind).value}")


@main.command()
@click.argument("input_path", type=str)
@click.argument("output_path", type=str)
@click.option(
    "--max-threads",
    type=click.IntRange(min=0),
    default=None,
    help="Worker threads for the backend (0 = let it choose).",
)
@click.option(
    "--reencode-only",
    is_flag=True,
    default=False,
    help="Re-encode previously interpolated frames instead of running the full pipeline.",
)
@click.option(
    "--frames-dir",
    type=str,
    default="",
    help="frames_out folder for --reencode-only (default: the remembered folder).",
)
@click.pass_context
def run(
    ctx: click.Context,
    input_path: str,
    output_path: str,
    max_threads: Optional[int],
    reencode_only: bool,
    frames_dir: str,
) -> None:
    """Smooth INPUT_PATH into OUTPUT_PATH and wait for the job to finish.

    Examples:

    \b
        # Full pipeline
        smoothkit --host "smoothkit-host" run in.mp4 out.mp4

    \b
        # Re-encode frames from an earlier run
        smoothkit run in.mp4 out.mp4 --reencode-only --frames-dir frames_out
    """
    session = _open_session(ctx)
    jobs = session.jobs
    if max_threads is None:
        max_threads = session.config.default_max_threads
    request = JobRequest(
        kind=JobKind.REENCODE_ONLY if reencode_only else JobKind.FULL,
        input_video_path=input_path,
        output_video_path=output_path,
        max_threads=max_threads,
        frames_dir=frames_dir,
    )
    printed = {"lines": 0, "status": ""}

    def _start(finish):
        def _on_state(state: JobState) -> None:
            for line in state.log_lines[printed["lines"] :]:
                click.echo(line)
            printed["lines"] = len(state.log_lines)
            if state.status_text and state.status_text != printed["status"]:
                printed["status"] = state.status_text
                click.echo(state.status_text, err=True)
            if state.is_terminal and not jobs.awaiting_outcome:
                finish()

        jobs.state_changed.connect(_on_state)
        jobs.diagnostic.connect(lambda message: click.echo(message, err=True))
        jobs.activate()
        jobs.start(request)

    _run_event_loop(_start)
    state = jobs.state
    if state.phase is JobPhase.DONE:
        if state.frames_dir:
            click.echo(f"Frames folder: {state.frames_dir}")
        return
    click.echo(f"Error: {state.error or constants.MSG_FAILED}", err=True)
    ctx.exit(1)


if __name__ == "__main__":
    main()
