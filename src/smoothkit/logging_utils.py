"""Logging helpers for SmoothKit."""

from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable

from smoothkit import constants

_LOGGER_NAME = "smoothkit"


class CallbackHandler(logging.Handler):
    """Forward log messages to a callable sink."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        super().__init__()
        self._callback = callback

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:
            msg = record.getMessage()
        try:
            self._callback(msg)
        except Exception:
            self.handleError(record)


def _has_handler(logger: logging.Logger, handler_key: str) -> bool:
    return any(
        getattr(handler, "smoothkit_handler", None) == handler_key for handler in logger.handlers
    )


def _remove_handler(logger: logging.Logger, handler_key: str) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, "smoothkit_handler", None) == handler_key:
            logger.removeHandler(handler)


def _log_level() -> int:
    level_name = os.environ.get(constants.ENV_LOG_LEVEL, "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _log_path() -> Path:
    configured = os.environ.get(constants.ENV_LOG_PATH)
    if configured:
        return Path(configured).expanduser()
    return Path(tempfile.gettempdir()) / "smoothkit.log"


def setup_logging(
    ui_sink: Callable[[str], None] | None = None,
    enable_console: bool | None = None,
    level: int | None = None,
) -> Path:
    """Configure SmoothKit logging with optional UI forwarding.

    Args:
        ui_sink: Optional callback receiving formatted records for the window log panel.
        enable_console: Whether to enable console logging. Defaults to on when
            there is no UI sink.
        level: Logging level (defaults to SMOOTHKIT_LOG_LEVEL env var or INFO).

    Returns:
        Path to the log file.
    """
    log_level = level if level is not None else _log_level()

    sk_logger = logging.getLogger(_LOGGER_NAME)
    sk_logger.setLevel(log_level)
    sk_logger.propagate = True

    # Root stays at WARNING so Qt and third-party noise is dropped; ours propagates.
    root_logger = logging.getLogger()
    if root_logger.level > logging.WARNING or root_logger.level == logging.NOTSET:
        root_logger.setLevel(logging.WARNING)

    log_path = _log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    ui_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    if not _has_handler(root_logger, "file"):
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.smoothkit_handler = "file"
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)
        sk_logger.info("Logging to %s", log_path)

    if enable_console is None:
        enable_console = ui_sink is None

    if enable_console:
        if not _has_handler(root_logger, "console"):
            console_handler = logging.StreamHandler()
            console_handler.smoothkit_handler = "console"
            console_handler.setLevel(log_level)
            console_handler.setFormatter(console_formatter)
            root_logger.addHandler(console_handler)
    else:
        _remove_handler(root_logger, "console")

    # Replace rather than stack so a new window can take over the sink
    _remove_handler(root_logger, "ui")
    if ui_sink is not None:
        ui_handler = CallbackHandler(ui_sink)
        ui_handler.smoothkit_handler = "ui"
        ui_handler.setLevel(log_level)
        ui_handler.setFormatter(ui_formatter)
        root_logger.addHandler(ui_handler)

    return log_path


def remove_ui_sink() -> None:
    """Detach the UI log handler installed by ``setup_logging``."""
    _remove_handler(logging.getLogger(), "ui")
