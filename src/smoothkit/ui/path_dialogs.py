"""File and folder pickers.

Each returns the chosen path, or ``None`` when the user cancels.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from smoothkit import constants
from smoothkit.ui.qt_compat import QFileDialog


def video_filter(extensions: Iterable[str]) -> str:
    patterns = " ".join(f"*.{ext}" for ext in extensions)
    return f"Video Files ({patterns});;All Files (*)"


def _start_dir(current: str) -> str:
    current = (current or "").strip()
    if not current:
        return ""
    path = Path(current)
    return str(path if path.is_dir() else path.parent)


def pick_input_video(parent=None, current: str = "") -> Optional[str]:
    file_path, _ = QFileDialog.getOpenFileName(
        parent,
        "Select Input Video",
        _start_dir(current),
        video_filter(constants.INPUT_VIDEO_EXTENSIONS),
    )
    return file_path or None


def pick_output_video(parent=None, current: str = "") -> Optional[str]:
    """Ask for an output file, adding the default extension when none is typed."""
    file_path, _ = QFileDialog.getSaveFileName(
        parent,
        "Save Output Video",
        current or "",
        video_filter(constants.OUTPUT_VIDEO_EXTENSIONS),
    )
    if not file_path:
        return None
    if not Path(file_path).suffix:
        file_path = f"{file_path}.{constants.DEFAULT_OUTPUT_EXTENSION}"
    return file_path


def pick_directory(parent=None, title: str = "Select Folder", current: str = "") -> Optional[str]:
    directory = QFileDialog.getExistingDirectory(parent, title, _start_dir(current))
    return directory or None


def pick_tool_source(parent=None, current: str = "") -> Optional[str]:
    """Pick a tool executable or archive; installs also accept a folder typed in by hand."""
    file_path, _ = QFileDialog.getOpenFileName(
        parent, "Select Tool", _start_dir(current), "All Files (*)"
    )
    return file_path or None
