"""Qt names used across SmoothKit, imported from PySide6 in one place."""

from PySide6.QtCore import QCoreApplication, QObject, QSettings, Qt, QThread, QTimer, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

SETTINGS_INI_FORMAT = QSettings.Format.IniFormat
SETTINGS_NO_ERROR = QSettings.Status.NoError

__all__ = [
    # Qt Core
    "QCoreApplication",
    "QObject",
    "QSettings",
    "QThread",
    "Signal",
    "Qt",
    "QTimer",
    "SETTINGS_INI_FORMAT",
    "SETTINGS_NO_ERROR",
    # Qt Gui
    "QFont",
    # Qt Widgets
    "QApplication",
    "QCheckBox",
    "QFileDialog",
    "QFormLayout",
    "QGroupBox",
    "QHBoxLayout",
    "QLabel",
    "QLineEdit",
    "QMainWindow",
    "QPlainTextEdit",
    "QProgressBar",
    "QPushButton",
    "QSpinBox",
    "QVBoxLayout",
    "QWidget",
]
