"""UI construction mixin for the SmoothKit main window."""

from __future__ import annotations

import logging
from importlib import resources

from smoothkit import __version__
from smoothkit.core.models import ToolKind
from smoothkit.ui.main_window_widgets import NoWheelSpinBox
from smoothkit.ui.qt_compat import (
    QCheckBox,
    QFont,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    Qt,
    QVBoxLayout,
    QWidget,
)

logger = logging.getLogger("smoothkit.ui.main_window")


class MainWindowUiMixin:
    """UI construction and layout helpers."""

    def _apply_theme(self) -> None:
        """Apply the dark theme from its QSS file."""
        self.setProperty("theme", "dark")
        try:
            qss_text = (
                resources.files("smoothkit.ui")
                .joinpath("stylesheets", "dark.qss")
                .read_text(encoding="utf-8")
            )
        except Exception as e:
            logger.error(f"Could not load stylesheet: {e}")
            return

        self.setStyleSheet(qss_text)

    def _setup_ui(self) -> None:
        """Set up the user interface."""
        self.setWindowTitle(f"SmoothKit v{__version__}")
        self.setMinimumSize(640, 600)
        self.resize(900, 860)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(10, 10, 10, 5)
        main_layout.setSpacing(8)

        main_layout.addWidget(self._create_environment_box())
        main_layout.addWidget(self._create_tools_box())
        main_layout.addWidget(self._create_pipeline_box(), 1)
        main_layout.addWidget(self._create_log_panel())

        self.statusBar().showMessage("Ready")

    def _set_form_growth_policy(self, form_layout: QFormLayout) -> None:
        policy_enum = getattr(QFormLayout, "FieldGrowthPolicy", None)
        if policy_enum is not None:
            form_layout.setFieldGrowthPolicy(policy_enum.AllNonFixedFieldsGrow)
        else:
            form_layout.setFieldGrowthPolicy(QFormLayout.AllNonFixedFieldsGrow)

    def _create_environment_box(self) -> QGroupBox:
        group = QGroupBox("Environment")
        layout = QVBoxLayout(group)

        self.env_label = QLabel("")
        self.env_label.setWordWrap(True)
        self.env_label.setObjectName("EnvLabel")
        layout.addWidget(self.env_label)

        buttons = QHBoxLayout()
        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.setToolTip("Re-query tool status and managed paths")
        self.check_env_btn = QPushButton("Check Env")
        self.validate_btn = QPushButton("Validate Tools")
        self.validate_btn.setToolTip("Run FFmpeg and RIFE once to confirm they work")
        buttons.addWidget(self.refresh_btn)
        buttons.addWidget(self.check_env_btn)
        buttons.addWidget(self.validate_btn)
        buttons.addStretch()
        layout.addLayout(buttons)

        self.validation_text = QPlainTextEdit()
        self.validation_text.setReadOnly(True)
        self.validation_text.setFont(QFont("Consolas", 9))
        self.validation_text.setMaximumHeight(120)
        self.validation_text.setPlaceholderText("Validation results appear here.")
        layout.addWidget(self.validation_text)

        self.env_error_label = QLabel("")
        self.env_error_label.setObjectName("ErrorLabel")
        self.env_error_label.setWordWrap(True)
        layout.addWidget(self.env_error_label)
        return group

    def _create_tools_box(self) -> QGroupBox:
        group = QGroupBox("Tools")
        form_layout = QFormLayout(group)
        self._set_form_growth_policy(form_layout)

        self.tool_status_labels = {}
        self.tool_path_edits = {}
        self.tool_browse_btns = {}
        self.tool_install_btns = {}
        for kind in ToolKind:
            row = QHBoxLayout()
            status_label = QLabel("unknown")
            status_label.setMinimumWidth(70)
            path_edit = QLineEdit()
            path_edit.setPlaceholderText(f"Path to a {kind.label} executable, archive or folder")
            browse_btn = QPushButton("Browse...")
            install_btn = QPushButton("Install")
            install_btn.setEnabled(False)
            row.addWidget(status_label)
            row.addWidget(path_edit, 1)
            row.addWidget(browse_btn)
            row.addWidget(install_btn)
            form_layout.addRow(f"{kind.label}:", row)

            self.tool_status_labels[kind] = status_label
            self.tool_path_edits[kind] = path_edit
            self.tool_browse_btns[kind] = browse_btn
            self.tool_install_btns[kind] = install_btn

        self.paths_label = QLabel("")
        self.paths_label.setWordWrap(True)
        self.paths_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        form_layout.addRow("Managed paths:", self.paths_label)
        return group

    def _create_pipeline_box(self) -> QGroupBox:
        group = QGroupBox("Pipeline")
        layout = QVBoxLayout(group)
        form_layout = QFormLayout()
        self._set_form_growth_policy(form_layout)

        input_row = QHBoxLayout()
        self.input_path_edit = QLineEdit()
        self.input_path_edit.setPlaceholderText("Video to smooth")
        self.browse_input_btn = QPushButton("Browse...")
        input_row.addWidget(self.input_path_edit, 1)
        input_row.addWidget(self.browse_input_btn)
        form_layout.addRow("Input:", input_row)

        output_row = QHBoxLayout()
        self.output_path_edit = QLineEdit()
        self.output_path_edit.setPlaceholderText("Where to write the result")
        self.browse_output_btn = QPushButton("Browse...")
        output_row.addWidget(self.output_path_edit, 1)
        output_row.addWidget(self.browse_output_btn)
        form_layout.addRow("Output:", output_row)

        self.reencode_check = QCheckBox("Re-encode only (reuse interpolated frames)")
        form_layout.addRow(self.reencode_check)

        frames_row = QHBoxLayout()
        self.frames_dir_edit = QLineEdit()
        self.frames_dir_edit.setPlaceholderText("frames_out folder from a previous run")
        self.browse_frames_btn = QPushButton("Browse...")
        frames_row.addWidget(self.frames_dir_edit, 1)
        frames_row.addWidget(self.browse_frames_btn)
        form_layout.addRow("Frames folder:", frames_row)

        self.max_threads_spin = NoWheelSpinBox()
        self.max_threads_spin.setRange(0, 256)
        self.max_threads_spin.setSpecialValueText("Auto")
        self.max_threads_spin.setToolTip("0 lets the backend choose")
        form_layout.addRow("Max threads:", self.max_threads_spin)
        layout.addLayout(form_layout)

        action_row = QHBoxLayout()
        self.start_btn = QPushButton("Smooth")
        self.start_btn.setObjectName("PrimaryButton")
        self.start_btn.setMinimumHeight(32)
        self.status_label = QLabel("")
        action_row.addWidget(self.start_btn)
        action_row.addWidget(self.status_label, 1)
        layout.addLayout(action_row)

        self.progress_bar = QProgressBar()
        self.progress_bar.setMinimum(0)
        self.progress_bar.setMaximum(100)
        self.progress_bar.setTextVisible(True)
        layout.addWidget(self.progress_bar)

        self.job_error_label = QLabel("")
        self.job_error_label.setObjectName("ErrorLabel")
        self.job_error_label.setWordWrap(True)
        layout.addWidget(self.job_error_label)

        self.frames_info_label = QLabel("")
        self.frames_info_label.setWordWrap(True)
        layout.addWidget(self.frames_info_label)

        self.job_log_text = QPlainTextEdit()
        self.job_log_text.setReadOnly(True)
        self.job_log_text.setFont(QFont("Consolas", 9))
        self.job_log_text.setObjectName("LogBox")
        layout.addWidget(self.job_log_text, 1)
        return group

    def _create_log_panel(self) -> QGroupBox:
        """Application log, fed by the logging UI sink."""
        log_group = QGroupBox("Log")
        log_layout = QVBoxLayout(log_group)
        log_layout.setContentsMargins(5, 5, 5, 5)

        self.log_text = QPlainTextEdit()
        self.log_text.setReadOnly(True)
        self.log_text.setFont(QFont("Consolas", 9))
        self.log_text.setMaximumBlockCount(1000)
        self.log_text.setMaximumHeight(140)
        self.log_text.setObjectName("LogBox")
        log_layout.addWidget(self.log_text)

        clear_log_btn = QPushButton("Clear Log")
        clear_log_btn.clicked.connect(self.log_text.clear)
        log_layout.addWidget(clear_log_btn)
        return log_group
