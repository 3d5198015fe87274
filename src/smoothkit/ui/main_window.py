"""Main window for SmoothKit using the qt_compat abstraction."""

import logging
import sys
from typing import Optional

from smoothkit.app import AppSession, build_session
from smoothkit.core.config import AppConfig
from smoothkit.logging_utils import remove_ui_sink
from smoothkit.ui.main_window_logic import MainWindowLogicMixin
from smoothkit.ui.main_window_ui import MainWindowUiMixin
from smoothkit.ui.qt_compat import QApplication, QMainWindow

logger = logging.getLogger(__name__)


class SmoothKitWindow(MainWindowUiMixin, MainWindowLogicMixin, QMainWindow):
    """Environment, tools and pipeline controls for one session.

    Event subscriptions are taken when the window is first shown and
    released when it closes.
    """

    def __init__(self, session: AppSession, forward_logs: bool = True) -> None:
        super().__init__()
        self.session = session
        self._log_forwarder = None
        self._shown_log_lines = 0
        self._activated = False

        self._setup_ui()
        self._apply_theme()
        if forward_logs:
            self._setup_logging()
        self._setup_connections()
        if not session.host_present:
            self.statusBar().showMessage("Preview mode: no host backend attached")

    def showEvent(self, event) -> None:
        super().showEvent(event)
        if self._activated:
            return
        self._activated = True
        self.session.jobs.activate()
        self._refresh()

    def closeEvent(self, event) -> None:
        if self._activated:
            self.session.jobs.deactivate()
            self._activated = False
        if self._log_forwarder is not None:
            remove_ui_sink()
            self._log_forwarder = None
        super().closeEvent(event)


def run_ui(config: Optional[AppConfig] = None) -> int:
    """Run the UI application and return its exit code."""
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("SmoothKit")
    app.setOrganizationName("SmoothKit")
    app.setStyle("Fusion")

    session = build_session(config)
    window = SmoothKitWindow(session)
    window.show()
    try:
        return app.exec()
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(run_ui())
