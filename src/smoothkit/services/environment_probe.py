"""Environment diagnostic shown at the top of the window."""

import logging

from smoothkit import constants
from smoothkit.services.base import BridgeService
from smoothkit.ui.qt_compat import Signal

logger = logging.getLogger(__name__)


class EnvironmentProbe(BridgeService):
    """Asks the host for its environment line and keeps the raw text."""

    result_changed = Signal(str)

    def __init__(self, bridge, worker_factory=None, parent=None) -> None:
        super().__init__(bridge, worker_factory, parent)
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    def check(self) -> None:
        self._call(
            constants.CMD_CHECK_ENVIRONMENT, None, self._on_checked, self._on_check_failed
        )

    def _on_checked(self, tag, result) -> None:
        self._set_text("" if result is None else str(result))

    def _on_check_failed(self, tag, error: str) -> None:
        logger.warning("Environment check failed: %s", error)
        self._set_text(error)

    def _set_text(self, text: str) -> None:
        self._text = text
        self.result_changed.emit(text)
