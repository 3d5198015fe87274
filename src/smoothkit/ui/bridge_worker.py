"""Worker thread for host requests to avoid blocking UI."""

import logging
from typing import Any, Mapping, Optional

from smoothkit.bridge.base import HostBridge
from smoothkit.ui.qt_compat import QThread, Signal

logger = logging.getLogger(__name__)


class BridgeCallWorker(QThread):
    """Run one host request off the UI thread.

    Exactly one of ``succeeded`` or ``failed`` is emitted per run. Both carry
    the caller's ``tag`` first so one slot can serve several requests.
    """

    succeeded = Signal(object, object)  # tag, result
    failed = Signal(object, str)  # tag, error text

    def __init__(
        self,
        bridge: HostBridge,
        command: str,
        params: Optional[Mapping[str, Any]] = None,
        tag: Any = None,
        parent=None,
    ) -> None:
        """Initialize worker.

        Args:
            bridge: Host bridge to call
            command: Request name
            params: Request parameters
            tag: Opaque value handed back with the result
            parent: Parent QObject (owns the worker until it finishes)
        """
        super().__init__(parent)
        self.bridge = bridge
        self.command = command
        self.params = dict(params or {})
        self.tag = tag
        self.finished.connect(self.deleteLater)

    def run(self) -> None:
        """Issue the request."""
        try:
            result = self.bridge.invoke(self.command, self.params)
        except Exception as e:
            logger.debug("%s failed: %s", self.command, e)
            self.failed.emit(self.tag, str(e))
            return
        self.succeeded.emit(self.tag, result)
