"""Shared plumbing for services that call the host."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from smoothkit.bridge.base import HostBridge
from smoothkit.ui.bridge_worker import BridgeCallWorker
from smoothkit.ui.qt_compat import QObject, QThread

logger = logging.getLogger(__name__)

WorkerFactory = Callable[..., Any]


class BridgeService(QObject):
    """QObject that issues host requests on worker threads.

    Results come back to the bound-method slots passed to ``_call``, on the
    thread this object lives in.
    """

    def __init__(
        self,
        bridge: HostBridge,
        worker_factory: Optional[WorkerFactory] = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._bridge = bridge
        self._worker_factory = worker_factory or BridgeCallWorker

    @property
    def bridge(self) -> HostBridge:
        return self._bridge

    def _call(
        self,
        command: str,
        params: Optional[Mapping[str, Any]],
        on_success: Callable[[Any, Any], None],
        on_failure: Callable[[Any, str], None],
        tag: Any = None,
    ):
        worker = self._worker_factory(self._bridge, command, params, tag, self)
        worker.succeeded.connect(on_success)
        worker.failed.connect(on_failure)
        logger.debug("Issuing %s", command)
        worker.start()
        return worker

    def wait_for_workers(self) -> None:
        """Block until every request thread this service started has returned."""
        for worker in self.findChildren(QThread):
            worker.wait()
