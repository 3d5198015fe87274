"""Shared fixtures: a scriptable host bridge and synchronous request workers."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402

from smoothkit.bridge.base import HostBridge  # noqa: E402
from smoothkit.exceptions import BridgeError, SubscriptionError  # noqa: E402
from smoothkit.ui.qt_compat import QObject, Signal  # noqa: E402


class FakeHostBridge(HostBridge):
    """In-memory host. Responses are values, exceptions to raise, or callables."""

    def __init__(self, responses=None, supports_events=True) -> None:
        self.responses = dict(responses or {})
        self.supports_events = supports_events
        self.calls = []
        self.handlers = {}
        self.fail_listen = set()
        self.fail_unlisten = set()
        self.unlistened = []
        self.closed = False

    def invoke(self, command, params=None):
        params = dict(params or {})
        self.calls.append((command, params))
        if command not in self.responses:
            raise BridgeError(f"unexpected command {command}", command)
        response = self.responses[command]
        if callable(response):
            response = response(params)
        if isinstance(response, Exception):
            raise response
        return response

    def listen(self, event, handler):
        if event in self.fail_listen:
            raise SubscriptionError(f"cannot listen to {event}")
        self.handlers.setdefault(event, []).append(handler)

        def _unlisten():
            if event in self.fail_unlisten:
                raise RuntimeError(f"cannot unlisten {event}")
            self.handlers[event].remove(handler)
            self.unlistened.append(event)

        return _unlisten

    def emit(self, event, payload=None):
        for handler in list(self.handlers.get(event, ())):
            handler(payload)

    def close(self):
        self.closed = True

    def commands(self):
        return [command for command, _ in self.calls]


class InlineWorker(QObject):
    """Runs the request on ``start()`` in the calling thread."""

    succeeded = Signal(object, object)
    failed = Signal(object, str)
    finished = Signal()

    def __init__(self, bridge, command, params=None, tag=None, parent=None) -> None:
        super().__init__(parent)
        self.bridge = bridge
        self.command = command
        self.params = dict(params or {})
        self.tag = tag

    def start(self) -> None:
        try:
            result = self.bridge.invoke(self.command, self.params)
        except Exception as e:
            self.failed.emit(self.tag, str(e))
        else:
            self.succeeded.emit(self.tag, result)
        self.finished.emit()


class DeferredWorker(InlineWorker):
    """Records the request; the test decides when and how it returns."""

    def __init__(self, registry, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._registry = registry

    def start(self) -> None:
        self.bridge.calls.append((self.command, dict(self.params)))
        self._registry.pending.append(self)

    def succeed(self, result=None) -> None:
        self._registry.pending.remove(self)
        self.succeeded.emit(self.tag, result)

    def fail(self, message: str) -> None:
        self._registry.pending.remove(self)
        self.failed.emit(self.tag, message)


class DeferredWorkers:
    """Worker factory whose requests stay outstanding until resolved."""

    def __init__(self) -> None:
        self.pending = []

    def __call__(self, bridge, command, params=None, tag=None, parent=None):
        return DeferredWorker(self, bridge, command, params, tag, parent)


@pytest.fixture
def bridge():
    return FakeHostBridge()


@pytest.fixture
def inline_worker():
    return InlineWorker


@pytest.fixture
def deferred_workers():
    return DeferredWorkers()


@pytest.fixture
def settings_path(tmp_path):
    return str(tmp_path / "smoothkit.ini")
