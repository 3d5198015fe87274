"""Host bridge backed by a child process speaking newline-delimited JSON.

Wire format, one JSON object per line:

* request (stdin):   ``{"id": 7, "command": "tool_status", "params": {"tool": "rife"}}``
* response (stdout): ``{"id": 7, "ok": true, "result": "installed"}`` or
  ``{"id": 7, "ok": false, "error": "..."}``
* event (stdout):    ``{"event": "pipeline_progress", "payload": 42.0}``

Anything else the host prints on stdout is logged and dropped.
"""

from __future__ import annotations

import itertools
import json
import logging
import os
import subprocess
import threading
from typing import Any, Mapping, Optional, Sequence

from smoothkit.bridge.base import EventHandler, HostBridge, Unlisten
from smoothkit.exceptions import BridgeError, HostUnavailableError

logger = logging.getLogger(__name__)


def _popen_kwargs(prevent_sigint: bool = True) -> dict[str, object]:
    """Return subprocess kwargs that keep Ctrl+C in the UI from killing the host."""
    kwargs: dict[str, object] = {}
    if prevent_sigint:
        if os.name == "nt":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            kwargs["start_new_session"] = True
    return kwargs


class _PendingCall:
    def __init__(self, command: str) -> None:
        self.command = command
        self.done = threading.Event()
        self.result: Any = None
        self.error: Optional[BridgeError] = None


class JsonLineHostBridge(HostBridge):
    """Live host running as a child process.

    Args:
        command: Argument list that starts the host.
        cwd: Optional working directory for the host.
    """

    supports_events = True

    def __init__(self, command: Sequence[str], cwd: Optional[str] = None) -> None:
        self.command = list(command)
        self.cwd = cwd
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._write_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._ids = itertools.count(1)
        self._pending: dict[int, _PendingCall] = {}
        self._handlers: dict[str, list[EventHandler]] = {}
        self._exit_reason: Optional[str] = None

    def start(self) -> None:
        """Launch the host process. Called lazily by the first request."""
        with self._state_lock:
            if self._process is not None:
                return
            if self._exit_reason is not None:
                raise HostUnavailableError(self._exit_reason)
            logger.info("Starting host: %s", " ".join(self.command))
            try:
                self._process = subprocess.Popen(
                    self.command,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=None,
                    cwd=self.cwd,
                    text=True,
                    encoding="utf-8",
                    bufsize=1,
                    **_popen_kwargs(prevent_sigint=True),
                )
            except OSError as exc:
                self._exit_reason = f"Failed to start host: {exc}"
                raise HostUnavailableError(self._exit_reason) from exc
            self._reader = threading.Thread(
                target=self._read_loop, name="smoothkit-host-reader", daemon=True
            )
            self._reader.start()

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def invoke(self, command: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        self.start()

        call_id = next(self._ids)
        pending = _PendingCall(command)
        with self._state_lock:
            if self._exit_reason is not None:
                raise HostUnavailableError(self._exit_reason, command)
            self._pending[call_id] = pending
        line = json.dumps({"id": call_id, "command": command, "params": dict(params or {})})
        try:
            with self._write_lock:
                self._process.stdin.write(line + "\n")
                self._process.stdin.flush()
        except (OSError, ValueError) as exc:
            with self._state_lock:
                self._pending.pop(call_id, None)
            raise HostUnavailableError(f"Host is not accepting requests: {exc}", command) from exc

        logger.debug("-> %s #%d", command, call_id)
        pending.done.wait()
        if pending.error is not None:
            raise pending.error
        return pending.result

    def listen(self, event: str, handler: EventHandler) -> Unlisten:
        with self._state_lock:
            self._handlers.setdefault(event, []).append(handler)

        def _unlisten() -> None:
            with self._state_lock:
                handlers = self._handlers.get(event, [])
                if handler in handlers:
                    handlers.remove(handler)

        return _unlisten

    def close(self) -> None:
        process = self._process
        if process is None:
            return
        if process.poll() is None:
            try:
                process.stdin.close()
            except OSError as exc:
                logger.warning("Error closing host stdin: %s", exc)
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                logger.warning("Host did not exit, terminating")
                process.terminate()
                process.wait()
        self._fail_pending("Host closed")

    def _read_loop(self) -> None:
        stdout = self._process.stdout
        for raw in stdout:
            raw = raw.strip()
            if not raw:
                continue
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                logger.info("host: %s", raw)
                continue
            if not isinstance(message, dict):
                logger.warning("Ignoring non-object host message: %r", message)
                continue
            if "event" in message:
                self._dispatch(message["event"], message.get("payload"))
            elif "id" in message:
                self._resolve(message)
            else:
                logger.warning("Ignoring host message without id or event: %r", message)

        code = self._process.wait()
        self._fail_pending(f"Host exited with code {code}")

    def _dispatch(self, event: Any, payload: Any) -> None:
        with self._state_lock:
            handlers = list(self._handlers.get(event, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Event handler for %s failed", event)

    def _resolve(self, message: dict) -> None:
        with self._state_lock:
            pending = self._pending.pop(message.get("id"), None)
        if pending is None:
            logger.warning("Response for unknown request id %r", message.get("id"))
            return
        if message.get("ok"):
            pending.result = message.get("result")
        else:
            pending.error = BridgeError(str(message.get("error") or "Request failed"), pending.command)
        pending.done.set()

    def _fail_pending(self, reason: str) -> None:
        with self._state_lock:
            self._exit_reason = self._exit_reason or reason
            pending_calls = list(self._pending.values())
            self._pending.clear()
        for pending in pending_calls:
            pending.error = HostUnavailableError(reason, pending.command)
            pending.done.set()
