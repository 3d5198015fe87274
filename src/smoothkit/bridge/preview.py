"""Bridge used when no host backend is attached."""

from __future__ import annotations

import logging
import platform
from typing import Any, Callable, Mapping, Optional, Union

from smoothkit import constants
from smoothkit.bridge.base import EventHandler, HostBridge, Unlisten
from smoothkit.exceptions import HostUnavailableError

logger = logging.getLogger(__name__)

PREVIEW_MESSAGE = "No host backend attached (preview mode)"

Response = Union[Any, Callable[[Mapping[str, Any]], Any]]


def _environment_text(params: Mapping[str, Any]) -> str:
    return f"Preview mode | OS: {platform.system()} | ARCH: {platform.machine()}"


class PreviewHostBridge(HostBridge):
    """Answers read-only queries with placeholders and rejects everything else.

    Never delivers events.

    Args:
        responses: Extra or replacement canned answers keyed by command. A
            callable is called with the request parameters.
    """

    supports_events = False

    def __init__(self, responses: Optional[Mapping[str, Response]] = None) -> None:
        self._responses: dict[str, Response] = {
            constants.CMD_CHECK_ENVIRONMENT: _environment_text,
            constants.CMD_GET_APP_PATHS: [],
            constants.CMD_TOOL_STATUS: "unknown",
        }
        if responses:
            self._responses.update(responses)

    def invoke(self, command: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        if command not in self._responses:
            logger.debug("Preview bridge rejecting %s", command)
            raise HostUnavailableError(PREVIEW_MESSAGE, command)
        response = self._responses[command]
        if callable(response):
            return response(dict(params or {}))
        return response

    def listen(self, event: str, handler: EventHandler) -> Unlisten:
        def _unlisten() -> None:
            return None

        return _unlisten
