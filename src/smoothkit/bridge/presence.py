"""Host presence detection."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from smoothkit import constants
from smoothkit.bridge.base import HostBridge

logger = logging.getLogger(__name__)


def detect_host_presence(bridge: HostBridge, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True if the bridge is expected to deliver events.

    Call once per session and keep the answer; it selects the completion
    strategy for every job that follows.
    """
    env = os.environ if environ is None else environ
    if env.get(constants.ENV_PREVIEW, "").strip().lower() in constants.TRUTHY_VALUES:
        logger.info("Preview forced by %s; host events disabled", constants.ENV_PREVIEW)
        return False
    present = bool(getattr(bridge, "supports_events", False))
    logger.info("Host presence: %s (%s)", present, type(bridge).__name__)
    return present
