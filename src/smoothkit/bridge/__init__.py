"""Host bridge implementations."""

from smoothkit.bridge.base import HostBridge, Unlisten
from smoothkit.bridge.presence import detect_host_presence
from smoothkit.bridge.preview import PreviewHostBridge
from smoothkit.bridge.process import JsonLineHostBridge

__all__ = [
    "HostBridge",
    "JsonLineHostBridge",
    "PreviewHostBridge",
    "Unlisten",
    "detect_host_presence",
]
