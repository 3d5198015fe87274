"""Custom exceptions for the SmoothKit package."""


class SmoothKitError(Exception):
    """Base exception for all SmoothKit errors."""

    pass


class ConfigurationError(SmoothKitError):
    """Raised when configuration is invalid."""

    pass


class BridgeError(SmoothKitError):
    """Raised when the host rejects a request.

    The message is the host's own error text, shown to the user as-is.
    """

    def __init__(self, message: str, command: str = "") -> None:
        super().__init__(message)
        self.command = command


class HostUnavailableError(BridgeError):
    """Raised when no live host backs the bridge."""

    pass


class MalformedPayloadError(SmoothKitError):
    """Raised when a host payload is missing required fields or has the wrong shape."""

    pass


class PreconditionError(SmoothKitError):
    """Raised when a job cannot start because local inputs are incomplete."""

    pass


class SubscriptionError(SmoothKitError):
    """Raised when an event channel cannot be subscribed."""

    pass
