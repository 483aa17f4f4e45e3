"""Custom exceptions for the gas tracker.

Raised inside providers and the notifier, and caught at the component
boundary (fallback chain, notifier, history store) where they are logged.
"""


class GasTrackerError(Exception):
    """Base exception for all gas tracker errors."""


class UpstreamError(GasTrackerError):
    """Raised when an upstream API answers with a non-success status."""


class MalformedResponseError(UpstreamError):
    """Raised when an upstream payload has an unexpected shape or value."""


class NotificationError(GasTrackerError):
    """Raised when the push service rejects a notification."""
