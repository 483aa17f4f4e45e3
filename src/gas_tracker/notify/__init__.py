"""Notification layer -- cooldown gate, Bark delivery, and alert formatting."""

from gas_tracker.notify.bark import BarkNotifier, NotificationOptions
from gas_tracker.notify.gate import NotificationGate
from gas_tracker.notify.messages import LOW_GAS_OPTIONS, LOW_GAS_TITLE, format_low_gas_body

__all__ = [
    "BarkNotifier",
    "LOW_GAS_OPTIONS",
    "LOW_GAS_TITLE",
    "NotificationGate",
    "NotificationOptions",
    "format_low_gas_body",
]
