"""Low-gas notification gate with cooldown.

Fires when the standard tier is at or below the threshold and more than
cooldown_ms has passed since the last confirmed dispatch. The safe and fast
tiers are reported in the message but never compared.
"""

import math
from decimal import Decimal

from gas_tracker.logging import get_logger
from gas_tracker.models import GasEstimate, GateDecision, NotificationState

logger = get_logger(__name__)

REASON_ABOVE_THRESHOLD = "above_threshold"
REASON_COOLDOWN = "cooldown"
REASON_BELOW_THRESHOLD = "below_threshold"

_MS_PER_MINUTE = 60_000


class NotificationGate:
    """Decides whether a low-gas notification should be sent.

    The only state is the timestamp of the last confirmed dispatch, which
    is updated through record_dispatch() once the notifier reports success.

    Args:
        threshold_gwei: Standard-tier price at or below which to notify.
        cooldown_ms: Minimum milliseconds between two dispatches.
    """

    def __init__(self, threshold_gwei: Decimal, cooldown_ms: int) -> None:
        if cooldown_ms < 0:
            raise ValueError("cooldown_ms must be >= 0")
        self._state = NotificationState(
            threshold_gwei=threshold_gwei, cooldown_ms=cooldown_ms
        )

    @property
    def state(self) -> NotificationState:
        return self._state

    def evaluate(
        self, gas: GasEstimate, eth_price_usd: Decimal, now_ms: int
    ) -> GateDecision:
        """Evaluate the gate for the current gas estimate.

        Args:
            gas: Current tiered gas estimate.
            eth_price_usd: Current ETH price (logged for context only).
            now_ms: Current epoch time in milliseconds.

        Returns:
            GateDecision; should_fire is True only when both the threshold
            and the cooldown conditions hold.
        """
        standard = gas.standard
        threshold = self._state.threshold_gwei

        if standard > threshold:
            return GateDecision(should_fire=False, reason=REASON_ABOVE_THRESHOLD)

        elapsed = now_ms - self._state.last_fired_at_ms
        if elapsed > self._state.cooldown_ms:
            return GateDecision(should_fire=True, reason=REASON_BELOW_THRESHOLD)

        remaining = math.ceil((self._state.cooldown_ms - elapsed) / _MS_PER_MINUTE)
        logger.info(
            "low_gas_notification_cooling_down",
            standard_gwei=str(standard),
            threshold_gwei=str(threshold),
            eth_price_usd=str(eth_price_usd),
            remaining_minutes=remaining,
        )
        return GateDecision(
            should_fire=False,
            reason=REASON_COOLDOWN,
            remaining_cooldown_minutes=remaining,
        )

    def record_dispatch(self, now_ms: int) -> None:
        """Start a new cooldown window after a confirmed dispatch."""
        self._state.last_fired_at_ms = now_ms
