"""Gas tracker query cycle -- fetch, estimate, report, notify, record.

Each cycle:
  1. FETCH: gas estimate and ETH price concurrently
  2. ESTIMATE: transfer fees for the safe, standard and fast tiers
  3. REPORT: print the gas report
  4. NOTIFY: run the cooldown gate and push a low-gas alert when open
  5. RECORD: append to the history file (only when recording is enabled)
  6. SUMMARIZE: print rolling averages from the history

A cycle whose gas fetch fails (or raises) is logged and skipped; the next
scheduled cycle simply tries again.
"""

import asyncio
import time
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

import structlog

from gas_tracker.fees.estimator import FeeEstimator
from gas_tracker.history.store import HistoryStore
from gas_tracker.logging import get_logger
from gas_tracker.models import CycleResult, FeeEstimate, GasEstimate, HistoryRecord
from gas_tracker.notify.bark import BarkNotifier
from gas_tracker.notify.gate import NotificationGate
from gas_tracker.notify.messages import LOW_GAS_OPTIONS, LOW_GAS_TITLE, format_low_gas_body
from gas_tracker.report import format_gas_report, format_history_summary
from gas_tracker.sources.gas_source import GasSource
from gas_tracker.sources.price_source import PriceSource

logger = get_logger(__name__)

_TWO_PLACES = Decimal("0.01")


def _now_ms() -> int:
    return int(time.time() * 1000)


class GasTracker:
    """Owns all tracker state and runs one query cycle at a time.

    Shared mutable state lives on the components it owns: the cached ETH
    price (PriceSource), the last dispatch time (NotificationGate) and the
    in-memory history (HistoryStore).

    Args:
        gas_source: Gas oracle client.
        price_source: ETH/USD price feed.
        fee_estimator: Fee calculator.
        gate: Low-gas notification gate.
        notifier: Push notification client.
        history: History store (loaded by the caller).
        record_history: Append each cycle to the history file.
        clock: Returns the current epoch time in milliseconds.
        output: Receives rendered report text (print by default).
    """

    def __init__(
        self,
        gas_source: GasSource,
        price_source: PriceSource,
        fee_estimator: FeeEstimator,
        gate: NotificationGate,
        notifier: BarkNotifier,
        history: HistoryStore,
        record_history: bool = False,
        clock: Callable[[], int] = _now_ms,
        output: Callable[[str], None] = print,
    ) -> None:
        self._gas_source = gas_source
        self._price_source = price_source
        self._fee_estimator = fee_estimator
        self._gate = gate
        self._notifier = notifier
        self._history = history
        self._record_history = record_history
        self._clock = clock
        self._output = output
        self._cycle_count = 0

    @property
    def gate(self) -> NotificationGate:
        return self._gate

    @property
    def history(self) -> HistoryStore:
        return self._history

    async def query_once(self) -> CycleResult:
        """Run a single query cycle. Never raises on upstream failures."""
        self._cycle_count += 1
        with structlog.contextvars.bound_contextvars(cycle=self._cycle_count):
            return await self._run_cycle()

    async def _run_cycle(self) -> CycleResult:
        logger.info("query_cycle_started")

        gas, price = await asyncio.gather(
            self._gas_source.fetch_gas_estimate(),
            self._price_source.fetch_asset_price_usd(),
            return_exceptions=True,
        )

        if isinstance(gas, BaseException) or isinstance(price, BaseException) or gas is None:
            logger.error(
                "query_cycle_failed",
                gas_error=str(gas) if isinstance(gas, BaseException) else None,
                price_error=str(price) if isinstance(price, BaseException) else None,
                gas_available=isinstance(gas, GasEstimate),
            )
            return CycleResult(ok=False)

        result = CycleResult(ok=True, gas=gas, eth_price_usd=price)
        result.fees = self._fee_estimator.estimate_tiers(gas, price)

        self._output(format_gas_report(gas, price, result.fees, result.started_at))

        await self._check_and_notify(result, gas, price)

        if self._record_history:
            self._history.append(self._build_record(gas, price, result.fees, result.started_at))
            self._history.save()

        self._output(format_history_summary(self._history.summarize()))

        logger.info(
            "query_cycle_complete",
            standard_gwei=str(gas.standard),
            eth_price_usd=str(price),
            notified=result.notified,
        )
        return result

    async def _check_and_notify(
        self, result: CycleResult, gas: GasEstimate, price: Decimal
    ) -> None:
        """Evaluate the gate and push the low-gas alert when it opens."""
        now_ms = self._clock()
        decision = self._gate.evaluate(gas, price, now_ms)
        result.decision = decision
        if not decision.should_fire:
            return

        body = format_low_gas_body(
            gas, result.fees, self._gate.state.threshold_gwei
        )
        sent = await self._notifier.send(LOW_GAS_TITLE, body, LOW_GAS_OPTIONS)
        if sent:
            self._gate.record_dispatch(now_ms)
            result.notified = True
            logger.info(
                "low_gas_notification_dispatched",
                standard_gwei=str(gas.standard),
                threshold_gwei=str(self._gate.state.threshold_gwei),
            )

    @staticmethod
    def _build_record(
        gas: GasEstimate,
        eth_price_usd: Decimal,
        fees: dict[str, FeeEstimate],
        queried_at: datetime,
    ) -> HistoryRecord:
        def _round(value: Decimal) -> Decimal:
            return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)

        return HistoryRecord(
            timestamp=queried_at.astimezone(timezone.utc).isoformat(),
            safe=_round(gas.safe),
            standard=_round(gas.standard),
            fast=_round(gas.fast),
            eth_price=_round(eth_price_usd),
            safe_fee_usd=fees["safe"].fee_usd,
            standard_fee_usd=fees["standard"].fee_usd,
            fast_fee_usd=fees["fast"].fee_usd,
        )
