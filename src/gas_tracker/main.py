"""Entry point for the gas tracker.

Wires all components together and runs the scheduler until SIGINT/SIGTERM.
All configuration comes from the environment (or a .env file).

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. Shared httpx.AsyncClient
4. GasSource / PriceSource
5. FeeEstimator
6. NotificationGate / BarkNotifier
7. HistoryStore (loaded from disk)
8. GasTracker (query cycle)
9. Scheduler
"""

import asyncio
import signal
from typing import Any

import httpx

from gas_tracker.config import AppSettings
from gas_tracker.fees.estimator import FeeEstimator
from gas_tracker.history.store import HistoryStore
from gas_tracker.logging import get_logger, setup_logging
from gas_tracker.notify.bark import BarkNotifier
from gas_tracker.notify.gate import NotificationGate
from gas_tracker.scheduler import Scheduler
from gas_tracker.sources.gas_source import GasSource
from gas_tracker.sources.price_source import PriceSource
from gas_tracker.tracker import GasTracker

FAREWELL_MESSAGE = "\n\n👋 Gas tracker stopped. Thanks for using it!"

_USER_AGENT = "gas-tracker/0.1"
_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _build_components(settings: AppSettings, client: httpx.AsyncClient) -> dict[str, Any]:
    """Build all tracker components from settings.

    Args:
        settings: Application-wide settings.
        client: Shared HTTP client (owned and closed by the caller).

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("gas_tracker.main")

    gas_source = GasSource(client, settings.etherscan)
    price_source = PriceSource(client, settings.price, settings.etherscan)
    fee_estimator = FeeEstimator()

    gate = NotificationGate(settings.gas_threshold, settings.cooldown_ms)
    notifier = BarkNotifier(client, settings.bark)
    if notifier.enabled:
        logger.info(
            "bark_notifications_enabled",
            threshold_gwei=str(settings.gas_threshold),
            cooldown_minutes=settings.notification_cooldown,
        )
    else:
        logger.warning(
            "bark_notifications_disabled",
            note="Set BARK_KEY in the environment or .env to enable push alerts",
        )

    history = HistoryStore(
        settings.history.path,
        max_entries=settings.history.max_entries,
        summary_window=settings.history.summary_window,
    )
    history.load()

    tracker = GasTracker(
        gas_source=gas_source,
        price_source=price_source,
        fee_estimator=fee_estimator,
        gate=gate,
        notifier=notifier,
        history=history,
        record_history=settings.history.enabled,
    )
    scheduler = Scheduler(tracker.query_once, interval_minutes=settings.default_interval)

    return {
        "gas_source": gas_source,
        "price_source": price_source,
        "fee_estimator": fee_estimator,
        "gate": gate,
        "notifier": notifier,
        "history": history,
        "tracker": tracker,
        "scheduler": scheduler,
    }


def _setup_signal_handlers(scheduler: Scheduler) -> None:
    """Stop the scheduler on SIGINT/SIGTERM.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("gas_tracker.main")
    loop = asyncio.get_running_loop()

    def _shutdown_handler() -> None:
        logger.info("shutdown_signal_received")
        scheduler.stop()

    for sig in _SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, _shutdown_handler)


def _remove_signal_handlers() -> None:
    loop = asyncio.get_running_loop()
    for sig in _SHUTDOWN_SIGNALS:
        loop.remove_signal_handler(sig)


async def run(settings: AppSettings | None = None) -> None:
    """Run the gas tracker until a termination signal arrives."""
    settings = settings or AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("gas_tracker.main")

    async with httpx.AsyncClient(
        headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
        follow_redirects=True,
    ) as client:
        components = _build_components(settings, client)
        scheduler: Scheduler = components["scheduler"]
        _setup_signal_handlers(scheduler)

        print("🚀 Gas tracker started")
        print(f"⏰ Querying every {settings.default_interval} minute(s)")
        print(f"📁 History file: {settings.history.path}")
        print("Press Ctrl+C to exit\n")

        logger.info(
            "gas_tracker_starting",
            interval_minutes=settings.default_interval,
            threshold_gwei=str(settings.gas_threshold),
            history_recording=settings.history.enabled,
        )

        try:
            await scheduler.run()
        finally:
            _remove_signal_handlers()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())
    print(FAREWELL_MESSAGE)


if __name__ == "__main__":
    main()
