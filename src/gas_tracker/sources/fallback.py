"""Ordered provider fallback with per-attempt timeouts.

A FallbackChain tries each provider in turn and returns the first successful
result. Failures are logged with the provider name and never raised; the
chain returns None when every provider failed.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from decimal import InvalidOperation
from typing import Generic, TypeVar

import httpx

from gas_tracker.exceptions import UpstreamError
from gas_tracker.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Transport failures, timeouts, bad payloads and unparsable numbers.
RECOVERABLE_ERRORS: tuple[type[BaseException], ...] = (
    httpx.HTTPError,
    asyncio.TimeoutError,
    UpstreamError,
    ValueError,
    InvalidOperation,
)


@dataclass(frozen=True)
class Provider(Generic[T]):
    """A named async fetch function with its own timeout.

    The fetch callable receives the timeout so it can pass it on to the
    HTTP request; the chain also enforces it with asyncio.wait_for.
    """

    name: str
    fetch: Callable[[float], Awaitable[T]]
    timeout: float


class FallbackChain(Generic[T]):
    """Tries providers in order, short-circuiting on the first success.

    Args:
        label: Prefix for log event names (e.g. "price", "gas").
        providers: Providers in priority order.
    """

    def __init__(self, label: str, providers: Sequence[Provider[T]]) -> None:
        self._label = label
        self._providers = list(providers)

    @property
    def providers(self) -> list[Provider[T]]:
        return list(self._providers)

    async def run(self) -> T | None:
        """Return the first provider result, or None if all failed."""
        for provider in self._providers:
            try:
                result = await asyncio.wait_for(
                    provider.fetch(provider.timeout), timeout=provider.timeout
                )
            except RECOVERABLE_ERRORS as e:
                logger.warning(
                    f"{self._label}_provider_failed",
                    provider=provider.name,
                    error=str(e) or type(e).__name__,
                )
                continue

            logger.debug(f"{self._label}_provider_succeeded", provider=provider.name)
            return result

        logger.warning(
            f"{self._label}_all_providers_failed",
            providers=[p.name for p in self._providers],
        )
        return None
