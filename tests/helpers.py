"""Test helpers shared across test modules (fake HTTP, payload builders)."""

from collections.abc import Callable

import httpx

ETHERSCAN_URL = "https://etherscan.test/api"
COINGECKO_URL = "https://coingecko.test/api/v3/simple/price"
BARK_URL = "https://bark.test"


def gas_oracle_payload(**result: str) -> dict:
    """Etherscan gasoracle success payload with the given result fields."""
    return {"status": "1", "message": "OK", "result": result}


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms
