"""Solana RPC client construction with back-off on rate limiting."""

import time

import httpx
from solana.rpc.api import Client as SolanaHTTPClient  # type: ignore[import-untyped]

from atrixfarm.logging import get_logger

DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RETRIES = 5
BACKOFF_STEP_SECONDS = 2

logger = get_logger("rpc")


class RateLimitRetryTransport(httpx.BaseTransport):
    """Transport that re-sends a request while the node answers 429."""

    def __init__(
        self,
        wrapped: httpx.BaseTransport | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff: float = BACKOFF_STEP_SECONDS,
        sleep=time.sleep,
    ) -> None:
        self._wrapped = wrapped or httpx.HTTPTransport()
        self._max_retries = max_retries
        self._backoff = backoff
        self._sleep = sleep

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            response = self._wrapped.handle_request(request)
            if response.status_code != 429 or attempt >= self._max_retries:
                return response
            response.close()
            attempt += 1
            delay = attempt * self._backoff
            logger.warning(
                "rate limited by %s, retry %d/%d in %.1fs",
                request.url.host, attempt, self._max_retries, delay,
            )
            self._sleep(delay)

    def close(self) -> None:
        self._wrapped.close()


def new_rpc_client(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> SolanaHTTPClient:
    """Create a Solana RPC client that retries 429 responses with linear back-off."""
    client = SolanaHTTPClient(url, timeout=timeout)
    client._provider.session = httpx.Client(
        timeout=timeout,
        transport=RateLimitRetryTransport(max_retries=max_retries),
    )
    return client
