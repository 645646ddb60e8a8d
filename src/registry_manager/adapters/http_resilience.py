from __future__ import annotations

from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Self

import httpx
from aiolimiter import AsyncLimiter

if TYPE_CHECKING:
    from types import TracebackType

    from registry_manager.config.http_resilience import RateLimit, ResilienceConfig

MUTATING_METHODS = frozenset({"DELETE", "PATCH", "POST", "PUT"})


def _limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


class ResilientClient:
    """A single ``httpx.AsyncClient`` whose requests pass through rate limiters.

    Every request gets the configured timeout. Mutating requests additionally
    wait on the write limiter. Errors surface unchanged; nothing is retried.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = _limiter(config.ratelimit)
        self._write_limiter = _limiter(config.write_ratelimit)
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=httpx.Timeout(config.timeout_seconds),
            headers=dict(config.default_headers or {}),
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        limiters = [self._limiter]
        if method.upper() in MUTATING_METHODS:
            limiters.append(self._write_limiter)

        async with AsyncExitStack() as stack:
            for limiter in limiters:
                if limiter is not None:
                    await stack.enter_async_context(limiter)
            if json is None:
                return await self._client.request(method, url, params=params)
            return await self._client.request(method, url, params=params, json=json)
