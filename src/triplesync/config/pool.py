"""Configuration types for the pooled triple store client."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

DEFAULT_MAX_CONNECTIONS = 100
DEFAULT_MAX_CONNECTIONS_PER_HOST = 100


@dataclass(slots=True, frozen=True)
class PoolConfig:
    """Bounds for the shared connection pool.

    A ``None`` timeout waits forever; ``pool_timeout=None`` makes callers queue for
    a free connection instead of failing when the pool is exhausted.
    """

    max_connections: int = DEFAULT_MAX_CONNECTIONS
    max_connections_per_host: int = DEFAULT_MAX_CONNECTIONS_PER_HOST
    keepalive_expiry: float | None = 5.0
    connect_timeout: float | None = None
    read_timeout: float | None = None
    write_timeout: float | None = None
    pool_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.max_connections <= 0 or self.max_connections_per_host <= 0:
            raise ValueError("Connection limits must be positive")

    def limits(self) -> httpx.Limits:
        # The client only ever talks to a single endpoint, so the per-host cap
        # folds into the total.
        cap = min(self.max_connections, self.max_connections_per_host)
        return httpx.Limits(
            max_connections=cap,
            max_keepalive_connections=cap,
            keepalive_expiry=self.keepalive_expiry,
        )

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.pool_timeout,
        )
