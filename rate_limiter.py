"""Per-client token bucket rate limiting.

State is local to one process. Horizontally scaled deployments enforce an
independent limit per instance unless traffic is routed stickily per client.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from logger import LOGGER_NAME

log = logging.getLogger(LOGGER_NAME)

UNKNOWN_CLIENT = "unknown"


def client_identity(headers: Mapping[str, str], peer_host: Optional[str]) -> str:
    """Rate-limit key: first X-Forwarded-For hop, else the socket peer."""
    xf = headers.get("x-forwarded-for") or ""
    if xf:
        first = xf.split(",")[0].strip()
        if first:
            return first
    return peer_host or UNKNOWN_CLIENT


@dataclass
class Bucket:
    tokens: float
    last_refill_at: float


class TokenBucketLimiter:
    """Continuous-refill token bucket keyed by client identity.

    The bucket table is bounded: least recently seen identities are evicted
    past ``max_clients``. Buckets idle longer than ``idle_ttl_s`` are swept,
    but only once they would have refilled to capacity, so a swept client
    comes back to exactly the bucket it would have had.
    """

    def __init__(
        self,
        capacity: int = 16,
        refill_per_minute: float = 8.0,
        max_clients: int = 10_000,
        idle_ttl_s: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        if refill_per_minute < 0:
            raise ValueError("refill_per_minute must be >= 0")
        if max_clients <= 0:
            raise ValueError("max_clients must be > 0")
        self.capacity = float(capacity)
        self.refill_per_minute = float(refill_per_minute)
        self.max_clients = max_clients
        self.idle_ttl_s = idle_ttl_s
        self._clock = clock
        self._lock = threading.Lock()
        self._buckets: OrderedDict[str, Bucket] = OrderedDict()
        self._last_sweep = clock()

    @classmethod
    def from_config(cls, config, clock: Callable[[], float] = time.monotonic) -> TokenBucketLimiter:
        return cls(
            capacity=config.rate_capacity,
            refill_per_minute=config.rate_refill_per_minute,
            max_clients=config.rate_max_clients,
            idle_ttl_s=config.rate_idle_ttl_s,
            clock=clock,
        )

    def __len__(self) -> int:
        return len(self._buckets)

    def allow(self, identity: str) -> bool:
        """Take one token for ``identity``; False when the bucket is empty."""
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)

            bucket = self._buckets.get(identity)
            if bucket is None:
                bucket = Bucket(tokens=self.capacity, last_refill_at=now)
                self._buckets[identity] = bucket
                self._evict_overflow()
            else:
                self._buckets.move_to_end(identity)

            bucket.tokens = self._refilled(bucket, now)
            bucket.last_refill_at = now

            if bucket.tokens >= 1:
                bucket.tokens -= 1
                return True
            return False

    def tokens(self, identity: str) -> Optional[float]:
        """Current (un-refilled) token count, or None for an unseen identity."""
        with self._lock:
            bucket = self._buckets.get(identity)
            return bucket.tokens if bucket is not None else None

    def _refilled(self, bucket: Bucket, now: float) -> float:
        elapsed_min = max(0.0, now - bucket.last_refill_at) / 60.0
        return min(self.capacity, bucket.tokens + elapsed_min * self.refill_per_minute)

    def _evict_overflow(self) -> None:
        while len(self._buckets) > self.max_clients:
            evicted, _ = self._buckets.popitem(last=False)
            log.debug("Rate limiter evicted least recent client=%s", evicted)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self.idle_ttl_s:
            return
        self._last_sweep = now
        # OrderedDict is kept in last-activity order, oldest first.
        stale = []
        for identity, bucket in self._buckets.items():
            if now - bucket.last_refill_at < self.idle_ttl_s:
                break
            # Only full buckets go; a partly refilled one keeps its count.
            if self._refilled(bucket, now) >= self.capacity:
                stale.append(identity)
        for identity in stale:
            del self._buckets[identity]
        if stale:
            log.debug("Rate limiter swept idle clients=%d remaining=%d", len(stale), len(self._buckets))
