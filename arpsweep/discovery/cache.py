"""Time-bounded store of the last successful discovery result."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from arpsweep.discovery.models import HostRecord


class DiscoveryCache:
    """Holds one host list snapshot and the time it was captured.

    ``store`` replaces the snapshot wholesale; the list handed out by
    ``snapshot`` is the one that was stored and must be treated as read-only.
    """

    def __init__(
        self,
        ttl: int,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.enabled = enabled
        self._clock = clock
        self._hosts: list[HostRecord] = []
        self._captured_at: float | None = None
        self.captured_at_utc: datetime | None = None

    def is_valid(self) -> bool:
        if not self.enabled or not self._hosts or self._captured_at is None:
            return False
        return self._clock() - self._captured_at < self.ttl

    def age(self) -> float | None:
        """Seconds since the current snapshot was captured, None when empty."""
        if self._captured_at is None:
            return None
        return self._clock() - self._captured_at

    def store(self, hosts: list[HostRecord]) -> None:
        self._hosts, self._captured_at = hosts, self._clock()
        self.captured_at_utc = datetime.now(timezone.utc)
        logger.debug(f"Cached {len(hosts)} hosts (ttl={self.ttl}s)")

    def snapshot(self) -> list[HostRecord]:
        return self._hosts

    def clear(self) -> None:
        self._hosts, self._captured_at = [], None
        self.captured_at_utc = None
