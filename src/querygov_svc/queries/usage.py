"""Usage oracles - answer whether a query definition is referenced."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class UsageOracle(ABC):
    """Reports whether an active consumer references a query definition."""

    @abstractmethod
    def is_in_use(self, query_id: int) -> bool:
        ...


class NoUsageOracle(UsageOracle):
    """Nothing is ever in use."""

    def is_in_use(self, query_id: int) -> bool:
        return False


class ReferenceUsageOracle(UsageOracle):
    """
    Tracks consumer references per query id.

    Consumers (job configurations, schedules, ...) register a reference when
    they start depending on a query and release it when they stop.
    """

    def __init__(self) -> None:
        self._refs: dict[int, set[str]] = {}
        self._lock = threading.Lock()

    def add_reference(self, query_id: int, consumer: str) -> None:
        with self._lock:
            self._refs.setdefault(query_id, set()).add(consumer)
        logger.debug(f"Consumer {consumer} now references query {query_id}")

    def remove_reference(self, query_id: int, consumer: str) -> None:
        with self._lock:
            consumers = self._refs.get(query_id)
            if consumers is None:
                return
            consumers.discard(consumer)
            if not consumers:
                del self._refs[query_id]

    def consumers(self, query_id: int) -> list[str]:
        with self._lock:
            return sorted(self._refs.get(query_id, ()))

    def is_in_use(self, query_id: int) -> bool:
        with self._lock:
            return bool(self._refs.get(query_id))
