#!/usr/bin/env python3
"""
Collector registry.

Holds the ordered set of collector instances built at startup and
resolves them by case-insensitive name.
"""

import logging
import threading
from typing import Iterator, List, Optional, Tuple

from core.exceptions import ConfigurationError, DuplicateSourceError
from .base import ArticleCollector

logger = logging.getLogger(__name__)


class CollectorRegistry:
    """
    Ordered registry of collector instances.

    Registration order is preserved and defines the merge order of
    multi-source aggregation. Writers are serialized by a lock and swap in
    a new tuple, so readers always see a consistent snapshot.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._collectors: Tuple[ArticleCollector, ...] = ()
        self._lock = threading.Lock()
        self._frozen = False

    def register(self, collector: ArticleCollector) -> None:
        """
        Append a collector.

        Raises:
            DuplicateSourceError: If the name clashes case-insensitively with a registered collector
            ConfigurationError: If the registry has been frozen
        """
        name = collector.name()
        with self._lock:
            if self._frozen:
                raise ConfigurationError('collectors', f"registry is frozen, cannot register '{name}'")

            key = name.lower()
            if any(existing.name().lower() == key for existing in self._collectors):
                raise DuplicateSourceError(name)

            self._collectors = self._collectors + (collector,)

        logger.info(f"Registered collector: {name}")

    def freeze(self) -> None:
        """Reject any further registration."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional[ArticleCollector]:
        """Find a collector by case-insensitive exact name."""
        key = name.lower()
        for collector in self._collectors:
            if collector.name().lower() == key:
                return collector
        return None

    def collectors(self) -> List[ArticleCollector]:
        """Snapshot of registered collectors in registration order."""
        return list(self._collectors)

    def names(self) -> List[str]:
        """Declared names in registration order."""
        return [collector.name() for collector in self._collectors]

    def __iter__(self) -> Iterator[ArticleCollector]:
        return iter(self._collectors)

    def __len__(self) -> int:
        return len(self._collectors)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None
