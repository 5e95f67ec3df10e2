#!/usr/bin/env python3
"""
Multi-source article aggregation.

Runs one named collector or every registered collector for a query and
merges the results under a best-effort partial-failure policy.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from core.collectors.base import ArticleCollector
from core.collectors.registry import CollectorRegistry
from core.exceptions import CollectionError, UnknownSourceError
from core.models.article import Article

logger = logging.getLogger(__name__)

SCOPE_ALL = 'all'


@dataclass
class SourceFailure:
    """One collector that failed during a multi-source run."""
    source: str
    error: CollectionError

    def __str__(self):
        return f"{self.source}: {self.error}"


@dataclass
class AggregationResult:
    """Merged articles plus the per-source failures recorded on the way."""
    articles: List[Article] = field(default_factory=list)
    errors: List[SourceFailure] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def total(self) -> int:
        return len(self.articles)


class Aggregator:
    """Fans a query out to registered collectors."""

    def __init__(self,
                 registry: CollectorRegistry,
                 parallel: bool = False,
                 max_concurrent: int = 5):
        """
        Initialize aggregator.

        Args:
            registry: Collector registry shared with the rest of the process
            parallel: Run the "all" scope concurrently instead of in sequence
            max_concurrent: Maximum collectors in flight when parallel
        """
        self.registry = registry
        self.parallel = parallel
        self.max_concurrent = max(1, max_concurrent)

    async def aggregate(self, scope: str, query: str, max_results: int) -> AggregationResult:
        """
        Collect articles for a scope.

        Args:
            scope: "all" or the name of one registered collector (case-insensitive)
            query: Search query passed to every collector
            max_results: Per-collector result bound

        Returns:
            AggregationResult; for a single source the errors list is always empty

        Raises:
            UnknownSourceError: If a single-source scope names no registered collector
            CollectionError: If the single requested collector fails
        """
        if scope.lower() == SCOPE_ALL:
            return await self._aggregate_all(query, max_results)

        collector = self.registry.get(scope)
        if collector is None:
            logger.warning(f"Unknown source requested: {scope}")
            raise UnknownSourceError(scope, self.registry.names())

        articles = await self._run_collector(collector, query, max_results)
        return AggregationResult(articles=articles)

    async def _aggregate_all(self, query: str, max_results: int) -> AggregationResult:
        collectors = self.registry.collectors()
        start_time = time.time()

        if self.parallel:
            outcomes = await self._collect_concurrently(collectors, query, max_results)
        else:
            outcomes = []
            for collector in collectors:
                outcomes.append(await self._collect_safely(collector, query, max_results))

        # Merge in registry order regardless of completion order
        result = AggregationResult()
        for collector, (articles, error) in zip(collectors, outcomes):
            if error is not None:
                result.errors.append(SourceFailure(source=collector.name(), error=error))
            else:
                result.articles.extend(articles)

        duration = time.time() - start_time
        logger.info(
            f"Aggregated {result.total} articles from {len(collectors) - len(result.errors)}/"
            f"{len(collectors)} sources in {duration:.2f}s"
        )
        return result

    async def _collect_concurrently(self,
                                    collectors: List[ArticleCollector],
                                    query: str,
                                    max_results: int) -> List[Tuple[List[Article], Optional[CollectionError]]]:
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def collect_with_semaphore(collector: ArticleCollector):
            async with semaphore:
                return await self._collect_safely(collector, query, max_results)

        tasks = [collect_with_semaphore(collector) for collector in collectors]
        return list(await asyncio.gather(*tasks))

    async def _collect_safely(self,
                              collector: ArticleCollector,
                              query: str,
                              max_results: int) -> Tuple[List[Article], Optional[CollectionError]]:
        """Run one collector, capturing its failure instead of raising."""
        try:
            return await self._run_collector(collector, query, max_results), None
        except CollectionError as e:
            logger.error(f"Error collecting from {collector.name()}: {e}")
            return [], e

    async def _run_collector(self,
                             collector: ArticleCollector,
                             query: str,
                             max_results: int) -> List[Article]:
        """Run one collector, normalizing unexpected failures to CollectionError."""
        try:
            articles = await collector.collect(query, max_results)
        except CollectionError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error in collector {collector.name()}: {e}", exc_info=True)
            raise CollectionError(collector.name(), str(e) or e.__class__.__name__) from e

        logger.info(f"Collected {len(articles)} articles from {collector.name()}")
        return list(articles)
