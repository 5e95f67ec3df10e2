#!/usr/bin/env python3
"""
Placeholder collector for general article sites.

Shows how a new source plugs into the registry without a live endpoint.
"""

import logging
from typing import List

from core.models.article import Article
from .base import ArticleCollector

logger = logging.getLogger(__name__)


class ExampleArticleCollector(ArticleCollector):
    """Collector that always succeeds with no articles."""

    NAME = 'Example Articles'
    DESCRIPTION = 'Example collector for article sites (placeholder implementation)'

    def name(self) -> str:
        return self.NAME

    def description(self) -> str:
        return self.DESCRIPTION

    async def collect(self, query: str, max_results: int) -> List[Article]:
        logger.info(f"ExampleArticleCollector called with query: {query}, max_results: {max_results}")
        return []
