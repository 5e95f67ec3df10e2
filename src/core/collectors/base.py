#!/usr/bin/env python3
"""
Base classes for article collectors.

Defines the abstract interface every content source implements.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Dict, Any

from core.models.article import Article


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim text and collapse internal whitespace runs (including newlines) to single spaces."""
    if not text:
        return ""
    return " ".join(text.split())


class ArticleCollector(ABC):
    """
    Abstract base class for all article collectors.

    Implementations fetch from one external source and normalize the
    results into Article records.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize collector.

        Args:
            config: Collector-specific configuration
        """
        self.config = config or {}

    @abstractmethod
    def name(self) -> str:
        """Stable, case-insensitively unique collector name."""
        pass

    @abstractmethod
    def description(self) -> str:
        """Short human-readable description of the source."""
        pass

    @abstractmethod
    async def collect(self, query: str, max_results: int) -> List[Article]:
        """
        Collect articles matching a query.

        Args:
            query: Source-specific search query
            max_results: Upper bound on the number of requested items

        Returns:
            List of articles, empty when nothing matched

        Raises:
            CollectionError: If the source is unreachable or returns a malformed payload
        """
        pass

    def build_article(self,
                      title: str,
                      authors: Iterable[str] = (),
                      url: str = "",
                      published_date: str = "",
                      summary: str = "") -> Article:
        """Create an Article stamped with this collector's name."""
        return Article(
            title=title,
            authors=tuple(authors),
            url=url,
            published_date=published_date,
            summary=summary,
            source=self.name()
        )

    def __repr__(self):
        return f"{self.__class__.__name__}(name='{self.name()}')"
