#!/usr/bin/env python3
"""
arXiv collector implementation.

Queries the arXiv export API and decodes its Atom feed into articles.
"""

import asyncio
import logging
from typing import List, Dict, Any, Optional
from urllib.parse import quote

import aiohttp
import feedparser
from yarl import URL

from core.exceptions import TransportError, DecodeError
from core.models.article import Article
from .base import ArticleCollector, collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://export.arxiv.org/api/query'
DEFAULT_TIMEOUT = 30

# feedparser flags these on otherwise usable documents
_BENIGN_BOZO_TYPES = (feedparser.CharacterEncodingOverride, feedparser.NonXMLContentType)


def encode_query(query: str) -> str:
    """
    Percent-encode a search query for the arXiv API.

    Only ASCII letters, digits and ``-_.~`` are kept; every other byte of
    the UTF-8 encoding becomes ``%XX`` with uppercase hex digits.
    """
    return quote(query, safe='')


class ArxivCollector(ArticleCollector):
    """Collects academic papers from the arXiv Atom API."""

    NAME = 'Arxiv'
    DESCRIPTION = 'Collects academic papers from arXiv.org'

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize arXiv collector.

        Args:
            config: Optional ``api_url``, ``timeout`` and ``user_agent`` overrides
        """
        super().__init__(config)
        self.api_url = self.config.get('api_url') or DEFAULT_API_URL
        self.timeout = self.config.get('timeout', DEFAULT_TIMEOUT)
        self.user_agent = self.config.get('user_agent', 'Mozilla/5.0 (compatible; ArticleCollectorBot/1.0)')

    def name(self) -> str:
        return self.NAME

    def description(self) -> str:
        return self.DESCRIPTION

    def build_query_url(self, query: str, max_results: int) -> str:
        """Build the fully encoded request URL."""
        return f"{self.api_url}?search_query={encode_query(query)}&start=0&max_results={max_results}"

    async def collect(self, query: str, max_results: int) -> List[Article]:
        """Fetch and decode one page of arXiv results."""
        url = self.build_query_url(query, max_results)
        logger.info(f"Fetching from Arxiv: {url}")

        content = await self._fetch_feed(url)
        return self.parse_feed(content)

    async def _fetch_feed(self, url: str) -> bytes:
        """
        Issue a single GET and return the raw body.

        Raises:
            TransportError: On connection failure, timeout or non-success status
        """
        session_timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(
                timeout=session_timeout,
                headers={'User-Agent': self.user_agent}
            ) as session:
                # URL is already encoded; stop aiohttp from re-quoting it
                async with session.get(URL(url, encoded=True)) as response:
                    response.raise_for_status()
                    return await response.read()

        except asyncio.TimeoutError:
            logger.error(f"Timeout fetching Arxiv feed {url}")
            raise TransportError(self.name(), url, f"timed out after {self.timeout}s")
        except aiohttp.ClientResponseError as e:
            logger.error(f"Arxiv returned HTTP {e.status} for {url}")
            raise TransportError(self.name(), url, f"HTTP {e.status} {e.message}") from e
        except aiohttp.ClientError as e:
            logger.error(f"HTTP error fetching Arxiv feed {url}: {e}")
            raise TransportError(self.name(), url, e) from e

    def parse_feed(self, content: bytes) -> List[Article]:
        """
        Decode an Atom document into articles.

        A document without ``entry`` elements yields an empty list.

        Raises:
            DecodeError: If the payload is not a parseable feed
        """
        feed = feedparser.parse(content)
        entries = feed.get('entries', [])

        if feed.get('bozo'):
            bozo_exception = feed.get('bozo_exception')
            if not isinstance(bozo_exception, _BENIGN_BOZO_TYPES):
                logger.error(f"Failed to parse Arxiv XML: {bozo_exception}")
                raise DecodeError(self.name(), 'Atom feed', bozo_exception)
            logger.warning(f"Feed parsing warning for Arxiv: {bozo_exception}")

        logger.debug(f"Found {len(entries)} entries in Arxiv feed")
        return [self._entry_to_article(entry) for entry in entries]

    def _entry_to_article(self, entry: Dict[str, Any]) -> Article:
        """Map one feed entry onto an Article."""
        authors = [
            author.get('name', '')
            for author in entry.get('authors', [])
            if author.get('name')
        ]

        return self.build_article(
            title=collapse_whitespace(entry.get('title', '')),
            authors=authors,
            url=entry.get('id', ''),
            published_date=entry.get('published', ''),
            summary=collapse_whitespace(entry.get('summary', ''))
        )
