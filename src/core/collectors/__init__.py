#!/usr/bin/env python3
"""
Collector architecture for pluggable article sources.

Each collector fetches from one external source and normalizes into Article records.
"""

from .base import ArticleCollector, collapse_whitespace
from .registry import CollectorRegistry
from .arxiv import ArxivCollector, encode_query
from .example import ExampleArticleCollector
from .auto_register import build_default_registry, register_builtin_collectors

__all__ = [
    'ArticleCollector', 'collapse_whitespace', 'CollectorRegistry',
    'ArxivCollector', 'encode_query', 'ExampleArticleCollector',
    'build_default_registry', 'register_builtin_collectors'
]
