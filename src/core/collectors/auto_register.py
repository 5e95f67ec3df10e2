#!/usr/bin/env python3
"""
Registration of the built-in collectors.

Call build_default_registry() once at startup and pass the result around.
"""

import logging
from typing import Optional

from .registry import CollectorRegistry
from .arxiv import ArxivCollector
from .example import ExampleArticleCollector

logger = logging.getLogger(__name__)


def register_builtin_collectors(registry: CollectorRegistry, config=None) -> None:
    """Register all built-in collectors, live source first."""
    arxiv_config = {}
    if config is not None:
        arxiv_config = {
            'api_url': config.app.arxiv_api_url,
            'timeout': config.app.feed_timeout,
            'user_agent': config.app.user_agent,
        }

    collectors_to_register = [
        ArxivCollector(arxiv_config),
        ExampleArticleCollector(),
    ]

    for collector in collectors_to_register:
        registry.register(collector)


def build_default_registry(config=None, freeze: bool = True) -> CollectorRegistry:
    """
    Create a registry populated with the built-in collectors.

    Args:
        config: Optional application Config used for collector settings
        freeze: Make the registry immutable once populated

    Returns:
        Populated CollectorRegistry
    """
    registry = CollectorRegistry()
    register_builtin_collectors(registry, config)
    if freeze:
        registry.freeze()
    logger.info(f"Collector registry ready: {', '.join(registry.names())}")
    return registry
