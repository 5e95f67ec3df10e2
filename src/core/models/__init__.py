#!/usr/bin/env python3
"""
Core data models for article collection.

Contains the normalized record shared by collectors, aggregator and formatter.
"""

from .article import Article

__all__ = ['Article']
