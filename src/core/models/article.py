#!/usr/bin/env python3
"""
Article data model.

Represents one normalized article/paper produced by a collector.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Any, Sequence, Tuple


@dataclass(frozen=True)
class Article:
    """
    A single collected item, immutable once produced.

    Every field is always present; empty strings and an empty author
    sequence are valid values. ``source`` is the declared name of the
    collector that produced the article.
    """
    title: str
    authors: Tuple[str, ...] = field(default_factory=tuple)
    url: str = ""
    published_date: str = ""
    summary: str = ""
    source: str = ""

    def __post_init__(self):
        """Store authors as a tuple so the record stays immutable."""
        authors: Sequence[str] = self.authors or ()
        if isinstance(authors, str):
            authors = (authors,)
        object.__setattr__(self, 'authors', tuple(authors))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'title': self.title,
            'authors': list(self.authors),
            'url': self.url,
            'published_date': self.published_date,
            'summary': self.summary,
            'source': self.source
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        """Create Article from dictionary."""
        return cls(
            title=data.get('title', ''),
            authors=data.get('authors') or (),
            url=data.get('url', ''),
            published_date=data.get('published_date', ''),
            summary=data.get('summary', ''),
            source=data.get('source', '')
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, payload: str) -> 'Article':
        return cls.from_dict(json.loads(payload))

    def __repr__(self):
        return f"Article(title='{self.title[:50]}...', source='{self.source}', url='{self.url}')"
