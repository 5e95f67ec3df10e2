#!/usr/bin/env python3
"""
Formatting utilities for chat replies.

Renders collected articles, source listings and schedule information as
plain text that always fits in a single chat message.
"""

from datetime import datetime
from typing import Iterable, List, Sequence

from core.models.article import Article

MAX_ITEMS = 5
SUMMARY_LIMIT = 200
MESSAGE_LIMIT = 2000
ELLIPSIS = "..."


def truncate_summary(summary: str, limit: int = SUMMARY_LIMIT) -> str:
    """Cut a summary to ``limit`` characters plus an ellipsis when it is longer."""
    if len(summary) > limit:
        return summary[:limit] + ELLIPSIS
    return summary


def enforce_message_limit(text: str, limit: int = MESSAGE_LIMIT) -> str:
    """Hard cap on total length; the result never exceeds ``limit`` characters."""
    if len(text) > limit:
        return text[:limit - len(ELLIPSIS)] + ELLIPSIS
    return text


def format_article_block(index: int, article: Article) -> str:
    """Format a single article entry (1-based index)."""
    lines = [
        f"**{index}. {article.title}**",
        f"👤 Authors: {', '.join(article.authors)}",
        f"📅 Published: {article.published_date}",
        f"🔗 URL: {article.url}",
        f"📝 Summary: {truncate_summary(article.summary)}",
    ]
    return "\n".join(lines) + "\n\n"


def format_articles_response(articles: Sequence[Article], label: str) -> str:
    """
    Render articles into one bounded reply.

    Shows a heading with the total count, the first MAX_ITEMS articles and
    a trailing line counting the ones left out. The result is always at
    most MESSAGE_LIMIT characters.

    Args:
        articles: Articles in display order
        label: Source label shown in the heading

    Returns:
        Reply text
    """
    if not articles:
        return f"No articles found from {label}."

    parts = [f"📰 **Found {len(articles)} article(s) from {label}:**\n\n"]

    for i, article in enumerate(articles[:MAX_ITEMS], 1):
        parts.append(format_article_block(i, article))

    if len(articles) > MAX_ITEMS:
        parts.append(f"_...and {len(articles) - MAX_ITEMS} more articles_\n")

    return enforce_message_limit("".join(parts))


def format_sources_listing(collectors: Iterable) -> str:
    """List every collector's name and description."""
    response = "📚 **Available Sources:**\n\n"
    for collector in collectors:
        response += f"• **{collector.name()}**: {collector.description()}\n"
    return enforce_message_limit(response)


def format_schedule(cron_expression: str, next_runs: List[datetime]) -> str:
    """Describe the periodic collection schedule."""
    lines = [
        "📅 **Collection Schedule:**",
        "",
        f"Cron: `{cron_expression}`",
    ]

    if next_runs:
        lines.extend([
            "",
            "Next runs:"
        ])
        for run_at in next_runs:
            lines.append(f"  • {run_at.strftime('%Y-%m-%d %H:%M:%S %Z')}")

    lines.extend([
        "",
        "The bot will automatically collect articles based on this schedule."
    ])
    return enforce_message_limit("\n".join(lines))


def format_error(message: str) -> str:
    """Format a user-visible error reply."""
    return enforce_message_limit(f"❌ {message}")
