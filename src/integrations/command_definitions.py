#!/usr/bin/env python3
"""
Slash-command definitions registered with the chat platform.
"""

from typing import Any, Dict, List

from core.config import MIN_RESULTS, MAX_RESULTS

# Application command and option type codes
CHAT_INPUT = 1
OPTION_STRING = 3
OPTION_INTEGER = 4


def collect_command() -> Dict[str, Any]:
    """Definition of /collect."""
    return {
        'name': 'collect',
        'type': CHAT_INPUT,
        'description': 'Collect articles from various sources',
        'options': [
            {
                'type': OPTION_STRING,
                'name': 'source',
                'description': 'Source to collect from (arxiv, all)',
                'required': True,
                'choices': [
                    {'name': 'Arxiv', 'value': 'arxiv'},
                    {'name': 'All Sources', 'value': 'all'},
                ],
            },
            {
                'type': OPTION_STRING,
                'name': 'query',
                'description': 'Search query',
                'required': False,
            },
            {
                'type': OPTION_INTEGER,
                'name': 'max_results',
                'description': f'Maximum number of results ({MIN_RESULTS}-{MAX_RESULTS})',
                'required': False,
                'min_value': MIN_RESULTS,
                'max_value': MAX_RESULTS,
            },
        ],
    }


def sources_command() -> Dict[str, Any]:
    """Definition of /sources."""
    return {
        'name': 'sources',
        'type': CHAT_INPUT,
        'description': 'List all available article sources',
    }


def schedule_command() -> Dict[str, Any]:
    """Definition of /schedule."""
    return {
        'name': 'schedule',
        'type': CHAT_INPUT,
        'description': 'Show the current collection schedule',
    }


def all_commands() -> List[Dict[str, Any]]:
    return [collect_command(), sources_command(), schedule_command()]
