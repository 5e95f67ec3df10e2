#!/usr/bin/env python3
"""
Standardized exception hierarchy for the article collector bot.

Provides specific exception types for collection, lookup, configuration
and delivery failures, each carrying structured error context.
"""

from typing import Optional, Dict, Any, List


class CollectorBotError(Exception):
    """Base exception for all article collector errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Collection-related exceptions
class CollectionError(CollectorBotError):
    """A collector failed to produce articles."""

    def __init__(self, source_name: str, cause: str):
        context = {
            'source_name': source_name,
            'cause': cause
        }
        super().__init__(cause, context=context)
        self.source_name = source_name
        self.cause = cause


class TransportError(CollectionError):
    """Network or HTTP failure while reaching a source."""

    def __init__(self, source_name: str, url: str, original_error: Any):
        super().__init__(source_name, f"Failed to reach {source_name} at {url}: {original_error}")
        self.context['url'] = url
        self.context['original_error'] = str(original_error)


class DecodeError(CollectionError):
    """Upstream payload could not be decoded."""

    def __init__(self, source_name: str, parse_stage: str, original_error: Any):
        super().__init__(source_name, f"Failed to parse {parse_stage} from {source_name}: {original_error}")
        self.context['parse_stage'] = parse_stage
        self.context['original_error'] = str(original_error)


class UnknownSourceError(CollectorBotError):
    """Requested source is not registered."""

    def __init__(self, source_name: str, available: Optional[List[str]] = None):
        message = f"Unknown source: {source_name}"
        context = {
            'source_name': source_name,
            'available': list(available or [])
        }
        super().__init__(message, context=context)
        self.source_name = source_name


# Configuration-related exceptions
class ConfigurationError(CollectorBotError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)


class DuplicateSourceError(ConfigurationError):
    """Two collectors share a case-insensitive name."""

    def __init__(self, source_name: str):
        super().__init__('collectors', f"duplicate collector name '{source_name}'")
        self.source_name = source_name


# Delivery-related exceptions
class DeliveryError(CollectorBotError):
    """Posting to the chat platform failed."""

    def __init__(self, channel_id: Optional[str], operation: str, cause: Any):
        target = f"channel {channel_id}" if channel_id else "chat platform"
        message = f"{operation} failed for {target}: {cause}"
        context = {
            'channel_id': channel_id,
            'operation': operation,
            'cause': str(cause)
        }
        super().__init__(message, context=context)


# Scheduling-related exceptions
class ScheduleError(CollectorBotError):
    """Cron expression is invalid or never fires."""

    def __init__(self, expression: str, issue: str):
        message = f"Invalid schedule '{expression}': {issue}"
        context = {
            'expression': expression,
            'issue': issue
        }
        super().__init__(message, context=context)
