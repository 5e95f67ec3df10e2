#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration:
environment variables (plus an optional .env file) layered over an
optional config.toml, layered over defaults.
"""

import os
import logging
import tomllib
from datetime import datetime
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path

from core.env_loader import load_env_file, PROJECT_ROOT
from core.exceptions import ConfigurationError, ScheduleError

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "cat:cs.AI"
DEFAULT_MAX_RESULTS = 10
DEFAULT_SCHEDULE = "0 0 9 * * *"
MIN_RESULTS = 1
MAX_RESULTS = 20

_TRUE_VALUES = {'1', 'true', 'yes', 'y', 'on'}


@dataclass
class DiscordConfig:
    """Chat platform connection configuration."""
    token: Optional[str] = None
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    api_base_url: str = "https://discord.com/api/v10"
    request_timeout: int = 10

    # Inbound interactions endpoint
    public_key: Optional[str] = None
    interactions_host: str = "0.0.0.0"
    interactions_port: int = 8080


@dataclass
class CollectionConfig:
    """Defaults for command and scheduled collections."""
    default_query: str = DEFAULT_QUERY
    default_max_results: int = DEFAULT_MAX_RESULTS
    schedule: str = DEFAULT_SCHEDULE
    timezone: str = "UTC"


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    # Source settings
    arxiv_api_url: str = "http://export.arxiv.org/api/query"
    feed_timeout: int = 30
    user_agent: str = "Mozilla/5.0 (compatible; ArticleCollectorBot/1.0)"

    # Aggregation settings
    parallel_fanout: bool = False
    max_concurrent_sources: int = 5

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    discord: DiscordConfig
    collection: CollectionConfig
    app: ApplicationConfig

    environment: str = field(default_factory=lambda: os.getenv('ENVIRONMENT', 'development'))

    def has_discord(self) -> bool:
        """Check if the chat platform token is available."""
        return bool(self.discord.token)

    def has_channel(self) -> bool:
        """Check if a periodic destination channel is configured."""
        return bool(self.discord.channel_id)

    def require_discord_token(self) -> str:
        """Return the bot token or fail the way bootstrap does."""
        if not self.discord.token:
            raise ConfigurationError('DISCORD_TOKEN', 'must be set in environment')
        return self.discord.token

    def require_public_key(self) -> str:
        """Return the application public key needed to verify interactions."""
        if not self.discord.public_key:
            raise ConfigurationError('DISCORD_PUBLIC_KEY', 'must be set to serve interactions')
        return self.discord.public_key


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env", toml_file_path: str = "config.toml",
                 base_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
            toml_file_path: Path to optional config.toml relative to project root
            base_dir: Override for the project root
        """
        self._config: Optional[Config] = None
        self._base_dir = base_dir or PROJECT_ROOT
        self._toml_values: Dict[str, Any] = {}
        load_env_file(env_file_path, self._base_dir)
        self._load_toml_file(self._base_dir / toml_file_path)

    def _load_toml_file(self, toml_path: Path) -> None:
        """Load optional config.toml values."""
        if not toml_path.exists():
            logger.debug(f"No config.toml found at {toml_path}")
            return

        try:
            with open(toml_path, 'rb') as f:
                self._toml_values = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError('config.toml', f"failed to parse {toml_path}: {e}") from e

        logger.info(f"Loaded {len(self._toml_values)} settings from {toml_path}")

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _get(self, env_key: str, toml_key: Optional[str], default: Any) -> Any:
        """Resolve a setting: environment first, then config.toml, then default."""
        value = os.getenv(env_key)
        if value is not None and value.strip() != '':
            return value.strip()
        if toml_key and toml_key in self._toml_values:
            return self._toml_values[toml_key]
        return default

    def _get_optional_str(self, env_key: str, toml_key: Optional[str] = None) -> Optional[str]:
        value = self._get(env_key, toml_key, None)
        return str(value) if value is not None else None

    def _get_int(self, env_key: str, toml_key: Optional[str], default: int) -> int:
        value = self._get(env_key, toml_key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(env_key, f"expected an integer, got '{value}'")

    def _get_bool(self, env_key: str, default: bool) -> bool:
        value = self._get(env_key, None, None)
        if value is None:
            return default
        return str(value).lower() in _TRUE_VALUES

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""

        discord_config = DiscordConfig(
            token=self._get_optional_str('DISCORD_TOKEN', 'discord_token'),
            guild_id=self._get_optional_str('GUILD_ID', 'guild_id'),
            channel_id=self._get_optional_str('CHANNEL_ID', 'channel_id'),
            api_base_url=str(self._get('DISCORD_API_URL', None, 'https://discord.com/api/v10')).rstrip('/'),
            request_timeout=self._get_int('DISCORD_TIMEOUT', None, 10),
            public_key=self._get_optional_str('DISCORD_PUBLIC_KEY', 'discord_public_key'),
            interactions_host=str(self._get('INTERACTIONS_HOST', 'interactions_host', '0.0.0.0')),
            interactions_port=self._get_int('INTERACTIONS_PORT', 'interactions_port', 8080)
        )

        collection_config = CollectionConfig(
            default_query=str(self._get('ARXIV_SEARCH_QUERY', 'arxiv_search_query', DEFAULT_QUERY)),
            default_max_results=self._get_int('ARXIV_MAX_RESULTS', 'arxiv_max_results', DEFAULT_MAX_RESULTS),
            schedule=str(self._get('COLLECTION_SCHEDULE', 'collection_schedule', DEFAULT_SCHEDULE)),
            timezone=str(self._get('COLLECTION_TIMEZONE', 'collection_timezone', 'UTC'))
        )

        app_config = ApplicationConfig(
            arxiv_api_url=str(self._get('ARXIV_API_URL', 'arxiv_api_url', 'http://export.arxiv.org/api/query')),
            feed_timeout=self._get_int('FEED_TIMEOUT', 'feed_timeout', 30),
            user_agent=str(self._get('FEED_USER_AGENT', None, 'Mozilla/5.0 (compatible; ArticleCollectorBot/1.0)')),
            parallel_fanout=self._get_bool('PARALLEL_FANOUT', False),
            max_concurrent_sources=self._get_int('MAX_CONCURRENT_SOURCES', None, 5),
            log_level=str(self._get('LOG_LEVEL', 'log_level', 'INFO')).upper(),
            verbose_logging=self._get_bool('VERBOSE_LOGGING', False)
        )

        config = Config(
            discord=discord_config,
            collection=collection_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        from core.scheduling.cron import CronSchedule

        errors = []

        if not MIN_RESULTS <= config.collection.default_max_results <= MAX_RESULTS:
            errors.append(f"ARXIV_MAX_RESULTS must be between {MIN_RESULTS} and {MAX_RESULTS}")

        if not config.collection.default_query.strip():
            errors.append("ARXIV_SEARCH_QUERY must not be empty")

        try:
            schedule = CronSchedule.parse(config.collection.schedule, config.collection.timezone)
            schedule.next_after(datetime.now(schedule.tz))
        except ScheduleError as e:
            errors.append(f"COLLECTION_SCHEDULE/COLLECTION_TIMEZONE invalid: {e.message}")

        if not config.app.arxiv_api_url.startswith(('http://', 'https://')):
            errors.append("ARXIV_API_URL must start with http:// or https://")

        if not 1 <= config.discord.interactions_port <= 65535:
            errors.append("INTERACTIONS_PORT must be between 1 and 65535")

        if config.app.feed_timeout < 1:
            errors.append("FEED_TIMEOUT must be at least 1 second")

        if config.app.max_concurrent_sources < 1 or config.app.max_concurrent_sources > 20:
            errors.append("MAX_CONCURRENT_SOURCES must be between 1 and 20")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.info("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')
            handler.setFormatter(formatter)

    def get_integration_status(self) -> Dict[str, bool]:
        """Get status of all integrations."""
        config = self.get_config()
        return {
            'discord_token': config.has_discord(),
            'guild_id': bool(config.discord.guild_id),
            'channel_id': config.has_channel(),
            'public_key': bool(config.discord.public_key),
        }


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
