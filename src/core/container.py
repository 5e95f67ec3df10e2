#!/usr/bin/env python3
"""
Dependency Injection Container

Wires the configuration, collector registry, aggregator and chat clients
together so that the command dispatcher and the periodic collector share
the same instances, and the interactions endpoint reuses the dispatcher.
"""

import logging
from typing import Any, Callable, Dict, Optional, Set, TypeVar
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._singleton_names: Set[str] = set()
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.add(service_name)
            # Remove any existing instance to force recreation
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as factory (new instance each time).

        Args:
            service_name: Unique name for the service
            factory: Function that creates service instances
        """
        with self._lock:
            self._factories[service_name] = factory
            self._singleton_names.discard(service_name)
            self._singletons.pop(service_name, None)

    def register_instance(self, service_name: str, instance: T) -> None:
        """
        Register an existing instance as singleton.

        Args:
            service_name: Unique name for the service
            instance: Pre-created service instance
        """
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        with self._lock:
            if service_name in self._singletons:
                return self._singletons[service_name]

            if service_name not in self._factories:
                raise KeyError(f"Service '{service_name}' not registered")

            instance = self._factories[service_name]()
            if service_name in self._singleton_names:
                self._singletons[service_name] = instance
                logger.debug(f"Created singleton instance for '{service_name}'")
            else:
                logger.debug(f"Created new instance for '{service_name}'")
            return instance

    def has(self, service_name: str) -> bool:
        """Check if service is registered."""
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        """Clear all registered services and instances."""
        with self._lock:
            self._factories.clear()
            self._singleton_names.clear()
            self._singletons.clear()


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                container = Container()
                setup_default_services(container)
                _container = container
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def setup_default_services(container: Container, config=None) -> None:
    """
    Register the default services.

    Args:
        container: Container to populate
        config: Optional pre-built Config (loaded from the environment otherwise)
    """

    def create_config():
        if config is not None:
            return config
        from core.config import get_config
        return get_config()

    def create_registry():
        from core.collectors.auto_register import build_default_registry
        return build_default_registry(container.get('config'))

    def create_aggregator():
        from core.aggregator import Aggregator
        app = container.get('config').app
        return Aggregator(
            container.get('registry'),
            parallel=app.parallel_fanout,
            max_concurrent=app.max_concurrent_sources
        )

    def create_dispatcher():
        from core.dispatcher import CommandDispatcher
        return CommandDispatcher(
            container.get('aggregator'),
            container.get('registry'),
            container.get('config')
        )

    def create_discord_client():
        from integrations.discord_client import DiscordClient
        cfg = container.get('config')
        return DiscordClient(
            token=cfg.require_discord_token(),
            channel_id=cfg.discord.channel_id,
            api_base_url=cfg.discord.api_base_url,
            timeout=cfg.discord.request_timeout
        )

    def create_interaction_server():
        from integrations.interactions_server import InteractionServer
        cfg = container.get('config')
        return InteractionServer(
            dispatcher=container.get('dispatcher'),
            public_key=cfg.require_public_key(),
            discord_client=container.get('discord_client')
        )

    def create_periodic_collector():
        from core.scheduling import CronSchedule, PeriodicCollector
        cfg = container.get('config')
        return PeriodicCollector(
            aggregator=container.get('aggregator'),
            publisher=container.get('discord_client'),
            schedule=CronSchedule.parse(cfg.collection.schedule, cfg.collection.timezone),
            channel_id=cfg.discord.channel_id,
            default_query=cfg.collection.default_query,
            default_max_results=cfg.collection.default_max_results
        )

    container.register_singleton('config', create_config)
    container.register_singleton('registry', create_registry)
    container.register_singleton('aggregator', create_aggregator)
    container.register_singleton('dispatcher', create_dispatcher)
    container.register_singleton('discord_client', create_discord_client)
    container.register_singleton('interaction_server', create_interaction_server)

    # New instance per call
    container.register_factory('periodic_collector', create_periodic_collector)

    logger.debug("Default services registered in container")
