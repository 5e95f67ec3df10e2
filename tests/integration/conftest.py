import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

# Also add the project root to handle absolute imports
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.collectors.base import ArticleCollector  # noqa: E402
from core.collectors.registry import CollectorRegistry  # noqa: E402
from core.config import ApplicationConfig, CollectionConfig, Config, DiscordConfig  # noqa: E402
from core.exceptions import CollectionError  # noqa: E402
from core.models.article import Article  # noqa: E402

CONFIG_ENV_VARS = [
    "DISCORD_TOKEN", "GUILD_ID", "CHANNEL_ID", "DISCORD_API_URL", "DISCORD_TIMEOUT",
    "ARXIV_SEARCH_QUERY", "ARXIV_MAX_RESULTS", "ARXIV_API_URL", "COLLECTION_SCHEDULE",
    "COLLECTION_TIMEZONE", "FEED_TIMEOUT", "FEED_USER_AGENT", "PARALLEL_FANOUT",
    "MAX_CONCURRENT_SOURCES", "LOG_LEVEL", "VERBOSE_LOGGING", "DISCORD_PUBLIC_KEY", "INTERACTIONS_HOST",
    "INTERACTIONS_PORT",
]


class FakeCollector(ArticleCollector):
    def __init__(self, name: str, articles: Optional[Sequence[Article]] = None,
                 description: str = "Fake source") -> None:
        super().__init__()
        self._name = name
        self._description = description
        self.articles = list(articles or [])
        self.calls: List[Dict[str, Any]] = []

    def name(self) -> str:
        return self._name

    def description(self) -> str:
        return self._description

    async def collect(self, query: str, max_results: int) -> List[Article]:
        self.calls.append({"query": query, "max_results": max_results})
        return list(self.articles)


class FailingCollector(ArticleCollector):
    def __init__(self, name: str, error: Optional[Exception] = None) -> None:
        super().__init__()
        self._name = name
        self.error = error or CollectionError(name, "upstream unavailable")
        self.calls = 0

    def name(self) -> str:
        return self._name

    def description(self) -> str:
        return "Always fails"

    async def collect(self, query: str, max_results: int) -> List[Article]:
        self.calls += 1
        raise self.error


class FakePublisher:
    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.messages: List[Dict[str, Any]] = []

    def send_message(self, text: str, channel_id: Optional[str] = None) -> bool:
        self.messages.append({"text": text, "channel_id": channel_id})
        return self.succeed


@pytest.fixture
def make_article():
    def _factory(index: int = 1, source: str = "Fake", **overrides: Any) -> Article:
        values = {
            "title": f"Paper {index}",
            "authors": (f"Author {index}A", f"Author {index}B"),
            "url": f"http://arxiv.org/abs/2401.{index:05d}v1",
            "published_date": "2024-01-15T00:00:00Z",
            "summary": f"Summary of paper {index}.",
            "source": source,
        }
        values.update(overrides)
        return Article(**values)

    return _factory


@pytest.fixture
def registry_factory():
    def _factory(*collectors: ArticleCollector, freeze: bool = True) -> CollectorRegistry:
        registry = CollectorRegistry()
        for collector in collectors:
            registry.register(collector)
        if freeze:
            registry.freeze()
        return registry

    return _factory


@pytest.fixture
def config_factory():
    def _factory(channel_id: Optional[str] = None, token: Optional[str] = None,
                 schedule: str = "0 0 9 * * *", max_results: int = 10) -> Config:
        return Config(
            discord=DiscordConfig(token=token, channel_id=channel_id),
            collection=CollectionConfig(default_query="cat:cs.AI", default_max_results=max_results,
                                        schedule=schedule),
            app=ApplicationConfig(),
        )

    return _factory


@pytest.fixture
def fake_publisher():
    return FakePublisher()


@pytest.fixture
def publisher_factory():
    def _factory(succeed: bool = True) -> FakePublisher:
        return FakePublisher(succeed)

    return _factory


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def fake_collector_factory():
    def _factory(name: str, articles: Optional[Sequence[Article]] = None,
                 description: str = "Fake source") -> FakeCollector:
        return FakeCollector(name, articles, description)

    return _factory


@pytest.fixture
def failing_collector_factory():
    def _factory(name: str, error: Optional[Exception] = None) -> FailingCollector:
        return FailingCollector(name, error)

    return _factory
