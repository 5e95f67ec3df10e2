import asyncio

import pytest

from core.aggregator import Aggregator
from core.dispatcher import CommandDispatcher, CommandInvocation, clamp_max_results
from core.exceptions import TransportError


@pytest.fixture
def dispatcher_factory(registry_factory, config_factory):
    def _factory(*collectors, config=None):
        registry = registry_factory(*collectors)
        return CommandDispatcher(Aggregator(registry), registry, config or config_factory())

    return _factory


def dispatch(dispatcher, name, **options):
    return asyncio.run(dispatcher.dispatch(CommandInvocation(name, options)))


def test_invocation_from_interaction_payload():
    payload = {
        "type": 2,
        "data": {
            "name": "collect",
            "options": [
                {"name": "source", "type": 3, "value": "all"},
                {"name": "max_results", "type": 4, "value": 3},
            ],
        },
    }

    invocation = CommandInvocation.from_interaction(payload)

    assert invocation.command_name == "collect"
    assert invocation.options == {"source": "all", "max_results": 3}


def test_invocation_without_options():
    invocation = CommandInvocation.from_interaction({"data": {"name": "sources"}})

    assert invocation.command_name == "sources"
    assert invocation.options == {}


@pytest.mark.parametrize("value,expected", [
    (None, 10),
    (5, 5),
    (0, 1),
    (-3, 1),
    (21, 20),
    (500, 20),
    ("7", 7),
    ("lots", 10),
])
def test_clamp_max_results(value, expected):
    assert clamp_max_results(value, 10) == expected


def test_collect_defaults_to_arxiv_and_default_query(make_article, fake_collector_factory, dispatcher_factory):
    arxiv = fake_collector_factory("Arxiv", [make_article(1, source="Arxiv")])
    dispatcher = dispatcher_factory(arxiv)

    reply = dispatch(dispatcher, "collect")

    assert arxiv.calls == [{"query": "cat:cs.AI", "max_results": 10}]
    assert reply.startswith("📰 **Found 1 article(s) from arxiv:**")


def test_collect_passes_query_and_clamped_limit(fake_collector_factory, dispatcher_factory):
    arxiv = fake_collector_factory("Arxiv")
    dispatcher = dispatcher_factory(arxiv)

    dispatch(dispatcher, "collect", source="ARXIV", query="cat:cs.LG", max_results=99)

    assert arxiv.calls == [{"query": "cat:cs.LG", "max_results": 20}]


def test_collect_all_with_failure_still_replies(make_article, fake_collector_factory,
                                                failing_collector_factory, dispatcher_factory):
    dispatcher = dispatcher_factory(
        failing_collector_factory("Broken"),
        fake_collector_factory("Good", [make_article(i, source="Good") for i in range(1, 8)]),
    )

    reply = dispatch(dispatcher, "collect", source="all")

    assert "Found 7 article(s) from all:" in reply
    assert "_...and 2 more articles_" in reply


def test_collect_with_no_results(fake_collector_factory, dispatcher_factory):
    dispatcher = dispatcher_factory(fake_collector_factory("Arxiv"))

    assert dispatch(dispatcher, "collect", source="arxiv") == "No articles found from arxiv."


def test_collect_unknown_source(fake_collector_factory, dispatcher_factory):
    dispatcher = dispatcher_factory(fake_collector_factory("Arxiv"))

    assert dispatch(dispatcher, "collect", source="pubmed") == "❌ Unknown source: pubmed"


def test_collect_single_source_failure(failing_collector_factory, dispatcher_factory):
    error = TransportError("Arxiv", "http://export.arxiv.org/api/query", "HTTP 503")
    dispatcher = dispatcher_factory(failing_collector_factory("Arxiv", error))

    reply = dispatch(dispatcher, "collect", source="arxiv")

    assert reply.startswith("❌ Error: Failed to reach Arxiv")
    assert "HTTP 503" in reply


def test_sources_lists_registry(fake_collector_factory, dispatcher_factory):
    dispatcher = dispatcher_factory(
        fake_collector_factory("Arxiv", description="Collects academic papers from arXiv.org"),
        fake_collector_factory("Example Articles", description="Placeholder"),
    )

    reply = dispatch(dispatcher, "sources")

    assert reply.startswith("📚 **Available Sources:**")
    assert reply.index("**Arxiv**") < reply.index("**Example Articles**")


def test_schedule_shows_cron_and_next_runs(dispatcher_factory):
    reply = dispatch(dispatcher_factory(), "schedule")

    assert "Cron: `0 0 9 * * *`" in reply
    assert reply.count("  • ") == 3


def test_schedule_with_invalid_expression(dispatcher_factory, config_factory):
    dispatcher = dispatcher_factory(config=config_factory(schedule="not a cron"))

    assert dispatch(dispatcher, "schedule").startswith("❌ Error: Invalid schedule 'not a cron'")


def test_schedule_that_never_fires_replies_with_error(dispatcher_factory, config_factory):
    dispatcher = dispatcher_factory(config=config_factory(schedule="0 0 0 30 2 *"))

    assert dispatch(dispatcher, "schedule") == "❌ Error: Invalid schedule '0 0 0 30 2 *': no matching time found"


def test_unknown_command_has_no_reply(dispatcher_factory):
    assert dispatch(dispatcher_factory(), "dance") is None
