import asyncio
import logging

import pytest
from aiohttp import web
from aiohttp import test_utils

from core.collectors.arxiv import ArxivCollector, encode_query
from core.exceptions import CollectionError, DecodeError, TransportError

ATOM_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title type="html">ArXiv Query: search_query=cat:cs.AI</title>
  <id>http://arxiv.org/api/query</id>
  <entry>
    <id>http://arxiv.org/abs/2401.00001v1</id>
    <published>2024-01-01T18:59:59Z</published>
    <title>Attention Is
      Still   All You Need</title>
    <summary>  We revisit the transformer.
  Results are
  promising.  </summary>
    <author><name>Ada Lovelace</name></author>
    <author><name>Alan Turing</name></author>
    <author><name>Grace Hopper</name></author>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2401.00002v2</id>
    <published>2024-01-02T09:00:00Z</published>
    <title>Über Lernen</title>
    <summary>Ein kurzer Überblick.</summary>
    <author><name>Zoë Müller</name></author>
  </entry>
</feed>
""".encode("utf-8")

EMPTY_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title type="html">ArXiv Query: search_query=nothing</title>
  <id>http://arxiv.org/api/query</id>
</feed>
"""


@pytest.mark.parametrize("query,expected", [
    ("cat:cs.AI", "cat%3Acs.AI"),
    ("a b", "a%20b"),
    ("all:deep learning AND cat:cs.LG", "all%3Adeep%20learning%20AND%20cat%3Acs.LG"),
    ("safe-_.~", "safe-_.~"),
    ("ti:\"x\"/y&z=1", "ti%3A%22x%22%2Fy%26z%3D1"),
    ("é", "%C3%A9"),
])
def test_encode_query(query, expected):
    assert encode_query(query) == expected


def test_build_query_url():
    collector = ArxivCollector({"api_url": "http://example.test/api/query"})

    url = collector.build_query_url("cat:cs.AI", 10)

    assert url == "http://example.test/api/query?search_query=cat%3Acs.AI&start=0&max_results=10"


def test_parse_feed_maps_entries():
    articles = ArxivCollector().parse_feed(ATOM_FEED)

    assert len(articles) == 2
    first = articles[0]
    assert first.title == "Attention Is Still All You Need"
    assert first.authors == ("Ada Lovelace", "Alan Turing", "Grace Hopper")
    assert first.url == "http://arxiv.org/abs/2401.00001v1"
    assert first.published_date == "2024-01-01T18:59:59Z"
    assert first.summary == "We revisit the transformer. Results are promising."
    assert first.source == "Arxiv"

    second = articles[1]
    assert second.title == "Über Lernen"
    assert second.authors == ("Zoë Müller",)


def test_parse_feed_without_entries_is_empty():
    assert ArxivCollector().parse_feed(EMPTY_FEED) == []


@pytest.mark.parametrize("payload", [
    b"this is not xml at all",
    b"<html><body><p>Rate limit exceeded</body>",
])
def test_parse_feed_malformed_raises_decode_error(payload, caplog):
    caplog.set_level(logging.ERROR, logger="core.collectors.arxiv")

    with pytest.raises(DecodeError) as exc_info:
        ArxivCollector().parse_feed(payload)

    assert isinstance(exc_info.value, CollectionError)
    assert exc_info.value.source_name == "Arxiv"
    assert "Failed to parse Arxiv XML" in caplog.text


TRUNCATED_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>ArXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/2401.00001v1</id>
    <published>2024-01-01T18:59:59Z</published>
    <title>Complete Entry</title>
    <summary>Fully formed.</summary>
    <author><name>Ada Lovelace</name></author>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2401.00002v1</id>
    <title>Cut Off</title>
    <summary>broken &amp; <b>unclosed"""


def test_parse_feed_truncated_document_raises_decode_error(caplog):
    caplog.set_level(logging.ERROR, logger="core.collectors.arxiv")

    with pytest.raises(DecodeError):
        ArxivCollector().parse_feed(TRUNCATED_FEED)

    assert "Failed to parse Arxiv XML" in caplog.text


def _run_against_server(handler, query="cat:cs.AI", max_results=3, timeout=5):
    async def scenario():
        app = web.Application()
        app.router.add_get("/api/query", handler)
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            collector = ArxivCollector({
                "api_url": str(server.make_url("/api/query")),
                "timeout": timeout,
            })
            return await collector.collect(query, max_results)
        finally:
            await server.close()

    return asyncio.run(scenario())


def test_collect_sends_encoded_query_and_parses_response():
    seen = {}

    async def handler(request):
        seen["raw_path"] = request.raw_path
        seen["user_agent"] = request.headers.get("User-Agent")
        return web.Response(body=ATOM_FEED, content_type="application/atom+xml")

    articles = _run_against_server(handler, query="all:graph neural", max_results=3)

    assert seen["raw_path"] == "/api/query?search_query=all%3Agraph%20neural&start=0&max_results=3"
    assert "ArticleCollectorBot" in seen["user_agent"]
    assert [article.url for article in articles] == [
        "http://arxiv.org/abs/2401.00001v1",
        "http://arxiv.org/abs/2401.00002v2",
    ]


def test_collect_empty_feed_returns_no_articles():
    async def handler(request):
        return web.Response(body=EMPTY_FEED, content_type="application/atom+xml")

    assert _run_against_server(handler) == []


def test_collect_http_error_raises_transport_error():
    async def handler(request):
        return web.Response(status=503, text="Service Unavailable")

    with pytest.raises(TransportError) as exc_info:
        _run_against_server(handler)

    assert "HTTP 503" in str(exc_info.value)
    assert exc_info.value.source_name == "Arxiv"


def test_collect_timeout_raises_transport_error():
    async def handler(request):
        await asyncio.sleep(2)
        return web.Response(body=ATOM_FEED)

    with pytest.raises(TransportError) as exc_info:
        _run_against_server(handler, timeout=0.2)

    assert "timed out" in str(exc_info.value)


def test_collect_unreachable_host_raises_transport_error():
    collector = ArxivCollector({"api_url": "http://127.0.0.1:9/api/query", "timeout": 2})

    with pytest.raises(TransportError):
        asyncio.run(collector.collect("cat:cs.AI", 1))
