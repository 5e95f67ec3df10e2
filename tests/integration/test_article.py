import dataclasses

import pytest

from core.models.article import Article


def test_round_trip_preserves_every_field(make_article):
    """Serialize and deserialize back to an identical record."""
    article = make_article(
        3,
        title="Über große Sprachmodelle: 日本語のテスト",
        authors=("Zoë Ångström", "Alice", "Bob"),
        summary="Résumé with émoji 🚀 and\ttabs",
    )

    assert Article.from_dict(article.to_dict()) == article
    assert Article.from_json(article.to_json()) == article


def test_to_dict_lists_authors_in_order(make_article):
    article = make_article(authors=("Second", "First", "Third"))

    data = article.to_dict()

    assert data["authors"] == ["Second", "First", "Third"]
    assert set(data) == {"title", "authors", "url", "published_date", "summary", "source"}


def test_to_json_keeps_non_ascii_text():
    article = Article(title="Ελληνικά", source="Arxiv")

    assert "Ελληνικά" in article.to_json()


def test_from_dict_defaults_missing_fields():
    article = Article.from_dict({"title": "Only a title"})

    assert article.authors == ()
    assert article.url == ""
    assert article.published_date == ""
    assert article.summary == ""
    assert article.source == ""


def test_authors_are_stored_as_tuple():
    article = Article(title="T", authors=["A", "B"])

    assert article.authors == ("A", "B")
    assert isinstance(article.authors, tuple)


def test_article_is_immutable(make_article):
    article = make_article()

    with pytest.raises(dataclasses.FrozenInstanceError):
        article.title = "changed"


def test_single_author_string_is_not_split_into_letters():
    article = Article(title="T", authors="Ada Lovelace")

    assert article.authors == ("Ada Lovelace",)


def test_from_dict_accepts_single_author_string():
    article = Article.from_dict({"title": "T", "authors": "Ada Lovelace"})

    assert article.authors == ("Ada Lovelace",)
    assert article.to_dict()["authors"] == ["Ada Lovelace"]
