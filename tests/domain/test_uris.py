from __future__ import annotations

import pytest

from triplesync.domain import UriScheme, entity_term, validate_entity_id


def test_default_scheme_points_at_wikidata() -> None:
    uris = UriScheme()

    assert uris.entity == "http://www.wikidata.org/entity/"
    assert uris.statement == "http://www.wikidata.org/entity/statement/"
    assert uris.statement.startswith(uris.entity)


def test_scheme_for_other_host() -> None:
    uris = UriScheme.for_host(" wiki.example.org/ ")

    assert uris.entity == "http://wiki.example.org/entity/"
    assert uris.statement.startswith(uris.entity)
    assert uris.schema == "http://schema.org/"


def test_scheme_for_blank_host() -> None:
    with pytest.raises(ValueError, match="blank"):
        UriScheme.for_host("  ")


@pytest.mark.parametrize("entity_id", ["Q42", "P31", "L1-F2", "Property:P5", "Q1.2", "_x"])
def test_valid_entity_ids(entity_id: str) -> None:
    assert validate_entity_id(entity_id) == entity_id
    assert entity_term(entity_id) == f"entity:{entity_id}"


@pytest.mark.parametrize(
    "entity_id",
    [
        "",
        "Q 42",
        "Q42>",
        "Q42;",
        "Q{1}",
        "Q42\n",
        "Q1.",
        "Q1/x",
        "Q1?",
        "Q1@en",
        "Q%zz",
        "Q~1",
        "Q!",
        "a=b",
        "-Q1",
        ".Q1",
    ],
)
def test_invalid_entity_ids(entity_id: str) -> None:
    with pytest.raises(ValueError, match="Entity id"):
        entity_term(entity_id)
