"""Namespaces that shape an entity's managed subgraph."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

WIKIDATA_HOST: Final[str] = "www.wikidata.org"
SCHEMA_NAMESPACE: Final[str] = "http://schema.org/"
PROVENANCE_NAMESPACE: Final[str] = "http://www.w3.org/ns/prov#"

# Ids are rendered as the local part of an ``entity:`` prefixed name: a subset of
# PN_LOCAL without escapes or percent-encoding, and never ending in a dot.
_ENTITY_ID: Final[re.Pattern[str]] = re.compile(
    r"[A-Za-z0-9_:](?:[A-Za-z0-9_.:-]*[A-Za-z0-9_:-])?"
)


@dataclass(frozen=True, slots=True)
class UriScheme:
    """URI layout of a Wikibase-style store.

    ``entity`` is the namespace the ``entity:`` prefix points at. ``statement`` is
    the namespace of expanded statement nodes; nodes are matched against it by a
    string-prefix test rather than through a fixed relation.
    """

    entity: str = f"http://{WIKIDATA_HOST}/entity/"
    statement: str = f"http://{WIKIDATA_HOST}/entity/statement/"
    schema: str = SCHEMA_NAMESPACE
    provenance: str = PROVENANCE_NAMESPACE
    about: str = "schema:about"
    derived_from: str = "prov:wasDerivedFrom"
    version: str = "schema:version"
    date_modified: str = "schema:dateModified"

    @classmethod
    def for_host(cls, host: str) -> UriScheme:
        host = host.strip().strip("/")
        if not host:
            raise ValueError("Wikibase host must not be blank")
        return cls(
            entity=f"http://{host}/entity/",
            statement=f"http://{host}/entity/statement/",
        )


def validate_entity_id(entity_id: str) -> str:
    """Return ``entity_id`` if it can be used as the local part of ``entity:``."""

    if not entity_id:
        raise ValueError("Entity id must not be empty")
    if _ENTITY_ID.fullmatch(entity_id) is None:
        raise ValueError(f"Entity id {entity_id!r} is not a valid SPARQL local name")
    return entity_id


def entity_term(entity_id: str) -> str:
    return f"entity:{validate_entity_id(entity_id)}"


__all__ = [
    "PROVENANCE_NAMESPACE",
    "SCHEMA_NAMESPACE",
    "WIKIDATA_HOST",
    "UriScheme",
    "entity_term",
    "validate_entity_id",
]
