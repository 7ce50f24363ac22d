"""Keeps the triple store's copy of an entity in step with its authoritative statements."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from rdflib import Literal

from triplesync.domain.statements import unique_statements
from triplesync.domain.uris import UriScheme, entity_term

from .builder import UpdateBuilder, render_prefixes, starts_with
from .client import OperationKind, SparqlClient
from .errors import ResponseDecodeError
from .responses import ASK_QUERY, TUPLE_QUERY, UPDATE_COUNT

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from triplesync.config.repository import RepositoryConfig
    from triplesync.domain.statements import Statement

    from .binary_results import TupleQueryResult

log = getLogger(__name__)


class RdfRepository:
    """SPARQL-backed view of the entities held in a triple store.

    The statements managed for an entity form a tree rooted at the entity. The
    tree ends where the next entity's tree starts: Q23 owns the qualifiers and
    references on its own statements but not the statements about Q191789 even
    though its spouse property points there.
    """

    def __init__(self, client: SparqlClient, uris: UriScheme | None = None) -> None:
        self.client = client
        self.uris = uris or UriScheme()

    @classmethod
    def from_config(cls, config: RepositoryConfig) -> RdfRepository:
        return cls(SparqlClient(config.endpoint, pool=config.pool), config.uris)

    def close(self) -> None:
        self.client.close()

    def sync(self, entity_id: str, statements: Iterable[Statement]) -> int:
        """Make the store hold exactly ``statements`` for the entity's managed tree.

        Returns the number of triples the store reports as added or removed.
        """

        desired = unique_statements(statements)
        start = time.monotonic()
        modified = self.client.execute(
            OperationKind.UPDATE, UPDATE_COUNT, self.sync_update(entity_id, desired)
        )
        log.debug(
            "Updating %s took %d millis and modified %s statements",
            entity_id,
            (time.monotonic() - start) * 1000,
            modified,
        )
        return modified

    def sync_update(self, entity_id: str, statements: Sequence[Statement]) -> str:
        """Render the multi-operation update used by :meth:`sync`."""

        entity = entity_term(entity_id)
        operations = [
            self._site_links_delete(entity, statements),
            self._references_delete(entity, statements),
            self._expanded_statements_delete(entity, statements),
            self._direct_facts_delete(entity, statements),
        ]
        if statements:
            insert = self._update_builder()
            for statement in statements:
                insert.insert(*statement)
            operations.append(insert)

        # Leaves first: clearing the trunk first would orphan the leaves, since
        # the patterns that find them start at the entity.
        return "".join(f"{operation};\n" for operation in operations)

    def has_revision(self, entity_id: str, revision: int) -> bool:
        """Does the triple store have this revision or better."""

        if isinstance(revision, bool) or not isinstance(revision, int):
            raise TypeError(f"Revision must be an int, got {type(revision).__name__}")
        prefixes = render_prefixes({"schema": self.uris.schema, "entity": self.uris.entity})
        return self.ask(
            f"{prefixes}ASK {{\n"
            f"  {entity_term(entity_id)} {self.uris.version} ?v .\n"
            f"  FILTER (?v >= {revision})\n"
            "}"
        )

    def fetch_last_update(self) -> datetime | None:
        """Latest modification time recorded for any subject, or ``None``."""

        prefixes = render_prefixes({"schema": self.uris.schema})
        result = self.query(
            f"{prefixes}SELECT (MAX(?lastUpdate) as ?maxLastUpdate)\n"
            f"WHERE {{ ?s {self.uris.date_modified} ?lastUpdate . }}"
        )
        if not result:
            return None
        value = result[0].get("maxLastUpdate")
        if value is None:
            return None
        converted = value.toPython() if isinstance(value, Literal) else value
        if not isinstance(converted, datetime):
            raise ResponseDecodeError(f"Expected a dateTime for maxLastUpdate, got {value!r}")
        if converted.tzinfo is None:
            converted = converted.replace(tzinfo=UTC)
        return converted.astimezone(UTC)

    def ask(self, sparql: str) -> bool:
        """Execute a SPARQL ask and parse the boolean result."""

        return self.client.execute(OperationKind.QUERY, ASK_QUERY, sparql)

    def query(self, sparql: str) -> TupleQueryResult:
        """Execute some SPARQL which returns a results table."""

        return self.client.execute(OperationKind.QUERY, TUPLE_QUERY, sparql)

    def _update_builder(self) -> UpdateBuilder:
        return UpdateBuilder().prefix("entity", self.uris.entity).prefix("schema", self.uris.schema)

    def _exclude_desired(self, builder: UpdateBuilder, statements: Sequence[Statement]) -> None:
        if statements:
            builder.where_not_exists().values(statements, "?s", "?p", "?o")

    def _site_links_delete(self, entity: str, statements: Sequence[Statement]) -> UpdateBuilder:
        builder = self._update_builder()
        builder.delete("?s", "?p", "?o")
        builder.where("?s", self.uris.about, entity)
        builder.where("?s", "?p", "?o")
        self._exclude_desired(builder, statements)
        return builder

    def _references_delete(self, entity: str, statements: Sequence[Statement]) -> UpdateBuilder:
        builder = self._update_builder().prefix("prov", self.uris.provenance)
        builder.delete("?s", "?p", "?o")
        builder.where(entity, "?statementPred", "?statement")
        builder.where(starts_with("?statement", self.uris.statement))
        builder.where("?statement", self.uris.derived_from, "?s")
        builder.where("?s", "?p", "?o")
        # References still used by another entity's statements stay
        (
            builder.where_not_exists()
            .add("?otherStatement", self.uris.derived_from, "?s")
            .add("?otherEntity", "?otherStatementPred", "?otherStatement")
            .add(f"FILTER ( {entity} != ?otherEntity ) .")
        )
        self._exclude_desired(builder, statements)
        return builder

    def _expanded_statements_delete(
        self, entity: str, statements: Sequence[Statement]
    ) -> UpdateBuilder:
        builder = self._update_builder()
        builder.delete("?s", "?p", "?o")
        builder.where(entity, "?statementPred", "?s")
        builder.where(starts_with("?s", self.uris.statement))
        builder.where("?s", "?p", "?o")
        self._exclude_desired(builder, statements)
        return builder

    def _direct_facts_delete(self, entity: str, statements: Sequence[Statement]) -> UpdateBuilder:
        builder = self._update_builder()
        builder.delete(entity, "?p", "?o")
        builder.where(entity, "?p", "?o")
        # ?s stays unbound here, so a desired triple with any subject that shares
        # ?p and ?o keeps the entity's triple.
        self._exclude_desired(builder, statements)
        return builder


__all__ = ["RdfRepository"]
