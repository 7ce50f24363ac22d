"""Statement values supplied by callers as the desired state of an entity."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from rdflib import BNode, Literal, URIRef

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rdflib import Graph

type Resource = URIRef | BNode
type Term = URIRef | BNode | Literal


class Statement(NamedTuple):
    """A single ``(subject, predicate, object)`` fact."""

    subject: Resource
    predicate: URIRef
    object: Term

    @classmethod
    def of(cls, subject: str | Resource, predicate: str | URIRef, obj: object) -> Statement:
        """Build a statement, coercing plain strings to URIs and Python values to literals."""

        subject_term = subject if isinstance(subject, (URIRef, BNode)) else URIRef(subject)
        predicate_term = predicate if isinstance(predicate, URIRef) else URIRef(predicate)
        if isinstance(obj, (URIRef, BNode, Literal)):
            object_term: Term = obj
        else:
            object_term = Literal(obj)
        return cls(subject_term, predicate_term, object_term)


def unique_statements(statements: Iterable[Statement]) -> tuple[Statement, ...]:
    """Materialise ``statements`` once, keeping first-seen order and dropping repeats."""

    return tuple(dict.fromkeys(statements))


def statements_from_graph(graph: Graph) -> tuple[Statement, ...]:
    collected: list[Statement] = []
    for subject, predicate, obj in graph:
        if not isinstance(subject, (URIRef, BNode)) or not isinstance(predicate, URIRef):
            raise ValueError(f"Unsupported triple in graph: {subject!r} {predicate!r} {obj!r}")
        if not isinstance(obj, (URIRef, BNode, Literal)):
            raise ValueError(f"Unsupported object term: {obj!r}")
        collected.append(Statement(subject, predicate, obj))
    return unique_statements(collected)


__all__ = ["Resource", "Statement", "Term", "statements_from_graph", "unique_statements"]
