"""Fluent rendering of SPARQL update and query text.

Builders know nothing about the meaning of the patterns they hold; a malformed
pattern only surfaces when the store rejects the rendered text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, overload

from rdflib import BNode, Literal
from rdflib.term import Node

if TYPE_CHECKING:
    from collections.abc import Iterable

    from triplesync.domain.statements import Statement

# Plain strings are emitted verbatim (variables, prefixed names, ``<iri>``);
# rdflib terms are rendered through ``n3()``.
type TermLike = str | Node

_INDENT = "  "


def render_term(term: TermLike) -> str:
    # rdflib identifiers subclass str, so the Node check has to come first
    if isinstance(term, Node):
        return term.n3()
    if isinstance(term, str):
        if not term:
            raise ValueError("Empty term")
        return term
    raise TypeError(f"Cannot render {type(term).__name__} as a SPARQL term")


def _render_value(term: Node) -> str:
    if isinstance(term, BNode):
        raise ValueError(f"Blank node {term.n3()} cannot be bound in a VALUES block")
    return term.n3()


def _check_variable(name: str) -> str:
    if not name.startswith(("?", "$")) or len(name) < 2:
        raise ValueError(f"{name!r} is not a SPARQL variable")
    return name


def starts_with(variable: str, prefix: str) -> str:
    """Render a filter keeping bindings whose string form begins with ``prefix``."""

    return f"FILTER( STRSTARTS(STR({_check_variable(variable)}), {Literal(prefix).n3()}) ) ."


def _triple(subject: TermLike, predicate: TermLike, obj: TermLike) -> str:
    return f"{render_term(subject)} {render_term(predicate)} {render_term(obj)} ."


@dataclass(slots=True)
class _Values:
    variables: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    def render(self, depth: int) -> list[str]:
        pad = _INDENT * depth
        lines = [f"{pad}VALUES ( {' '.join(self.variables)} ) {{"]
        lines.extend(f"{pad}{_INDENT}( {' '.join(row)} )" for row in self.rows)
        lines.append(f"{pad}}}")
        return lines


@dataclass(slots=True)
class GraphPattern:
    """A group of patterns; negated groups render as ``FILTER NOT EXISTS``."""

    negated: bool = False
    _parts: list[str | _Values | GraphPattern] = field(default_factory=list)

    @overload
    def add(self, raw: str, /) -> GraphPattern: ...

    @overload
    def add(self, subject: TermLike, predicate: TermLike, obj: TermLike, /) -> GraphPattern: ...

    def add(self, *terms: TermLike) -> GraphPattern:
        if len(terms) == 1 and isinstance(terms[0], str) and not isinstance(terms[0], Node):
            self._parts.append(terms[0])
        elif len(terms) == 3:  # noqa: PLR2004
            self._parts.append(_triple(*terms))
        else:
            raise TypeError("add() takes either raw pattern text or a subject, predicate, object")
        return self

    def values(
        self,
        statements: Iterable[Statement],
        subject_var: str,
        predicate_var: str,
        object_var: str,
    ) -> GraphPattern:
        """Bind the three variables to the rows of ``statements``."""

        variables = tuple(_check_variable(v) for v in (subject_var, predicate_var, object_var))
        rows = tuple(tuple(_render_value(term) for term in statement) for statement in statements)
        if not rows:
            raise ValueError("values() needs at least one statement")
        self._parts.append(_Values(variables=variables, rows=rows))
        return self

    def not_exists(self) -> GraphPattern:
        nested = GraphPattern(negated=True)
        self._parts.append(nested)
        return nested

    def __bool__(self) -> bool:
        return bool(self._parts)

    def render_body(self, depth: int) -> list[str]:
        pad = _INDENT * depth
        lines: list[str] = []
        for part in self._parts:
            if isinstance(part, GraphPattern):
                lines.extend(part.render(depth))
            elif isinstance(part, _Values):
                lines.extend(part.render(depth))
            else:
                lines.append(f"{pad}{part}")
        return lines

    def render(self, depth: int) -> list[str]:
        pad = _INDENT * depth
        opener = "FILTER NOT EXISTS {" if self.negated else "{"
        return [f"{pad}{opener}", *self.render_body(depth + 1), f"{pad}}}"]


class UpdateBuilder:
    """Accumulates prefixes and DELETE/INSERT/WHERE parts of a single operation."""

    def __init__(self) -> None:
        self._prefixes: dict[str, str] = {}
        self._deletes: list[str] = []
        self._inserts: list[str] = []
        self._where = GraphPattern()

    def prefix(self, name: str, namespace: str) -> UpdateBuilder:
        self._prefixes[name] = namespace
        return self

    def delete(self, subject: TermLike, predicate: TermLike, obj: TermLike) -> UpdateBuilder:
        self._deletes.append(_triple(subject, predicate, obj))
        return self

    def insert(self, subject: TermLike, predicate: TermLike, obj: TermLike) -> UpdateBuilder:
        self._inserts.append(_triple(subject, predicate, obj))
        return self

    @overload
    def where(self, raw: str, /) -> UpdateBuilder: ...

    @overload
    def where(self, subject: TermLike, predicate: TermLike, obj: TermLike, /) -> UpdateBuilder: ...

    def where(self, *terms: TermLike) -> UpdateBuilder:
        self._where.add(*terms)
        return self

    def where_not_exists(self) -> GraphPattern:
        """Append a negated group to the WHERE clause and return it for filling."""

        return self._where.not_exists()

    def render(self) -> str:
        if not self._deletes and not self._inserts:
            raise ValueError("Update has neither DELETE nor INSERT templates")

        lines = [f"PREFIX {name}: <{namespace}>" for name, namespace in self._prefixes.items()]
        if self._deletes:
            lines.append("DELETE {")
            lines.extend(f"{_INDENT}{triple}" for triple in self._deletes)
            lines.append("}")
        if self._inserts:
            lines.append("INSERT {")
            lines.extend(f"{_INDENT}{triple}" for triple in self._inserts)
            lines.append("}")
        if self._where:
            lines.append("WHERE {")
            lines.extend(self._where.render_body(1))
            lines.append("}")
        else:
            lines.append("WHERE {}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


def render_prefixes(prefixes: dict[str, str]) -> str:
    return "".join(f"PREFIX {name}: <{namespace}>\n" for name, namespace in prefixes.items())


__all__ = [
    "GraphPattern",
    "TermLike",
    "UpdateBuilder",
    "render_prefixes",
    "render_term",
    "starts_with",
]
