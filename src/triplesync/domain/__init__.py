"""Domain types for entity synchronisation."""

from __future__ import annotations

from .events import EventMeta, RevisionCreateEvent
from .ports import StatementSource
from .statements import Statement, statements_from_graph, unique_statements
from .uris import UriScheme, entity_term, validate_entity_id

__all__ = [
    "EventMeta",
    "RevisionCreateEvent",
    "Statement",
    "StatementSource",
    "UriScheme",
    "entity_term",
    "statements_from_graph",
    "unique_statements",
    "validate_entity_id",
]
