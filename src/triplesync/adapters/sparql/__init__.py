"""Public interface for the SPARQL triple store adapter."""

from __future__ import annotations

from .binary_results import BindingSet, TupleQueryResult, parse_binary_results
from .builder import GraphPattern, UpdateBuilder, starts_with
from .client import OperationKind, SparqlClient
from .errors import (
    ResponseDecodeError,
    StoreRejectedError,
    StoreTransportError,
    TripleStoreError,
)
from .repository import RdfRepository
from .responses import ASK_QUERY, TUPLE_QUERY, UPDATE_COUNT, ResponseDecoder

__all__ = [
    "ASK_QUERY",
    "TUPLE_QUERY",
    "UPDATE_COUNT",
    "BindingSet",
    "GraphPattern",
    "OperationKind",
    "RdfRepository",
    "ResponseDecodeError",
    "ResponseDecoder",
    "SparqlClient",
    "StoreRejectedError",
    "StoreTransportError",
    "TripleStoreError",
    "TupleQueryResult",
    "UpdateBuilder",
    "parse_binary_results",
    "starts_with",
]
