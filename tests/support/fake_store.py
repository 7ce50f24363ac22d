"""In-memory triple store speaking just enough of the Blazegraph HTTP protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import parse_qs

import httpx
from rdflib import Graph

from triplesync.adapters.sparql import RdfRepository, SparqlClient

from .binary_results import encode_results

if TYPE_CHECKING:
    from collections.abc import Callable

    from triplesync.domain.uris import UriScheme

ENDPOINT = "http://store.test/bigdata/namespace/wdq/sparql"


def update_report(mutation_count: int, *, elapsed_ms: int = 3) -> str:
    """Body Blazegraph returns for a successful update."""

    return (
        "<html><head><meta http-equiv=\"Content-Type\" content=\"text/html;charset=UTF-8\">"
        "<title>blazegraph&trade; by SYSTAP</title\n"
        "></head\n"
        f"><body<p>totalElapsed={elapsed_ms}ms elapsed={elapsed_ms - 1}ms connFlush=0ms "
        "batchResolve=0, whereClause=0ms, deleteClause=0ms, insertClause=0ms</p\n"
        f"><hr><p>COMMIT: totalElapsed={elapsed_ms + 2}ms commitTime=1465423046127 "
        f"mutationCount={mutation_count}</p\n"
        "></html\n"
        ">"
    )


def read_form(request: httpx.Request) -> dict[str, str]:
    form = parse_qs(request.content.decode("utf-8"), keep_blank_values=True)
    return {key: values[0] for key, values in form.items()}


class FakeTripleStore:
    """Applies SPARQL updates and queries to an rdflib graph."""

    def __init__(self, graph: Graph | None = None) -> None:
        self.graph = graph if graph is not None else Graph()
        self.requests: list[httpx.Request] = []
        self.updates: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        form = read_form(request)
        if "update" in form:
            return self._update(form["update"])
        if "query" in form:
            return self._query(form["query"])
        return httpx.Response(400, text="Missing update or query parameter")

    def _update(self, sparql: str) -> httpx.Response:
        self.updates.append(sparql)
        before = set(self.graph)
        self.graph.update(sparql)
        after = set(self.graph)
        changed = len(before - after) + len(after - before)
        return httpx.Response(200, text=update_report(changed))

    def _query(self, sparql: str) -> httpx.Response:
        result = self.graph.query(sparql)
        if result.type == "ASK":
            return httpx.Response(200, json={"head": {}, "boolean": bool(result.askAnswer)})
        if result.type == "SELECT":
            names = [str(var) for var in result.vars or ()]
            rows = [
                {str(var): row[var] for var in result.vars or ()}  # pyright: ignore[reportIndexIssue]
                for row in result
            ]
            return httpx.Response(
                200,
                content=encode_results(names, rows),
                headers={"Content-Type": "application/x-binary-rdf-results-table"},
            )
        return httpx.Response(400, text=f"Unsupported query type {result.type}")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_repository(
    handler: Callable[[httpx.Request], httpx.Response],
    uris: UriScheme | None = None,
) -> RdfRepository:
    client = SparqlClient(ENDPOINT, transport=httpx.MockTransport(handler))
    return RdfRepository(client, uris)
