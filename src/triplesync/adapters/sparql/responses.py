"""Decoders pairing a requested media type with a way to read the response body.

Decoding always happens while the streamed response is still open; the client
closes it once ``decode`` returns.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import Final

import httpx
from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError

from .binary_results import TupleQueryResult, parse_binary_results
from .errors import ResponseDecodeError

log = getLogger(__name__)

BINARY_RESULTS_MEDIA_TYPE: Final[str] = "application/x-binary-rdf-results-table"
JSON_MEDIA_TYPE: Final[str] = "application/json"

# Blazegraph ignores Accept for updates and answers with an HTML report; these
# are the two lines of that report worth looking at.
_ELAPSED_LINE = re.compile(r"totalElapsed=\S+ elapsed=([^<\s]+)")
_COMMIT_LINE = re.compile(
    r"COMMIT: totalElapsed=\S+ commitTime=\S+ mutationCount=(\d+)"
)


@dataclass(frozen=True, slots=True)
class ResponseDecoder[T]:
    """Requested ``Accept`` header plus the function that reads the matching body."""

    name: str
    accept: str | None
    decode: Callable[[httpx.Response], T]


class AskResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    boolean: StrictBool


def decode_update_count(response: httpx.Response) -> int:
    """Return the mutation count reported by the store's commit line."""

    mutation_count: int | None = None
    for line in response.iter_lines():
        elapsed = _ELAPSED_LINE.search(line)
        if elapsed:
            log.debug("elapsed = %s", elapsed.group(1))
        commit = _COMMIT_LINE.search(line)
        if commit:
            log.debug("mutation count = %s", commit.group(1))
            mutation_count = int(commit.group(1))
    if mutation_count is None:
        raise ResponseDecodeError("Couldn't find the mutation count in the update response")
    return mutation_count


def decode_tuple_query(response: httpx.Response) -> TupleQueryResult:
    return parse_binary_results(response.iter_bytes())


def decode_ask_query(response: httpx.Response) -> bool:
    body = response.read()
    try:
        return AskResponse.model_validate_json(body).boolean
    except ValidationError as exc:
        raise ResponseDecodeError(f"Error parsing ask response: {exc}") from exc


UPDATE_COUNT: Final[ResponseDecoder[int]] = ResponseDecoder(
    name="update-count", accept=None, decode=decode_update_count
)
TUPLE_QUERY: Final[ResponseDecoder[TupleQueryResult]] = ResponseDecoder(
    name="tuple-query", accept=BINARY_RESULTS_MEDIA_TYPE, decode=decode_tuple_query
)
ASK_QUERY: Final[ResponseDecoder[bool]] = ResponseDecoder(
    name="ask-query", accept=JSON_MEDIA_TYPE, decode=decode_ask_query
)


__all__ = [
    "ASK_QUERY",
    "BINARY_RESULTS_MEDIA_TYPE",
    "JSON_MEDIA_TYPE",
    "TUPLE_QUERY",
    "UPDATE_COUNT",
    "AskResponse",
    "ResponseDecoder",
    "decode_ask_query",
    "decode_tuple_query",
    "decode_update_count",
]
