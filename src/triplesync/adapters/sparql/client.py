"""HTTP transport for a SPARQL query/update endpoint."""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx

from triplesync.config.pool import PoolConfig

from .errors import StoreRejectedError, StoreTransportError

if TYPE_CHECKING:
    from types import TracebackType

    from .responses import ResponseDecoder

log = getLogger(__name__)

FORM_CONTENT_TYPE: Final[str] = "application/x-www-form-urlencoded; charset=UTF-8"


class OperationKind(StrEnum):
    """Name of the form field the SPARQL text travels in."""

    UPDATE = "update"
    QUERY = "query"


class SparqlClient:
    """Pooled client for one endpoint, safe to share between threads.

    The pool is bounded; when every connection is busy further requests wait
    for one to free up (``PoolConfig.pool_timeout``).
    """

    def __init__(
        self,
        endpoint: str,
        *,
        pool: PoolConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.pool = pool or PoolConfig()
        self._client = httpx.Client(
            limits=self.pool.limits(),
            timeout=self.pool.timeout(),
            transport=transport,
        )
        # httpx sends ``Accept: */*`` by default; only decoders may set it
        self._client.headers.pop("Accept", None)

    def __enter__(self) -> SparqlClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def execute[T](self, kind: OperationKind, decoder: ResponseDecoder[T], sparql: str) -> T:
        """POST ``sparql`` as the ``kind`` form field and decode the response.

        The decoder reads the body while the response is still open.
        """

        headers = {"Content-Type": FORM_CONTENT_TYPE}
        # Blazegraph ignores Accept for updates, so those decoders leave it unset
        if decoder.accept is not None:
            headers["Accept"] = decoder.accept

        try:
            with self._client.stream(
                "POST",
                self.endpoint,
                data={str(kind): sparql},
                headers=headers,
            ) as response:
                if response.status_code != httpx.codes.OK:
                    body = response.read().decode("utf-8", errors="replace")
                    log.warning(
                        "Triple store rejected %s with status %s", kind, response.status_code
                    )
                    raise StoreRejectedError(response.status_code, body)
                return decoder.decode(response)
        except (httpx.TransportError, httpx.StreamError) as exc:
            raise StoreTransportError(f"Error talking to triple store at {self.endpoint}") from exc


__all__ = ["FORM_CONTENT_TYPE", "OperationKind", "SparqlClient"]
