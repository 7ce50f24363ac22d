"""Failures raised while talking to the triple store."""

from __future__ import annotations


class TripleStoreError(RuntimeError):
    """Base class for every failure surfaced by the SPARQL adapter."""


class StoreTransportError(TripleStoreError):
    """Raised when the exchange failed at the network level.

    The request may never have reached the store, so its effect is unknown.
    """


class StoreRejectedError(TripleStoreError):
    """Raised when the store answered with a non-200 status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Non-200 response from triple store: {status_code} body=\n{body}")
        self.status_code = status_code
        self.body = body


class ResponseDecodeError(TripleStoreError):
    """Raised when a response body does not have the shape its decoder expects."""


__all__ = [
    "ResponseDecodeError",
    "StoreRejectedError",
    "StoreTransportError",
    "TripleStoreError",
]
