"""Ports for collaborators that live outside the sync core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .statements import Statement


@runtime_checkable
class StatementSource(Protocol):
    """Callable port returning the authoritative statements for an entity."""

    def __call__(self, entity_id: str) -> Iterable[Statement]: ...


__all__ = ["StatementSource"]
