"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from triplesync.adapters.sparql import RdfRepository
from triplesync.config import get_repository_config

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from triplesync.config import RepositoryConfig
    from triplesync.domain.events import RevisionCreateEvent
    from triplesync.domain.ports import StatementSource
    from triplesync.domain.statements import Statement


log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SyncEntityResult:
    """Outcome of synchronising one entity."""

    entity_id: str
    mutations: int
    skipped: bool = False


def build_repository(config: RepositoryConfig | None = None) -> RdfRepository:
    return RdfRepository.from_config(config or get_repository_config())


def sync_entity(
    repository: RdfRepository,
    entity_id: str,
    statements: Iterable[Statement],
) -> SyncEntityResult:
    """Replace the store's copy of ``entity_id`` with ``statements``."""

    log.info("Starting sync of %s", entity_id)
    mutations = repository.sync(entity_id, statements)
    log.info("Finished sync of %s: mutations=%s", entity_id, mutations)
    return SyncEntityResult(entity_id=entity_id, mutations=mutations)


def sync_revision_event(
    repository: RdfRepository,
    source: StatementSource,
    event: RevisionCreateEvent,
) -> SyncEntityResult:
    """Resynchronise the entity named by ``event`` unless the store is already current."""

    if repository.has_revision(event.title, event.revision):
        log.info("Skipping %s: store already has revision %s", event.title, event.revision)
        return SyncEntityResult(entity_id=event.title, mutations=0, skipped=True)
    return sync_entity(repository, event.title, source(event.title))


def last_update(repository: RdfRepository) -> datetime | None:
    latest = repository.fetch_last_update()
    log.info("Latest modification in store: %s", latest)
    return latest


__all__ = [
    "SyncEntityResult",
    "build_repository",
    "last_update",
    "sync_entity",
    "sync_revision_event",
]
