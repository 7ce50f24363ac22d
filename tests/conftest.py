from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.support.entities import URIS
from tests.support.fake_store import FakeTripleStore, make_repository

if TYPE_CHECKING:
    from collections.abc import Iterator

    from triplesync.adapters.sparql import RdfRepository


@pytest.fixture
def store() -> FakeTripleStore:
    return FakeTripleStore()


@pytest.fixture
def repository(store: FakeTripleStore) -> Iterator[RdfRepository]:
    repo = make_repository(store.handler, URIS)
    try:
        yield repo
    finally:
        repo.close()
