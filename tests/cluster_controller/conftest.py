"""Fixtures for the cluster controller tests."""

import pytest

from kratix_local.exceptions import StateStoreConfigError
from kratix_local.state_store import BoundStateStore, StateStoreWriter

from .fakes import FakeBackend, FakeScheduler, FakeWriter


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def scheduler(backend: FakeBackend) -> FakeScheduler:
    return FakeScheduler(backend)


@pytest.fixture
def writer_factory(backend: FakeBackend):  # type: ignore[no-untyped-def]
    async def new_writer(bound: BoundStateStore) -> StateStoreWriter:
        backend.bound.append(bound)
        if backend.config_errors:
            backend.config_errors -= 1
            raise StateStoreConfigError("invalid endpoint")
        return FakeWriter(backend)

    return new_writer
