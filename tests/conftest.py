"""Shared fixtures for kratix-local tests."""

import pytest

from kratix_local.manifest import (
    BucketStateStore,
    Cluster,
    GitStateStore,
    ObjectReference,
    Secret,
)
from kratix_local.store import InMemoryStore


@pytest.fixture
def cluster() -> Cluster:
    """A Cluster referencing the bucket StateStore by name only."""
    return Cluster(
        name="c1",
        namespace="ns1",
        state_store_ref=ObjectReference(name="default"),
        path="foo",
    )


@pytest.fixture
def bucket_state_store() -> BucketStateStore:
    """A BucketStateStore in the same namespace as the Cluster."""
    return BucketStateStore(
        name="default",
        namespace="ns1",
        secret_ref=ObjectReference(name="creds"),
        endpoint="minio:9000",
        bucket_name="kratix",
        insecure=True,
    )


@pytest.fixture
def git_state_store() -> GitStateStore:
    """A GitStateStore whose Secret lives in another namespace."""
    return GitStateStore(
        name="git",
        namespace="ns1",
        secret_ref=ObjectReference(name="git-creds", namespace="flux-system"),
        url="https://example.com/repo.git",
    )


@pytest.fixture
def bucket_secret() -> Secret:
    """Credentials for the BucketStateStore."""
    return Secret(
        name="creds",
        namespace="ns1",
        data={"accessKeyID": b"minioadmin", "secretAccessKey": b"minio-secret\n"},
    )


@pytest.fixture
def git_secret() -> Secret:
    """Credentials for the GitStateStore."""
    return Secret(
        name="git-creds",
        namespace="flux-system",
        data={"username": b"kratix", "password": b"p@ss/word"},
    )


@pytest.fixture
def store() -> InMemoryStore:
    """An empty store."""
    return InMemoryStore()
