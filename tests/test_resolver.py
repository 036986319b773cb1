"""Tests for resolving the references of a Cluster."""

from typing import Any

import pytest

from kratix_local.exceptions import (
    DependencyNotFoundError,
    StateStoreConfigError,
    StoreReadError,
)
from kratix_local.manifest import (
    BucketStateStore,
    Cluster,
    GitStateStore,
    NamedResource,
    ObjectReference,
    Secret,
)
from kratix_local.resolver import resolve_references
from kratix_local.store import InMemoryStore


def test_resolve(
    store: InMemoryStore,
    cluster: Cluster,
    bucket_state_store: BucketStateStore,
    bucket_secret: Secret,
) -> None:
    """Test unset namespaces resolve to the namespace of the referrer."""
    for obj in (cluster, bucket_state_store, bucket_secret):
        store.add_object(obj)
    refs = resolve_references(store, cluster.resource_id)
    assert refs is not None
    assert refs.cluster == cluster
    assert refs.state_store == bucket_state_store
    assert refs.secret == bucket_secret


def test_resolve_across_namespaces(
    store: InMemoryStore,
    git_state_store: GitStateStore,
    git_secret: Secret,
) -> None:
    """Test references with an explicit namespace and kind."""
    cluster = Cluster(
        name="c1",
        namespace="team-a",
        state_store_ref=ObjectReference(
            name="git", namespace="ns1", kind="GitStateStore"
        ),
    )
    for obj in (cluster, git_state_store, git_secret):
        store.add_object(obj)
    refs = resolve_references(store, cluster.resource_id)
    assert refs is not None
    assert refs.state_store == git_state_store
    assert refs.secret == git_secret


def test_cluster_not_found(store: InMemoryStore) -> None:
    """Test a missing Cluster resolves to nothing."""
    assert resolve_references(store, NamedResource("Cluster", "ns1", "c1")) is None


def test_state_store_not_found(store: InMemoryStore, cluster: Cluster) -> None:
    """Test a missing StateStore is reported as a missing dependency."""
    store.add_object(cluster)
    with pytest.raises(DependencyNotFoundError) as exc_info:
        resolve_references(store, cluster.resource_id)
    assert exc_info.value.resource_id == "BucketStateStore/ns1/default"
    assert exc_info.value.referenced_by == "Cluster/ns1/c1"


def test_state_store_in_other_namespace(
    store: InMemoryStore,
    cluster: Cluster,
    bucket_state_store: BucketStateStore,
    bucket_secret: Secret,
) -> None:
    """Test a StateStore in another namespace is not found by an unqualified reference."""
    bucket_state_store.namespace = "other"
    for obj in (cluster, bucket_state_store, bucket_secret):
        store.add_object(obj)
    with pytest.raises(DependencyNotFoundError, match="BucketStateStore/ns1/default"):
        resolve_references(store, cluster.resource_id)


def test_secret_not_found(
    store: InMemoryStore, cluster: Cluster, bucket_state_store: BucketStateStore
) -> None:
    """Test a missing Secret is reported as a missing dependency."""
    store.add_object(cluster)
    store.add_object(bucket_state_store)
    with pytest.raises(DependencyNotFoundError) as exc_info:
        resolve_references(store, cluster.resource_id)
    assert exc_info.value.resource_id == "Secret/ns1/creds"
    assert exc_info.value.referenced_by == "BucketStateStore/ns1/default"


def test_unsupported_state_store_kind(store: InMemoryStore) -> None:
    """Test a reference to a kind that is not a StateStore."""
    cluster = Cluster(
        name="c1",
        namespace="ns1",
        state_store_ref=ObjectReference(name="x", kind="ConfigMap"),
    )
    store.add_object(cluster)
    with pytest.raises(StateStoreConfigError, match="unsupported kind ConfigMap"):
        resolve_references(store, cluster.resource_id)


def test_store_read_error(
    store: InMemoryStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test a failure reading from the store is surfaced."""

    def fail(*args: Any) -> None:
        raise RuntimeError("connection reset")

    monkeypatch.setattr(store, "get_object", fail)
    with pytest.raises(StoreReadError, match="connection reset"):
        resolve_references(store, NamedResource("Cluster", "ns1", "c1"))
