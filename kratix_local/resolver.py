"""Resolve the chain of references from a Cluster to its credentials.

A Cluster references a StateStore, which in turn references a Secret. Either
reference may omit a namespace, in which case the namespace of the referencing
object is used.
"""

from dataclasses import dataclass
import logging
from typing import TypeVar

from .exceptions import (
    DependencyNotFoundError,
    StateStoreConfigError,
    StoreReadError,
)
from .manifest import (
    BaseManifest,
    Cluster,
    NamedResource,
    Secret,
    StateStore,
    STATE_STORE_KINDS,
)
from .store import Store

__all__ = ["ResolvedReferences", "resolve_references"]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseManifest)


@dataclass(frozen=True)
class ResolvedReferences:
    """The objects a Cluster's registration depends on."""

    cluster: Cluster
    state_store: StateStore
    secret: Secret


def _get(store: Store, resource_id: NamedResource, cls: type[T]) -> T | None:
    try:
        return store.get_object(resource_id, cls)
    except Exception as err:
        raise StoreReadError(f"Failed to read {resource_id}: {err}") from err


def resolve_references(
    store: Store, cluster_id: NamedResource
) -> ResolvedReferences | None:
    """Fetch the Cluster and the StateStore and Secret it depends on.

    Returns None when the Cluster itself no longer exists.

    Raises:
        DependencyNotFoundError: If the StateStore or Secret does not exist.
        StateStoreConfigError: If the Cluster references an unsupported kind.
        StoreReadError: If any object could not be read.
    """
    if (cluster := _get(store, cluster_id, Cluster)) is None:
        _LOGGER.debug("Cluster %s not found", cluster_id)
        return None

    state_store_id = cluster.state_store_id
    if (state_store_cls := STATE_STORE_KINDS.get(state_store_id.kind)) is None:
        raise StateStoreConfigError(
            f"Cluster {cluster_id.namespaced_name} references unsupported kind {state_store_id.kind}"
        )
    if (state_store := _get(store, state_store_id, state_store_cls)) is None:
        raise DependencyNotFoundError(str(state_store_id), str(cluster_id))

    secret_id = state_store.secret_id
    if (secret := _get(store, secret_id, Secret)) is None:
        raise DependencyNotFoundError(str(secret_id), str(state_store_id))

    _LOGGER.debug("Resolved %s -> %s -> %s", cluster_id, state_store_id, secret_id)
    return ResolvedReferences(cluster=cluster, state_store=state_store, secret=secret)
