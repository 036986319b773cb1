"""Reconcile the registration of a single Cluster.

A pass resolves the Cluster's StateStore and Secret, writes the bootstrap
manifests to the Cluster's path in the StateStore and then triggers the
scheduler. Each step short-circuits the rest of the pass on failure.

Missing dependencies, failed writes and a failed scheduler trigger are
expected while resources are being rolled out and result in a requeue after a
fixed interval. A StateStore that a writer can't be created for needs a human
to fix it and is raised to the caller.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
import logging

from kratix_local.bootstrap import (
    CRDS_DIR,
    CRDS_FILENAME,
    RESOURCES_DIR,
    RESOURCES_FILENAME,
    build_namespace_manifest,
    build_resource_path_manifest,
    cluster_path,
    join_path,
)
from kratix_local.context import trace_context
from kratix_local.exceptions import (
    DependencyNotFoundError,
    SchedulerError,
    StateStoreConfigError,
    StateStoreWriteError,
)
from kratix_local.manifest import NamedResource
from kratix_local.resolver import resolve_references
from kratix_local.scheduler import Scheduler
from kratix_local.state_store import (
    BoundStateStore,
    StateStoreWriter,
    bind_credentials,
    new_state_store_writer,
)
from kratix_local.store import Store, Status

__all__ = [
    "ClusterReconciler",
    "ReconcileResult",
    "RequeueReason",
    "DEFAULT_REQUEUE",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEUE = 5.0
"""Seconds to wait before retrying a pass that is waiting on something."""

WriterFactory = Callable[[BoundStateStore], Awaitable[StateStoreWriter]]


class RequeueReason(StrEnum):
    """Why a pass asked to be retried."""

    DEPENDENCY_NOT_FOUND = "DependencyNotFound"
    WRITE_FAILED = "WriteFailed"
    SCHEDULER_FAILED = "SchedulerFailed"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a pass that did not raise."""

    requeue_after: float | None = None
    """Seconds after which the Cluster should be reconciled again, if at all."""

    reason: RequeueReason | None = None
    """Why the pass is requeued."""

    @property
    def requeue(self) -> bool:
        """Return True if the pass should be retried."""
        return self.requeue_after is not None


class ClusterReconciler:
    """Registers Clusters with their StateStore and the scheduler."""

    def __init__(
        self,
        store: Store,
        scheduler: Scheduler,
        writer_factory: WriterFactory = new_state_store_writer,
        requeue_after: float = DEFAULT_REQUEUE,
    ) -> None:
        """Initialize the ClusterReconciler.

        Args:
            store: The store holding Clusters, StateStores and Secrets.
            scheduler: Triggered once a Cluster's state location is ready.
            writer_factory: Creates the writer for a StateStore.
            requeue_after: Seconds to wait before retrying a pass.
        """
        self._store = store
        self._scheduler = scheduler
        self._writer_factory = writer_factory
        self._requeue_after = requeue_after

    def _requeue(
        self, cluster_id: NamedResource, reason: RequeueReason, message: str
    ) -> ReconcileResult:
        self._store.update_status(cluster_id, Status.PENDING, message)
        return ReconcileResult(requeue_after=self._requeue_after, reason=reason)

    async def reconcile(self, cluster_id: NamedResource) -> ReconcileResult:
        """Run a registration pass for the Cluster.

        Raises:
            StateStoreConfigError: If no writer can be created for the
                Cluster's StateStore.
            StoreReadError: If an object could not be read from the store.
        """
        _LOGGER.info("Registering Cluster %s", cluster_id.namespaced_name)
        try:
            with trace_context("Resolve references"):
                refs = resolve_references(self._store, cluster_id)
        except DependencyNotFoundError as err:
            _LOGGER.error("Cluster %s: %s", cluster_id.namespaced_name, err)
            return self._requeue(
                cluster_id,
                RequeueReason.DEPENDENCY_NOT_FOUND,
                f"Waiting for {err.resource_id}",
            )
        except StateStoreConfigError as err:
            _LOGGER.error("Cluster %s: %s", cluster_id.namespaced_name, err)
            self._store.update_status(cluster_id, Status.FAILED, str(err))
            raise
        if refs is None:
            _LOGGER.info(
                "Cluster %s no longer exists, nothing to do",
                cluster_id.namespaced_name,
            )
            return ReconcileResult()

        cluster = refs.cluster
        try:
            with trace_context("Create writer"):
                writer = await self._writer_factory(
                    bind_credentials(refs.state_store, refs.secret)
                )
        except StateStoreConfigError as err:
            _LOGGER.error(
                "Unable to create writer for %s: %s", refs.state_store.resource_id, err
            )
            self._store.update_status(cluster_id, Status.FAILED, str(err))
            raise

        path = cluster_path(cluster.path, cluster.namespace, cluster.name)
        self._store.update_status(
            cluster_id, Status.PENDING, f"Bootstrapping {path}"
        )
        try:
            with trace_context("Bootstrap"):
                await writer.write_object(
                    join_path(path, CRDS_DIR), CRDS_FILENAME, build_namespace_manifest()
                )
                await writer.write_object(
                    join_path(path, RESOURCES_DIR),
                    RESOURCES_FILENAME,
                    build_resource_path_manifest(path),
                )
        except StateStoreWriteError as err:
            _LOGGER.error(
                "Unable to write bootstrap manifests for %s to %s: %s",
                cluster_id.namespaced_name,
                path,
                err,
            )
            return self._requeue(
                cluster_id, RequeueReason.WRITE_FAILED, f"Failed to write {path}"
            )
        finally:
            await writer.close()

        try:
            with trace_context("Schedule"):
                await self._scheduler.reconcile_cluster()
        except SchedulerError as err:
            _LOGGER.error(
                "Unable to schedule resources for %s: %s",
                cluster_id.namespaced_name,
                err,
            )
            return self._requeue(
                cluster_id, RequeueReason.SCHEDULER_FAILED, "Failed to schedule"
            )

        _LOGGER.info("Registered Cluster %s at %s", cluster_id.namespaced_name, path)
        self._store.update_status(cluster_id, Status.READY)
        return ReconcileResult()
