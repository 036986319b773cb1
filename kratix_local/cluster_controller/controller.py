"""
Cluster Controller implementation.

This controller dispatches registration passes for Cluster resources. It
watches the store for Clusters being added, updated or deleted and runs the
ClusterReconciler for them.

Key Concepts:
    - Pass: A single run of ClusterReconciler.reconcile for one Cluster.
    - Requeue: A pass that is waiting on something asks to be run again after
      a fixed interval.
    - Error backoff: A pass that raised is retried after an exponentially
      increasing delay until it succeeds.

At most one pass runs for a Cluster at a time. Events for a Cluster that
arrive while its pass is running cause one more pass once it finishes.
"""

import asyncio
from collections import Counter
from dataclasses import dataclass
import logging

from kratix_local.manifest import CLUSTER_KIND, NamedResource
from kratix_local.store import Store, Status
from kratix_local.task import get_task_service

from .reconciler import ClusterReconciler, RequeueReason

_LOGGER = logging.getLogger(__name__)


@dataclass
class ClusterControllerConfig:
    """Configuration for the ClusterController."""

    error_backoff_base: float = 1.0
    """Seconds to wait before retrying the first failed pass."""

    error_backoff_max: float = 300.0
    """Upper bound on the delay between retries of failed passes."""

    max_dependency_attempts: int | None = None
    """Consecutive passes waiting on a missing StateStore or Secret after which
    the Cluster is marked failed. None keeps retrying indefinitely."""


class ClusterController:
    """
    Controller for dispatching Cluster registration passes.

    This controller watches for Cluster objects in the store and runs the
    reconciler for each of them, honoring the requeue interval returned by a
    pass and backing off when a pass raises.
    """

    def __init__(
        self,
        store: Store,
        reconciler: ClusterReconciler,
        config: ClusterControllerConfig | None = None,
    ) -> None:
        """
        Initialize the controller and start watching for Clusters.

        Args:
            store: The central store holding the Clusters
            reconciler: Runs a registration pass for a Cluster
            config: The configuration for the controller
        """
        self._store = store
        self._reconciler = reconciler
        self._config = config or ClusterControllerConfig()
        self._task_service = get_task_service()
        self._passes: dict[NamedResource, asyncio.Task[None]] = {}
        self._timers: dict[NamedResource, asyncio.Task[None]] = {}
        self._dirty: set[NamedResource] = set()
        self._error_counts: Counter[NamedResource] = Counter()
        self._dependency_counts: Counter[NamedResource] = Counter()
        self._watch_task = self._task_service.create_background_task(
            self._watch_clusters(), name="watch clusters"
        )

    async def close(self) -> None:
        """Stop watching and cancel all pending and running passes."""
        _LOGGER.info("Closing ClusterController, cancelling tasks")
        tasks = [self._watch_task, *self._timers.values(), *self._passes.values()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers.clear()
        self._passes.clear()
        self._dirty.clear()

    async def _watch_clusters(self) -> None:
        """Watch for Cluster objects in the store and enqueue them."""
        _LOGGER.info("Watching for Cluster objects in the store")
        async for event, resource_id in self._store.watch(CLUSTER_KIND):
            # A changed or deleted Cluster starts over
            self._error_counts.pop(resource_id, None)
            self._dependency_counts.pop(resource_id, None)
            _LOGGER.debug("Received %s for %s", event, resource_id)
            self.enqueue(resource_id)

    def enqueue(self, resource_id: NamedResource) -> None:
        """Run a pass for the Cluster as soon as possible."""
        if (timer := self._timers.pop(resource_id, None)) is not None:
            timer.cancel()
        if resource_id in self._passes:
            self._dirty.add(resource_id)
            return
        self._passes[resource_id] = self._task_service.create_task(
            self._run_pass(resource_id), name=f"reconcile {resource_id}"
        )

    async def _run_pass(self, resource_id: NamedResource) -> None:
        try:
            delay = await self._reconcile(resource_id)
        finally:
            self._passes.pop(resource_id, None)
        if resource_id in self._dirty:
            self._dirty.discard(resource_id)
            self.enqueue(resource_id)
        elif delay is not None:
            self._timers[resource_id] = self._task_service.create_background_task(
                self._requeue(resource_id, delay), name=f"requeue {resource_id}"
            )

    async def _requeue(self, resource_id: NamedResource, delay: float) -> None:
        _LOGGER.debug("Requeueing %s in %0.2fs", resource_id, delay)
        await asyncio.sleep(delay)
        self._timers.pop(resource_id, None)
        self.enqueue(resource_id)

    async def _reconcile(self, resource_id: NamedResource) -> float | None:
        """Run the reconciler, returning the delay before the next pass."""
        try:
            result = await self._reconciler.reconcile(resource_id)
        except Exception as err:
            self._error_counts[resource_id] += 1
            delay = min(
                self._config.error_backoff_base
                * 2 ** (self._error_counts[resource_id] - 1),
                self._config.error_backoff_max,
            )
            _LOGGER.error(
                "Failed to reconcile %s (retrying in %0.2fs): %s",
                resource_id,
                delay,
                err,
            )
            return delay
        self._error_counts.pop(resource_id, None)

        if result.reason != RequeueReason.DEPENDENCY_NOT_FOUND:
            self._dependency_counts.pop(resource_id, None)
            return result.requeue_after

        self._dependency_counts[resource_id] += 1
        attempts = self._dependency_counts[resource_id]
        limit = self._config.max_dependency_attempts
        if limit is not None and attempts >= limit:
            status = self._store.get_status(resource_id)
            message = f"Gave up after {attempts} attempts"
            if status and status.message:
                message = f"{message}: {status.message}"
            _LOGGER.error("Cluster %s: %s", resource_id.namespaced_name, message)
            self._store.update_status(resource_id, Status.FAILED, message)
            return None
        return result.requeue_after
