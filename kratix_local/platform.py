"""Platform runner for kratix-local.

The platform loads resources into a store, starts the ClusterController and
waits for every Cluster to either be registered or fail.
"""

import asyncio
from dataclasses import dataclass, field
import logging
from pathlib import Path

from kratix_local.cluster_controller import (
    DEFAULT_REQUEUE,
    ClusterController,
    ClusterControllerConfig,
    ClusterReconciler,
)
from kratix_local.cluster_controller.reconciler import WriterFactory
from kratix_local.manifest import BaseManifest, Cluster, CLUSTER_KIND, NamedResource
from kratix_local.scheduler import LogScheduler, Scheduler
from kratix_local.state_store import new_state_store_writer
from kratix_local.store import Status, StatusInfo, Store, StoreEvent
from kratix_local.task import get_task_service

from .loader import LoadOptions, ResourceLoader

__all__ = ["Platform", "PlatformConfig"]

_LOGGER = logging.getLogger(__name__)

SETTLED = {Status.READY, Status.FAILED}


@dataclass
class PlatformConfig:
    """Configuration for the platform.

    Attributes:
        requeue_after: Seconds before retrying a pass that is waiting.
        controller_config: Configuration for the ClusterController.
    """

    requeue_after: float = DEFAULT_REQUEUE
    controller_config: ClusterControllerConfig = field(
        default_factory=ClusterControllerConfig
    )


class Platform:
    """Runs the ClusterController against a store.

    The platform is responsible for:
    - Loading resources into the store
    - Managing the lifecycle of the controller
    - Reporting the status of every Cluster once they settle
    """

    def __init__(
        self,
        store: Store,
        scheduler: Scheduler | None = None,
        config: PlatformConfig | None = None,
        writer_factory: WriterFactory = new_state_store_writer,
    ) -> None:
        """Initialize the platform."""
        self.store = store
        self.config = config or PlatformConfig()
        self._reconciler = ClusterReconciler(
            store,
            scheduler or LogScheduler(),
            writer_factory=writer_factory,
            requeue_after=self.config.requeue_after,
        )
        self._controller: ClusterController | None = None

    async def load(self, path: Path) -> list[NamedResource]:
        """Load resources from the path into the store.

        StateStores and Secrets are added before Clusters so that the first
        pass of each Cluster can find its dependencies.

        Returns:
            The identities of the Clusters that were loaded.
        """
        loader = ResourceLoader()
        clusters: list[Cluster] = []
        dependencies: list[BaseManifest] = []
        async for resource in loader.load(LoadOptions(path=path)):
            if isinstance(resource, Cluster):
                clusters.append(resource)
            else:
                dependencies.append(resource)
        for resource in dependencies:
            self.store.add_object(resource)
        for cluster in clusters:
            self.store.add_object(cluster)
        _LOGGER.info(
            "Loaded %d clusters and %d dependencies", len(clusters), len(dependencies)
        )
        return [cluster.resource_id for cluster in clusters]

    async def start(self) -> None:
        """Start the controller."""
        if self._controller is not None:
            return
        _LOGGER.info("Starting platform")
        self._controller = ClusterController(
            self.store, self._reconciler, self.config.controller_config
        )

    async def stop(self) -> None:
        """Stop the controller and wait for in flight passes to finish."""
        if self._controller is None:
            return
        _LOGGER.info("Stopping platform")
        await self._controller.close()
        await get_task_service().block_till_done()
        self._controller = None
        _LOGGER.info("Platform stopped")

    def cluster_statuses(self) -> dict[NamedResource, StatusInfo | None]:
        """Return the status of every Cluster in the store."""
        statuses: dict[NamedResource, StatusInfo | None] = {}
        for obj in self.store.list_objects(CLUSTER_KIND):
            if isinstance(obj, Cluster):
                statuses[obj.resource_id] = self.store.get_status(obj.resource_id)
        return statuses

    def is_settled(self) -> bool:
        """Return True when every Cluster is either Ready or Failed."""
        return all(
            status is not None and status.status in SETTLED
            for status in self.cluster_statuses().values()
        )

    async def wait(self, timeout: float) -> bool:
        """Wait for every Cluster to settle.

        Returns:
            True if every Cluster settled before the timeout.
        """
        changed = asyncio.Event()
        remove = self.store.add_listener(
            StoreEvent.STATUS_UPDATED, lambda resource_id, status: changed.set()
        )
        try:
            async with asyncio.timeout(timeout):
                while not self.is_settled():
                    await changed.wait()
                    changed.clear()
        except TimeoutError:
            _LOGGER.info("Timed out after %0.1fs waiting for clusters", timeout)
            return False
        finally:
            remove()
        return True

    async def register(
        self, path: Path, timeout: float
    ) -> dict[NamedResource, StatusInfo | None]:
        """Load Clusters from the path and register them.

        Args:
            path: The file or directory to load resources from.
            timeout: Seconds to wait for every Cluster to settle.

        Returns:
            The status of every Cluster when they settled or the timeout
            elapsed.
        """
        await self.load(path)
        await self.start()
        try:
            await self.wait(timeout)
        finally:
            await self.stop()
        return self.cluster_statuses()
