"""Command line tool for registering Clusters from local resources."""

import logging
import pathlib
import sys
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from kratix_local.bootstrap import cluster_path
from kratix_local.cluster_controller import ClusterControllerConfig, DEFAULT_REQUEUE
from kratix_local.manifest import Cluster
from kratix_local.platform import Platform, PlatformConfig
from kratix_local.scheduler import CommandScheduler, LogScheduler, Scheduler
from kratix_local.store import InMemoryStore, Status

from .format import ClusterTable

_LOGGER = logging.getLogger(__name__)

DEFAULT_WAIT = 60.0


class RegisterAction:
    """Kratix-local register action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "register",
                help="Register Clusters with their StateStores",
                description=(
                    "Load Clusters, StateStores and Secrets from local files, "
                    "write the bootstrap manifests for every Cluster to its "
                    "StateStore and trigger the scheduler."
                ),
            ),
        )
        args.add_argument(
            "--path",
            help="File or directory containing the resources",
            type=pathlib.Path,
            required=True,
        )
        args.add_argument(
            "--wait",
            help="Seconds to wait for every Cluster to be registered",
            type=float,
            default=DEFAULT_WAIT,
        )
        args.add_argument(
            "--requeue-after",
            help="Seconds before retrying a Cluster that is waiting on a dependency or write",
            type=float,
            default=DEFAULT_REQUEUE,
        )
        args.add_argument(
            "--max-dependency-attempts",
            help="Mark a Cluster failed after this many attempts to find its StateStore or Secret",
            type=int,
            default=None,
        )
        args.add_argument(
            "--scheduler-command",
            help="Command to run to trigger the scheduler once a Cluster is registered",
            type=str,
            default=None,
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        wait: float,
        requeue_after: float,
        max_dependency_attempts: int | None,
        scheduler_command: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        scheduler: Scheduler = LogScheduler()
        if scheduler_command:
            scheduler = CommandScheduler(scheduler_command)
        store = InMemoryStore()
        platform = Platform(
            store,
            scheduler,
            PlatformConfig(
                requeue_after=requeue_after,
                controller_config=ClusterControllerConfig(
                    max_dependency_attempts=max_dependency_attempts
                ),
            ),
        )
        statuses = await platform.register(path, wait)

        results = []
        for resource_id, status in sorted(statuses.items()):
            cluster = store.get_object(resource_id, Cluster)
            results.append(
                {
                    "namespace": resource_id.namespace,
                    "name": resource_id.name,
                    "path": (
                        cluster_path(cluster.path, cluster.namespace, cluster.name)
                        if cluster
                        else ""
                    ),
                    "status": str(status) if status else Status.PENDING,
                }
            )
        ClusterTable(["namespace", "name", "path", "status"]).print(results)

        if any(
            status is None or status.status != Status.READY
            for status in statuses.values()
        ):
            sys.exit(1)
