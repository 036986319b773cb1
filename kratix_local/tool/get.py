"""Command line tool for inspecting the Clusters in local resources."""

import pathlib
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from kratix_local.bootstrap import cluster_path
from kratix_local.loader import LoadOptions, ResourceLoader
from kratix_local.manifest import Cluster

from .format import ClusterTable


class GetClusterAction:
    """Get details about the Clusters in local resources."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args: ArgumentParser = subparsers.add_parser(
            "clusters",
            aliases=["cl", "cluster"],
            help="Get Clusters and the path their manifests are written to",
            description="Print information about the Clusters in local resources.",
        )
        args.add_argument(
            "--path",
            help="File or directory containing the resources",
            type=pathlib.Path,
            required=True,
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        results = []
        async for resource in ResourceLoader().load(LoadOptions(path=path)):
            if not isinstance(resource, Cluster):
                continue
            ref = resource.state_store_id
            results.append(
                {
                    "namespace": resource.namespace,
                    "name": resource.name,
                    "state_store": f"{ref.kind}/{ref.namespaced_name}",
                    "path": cluster_path(
                        resource.path, resource.namespace, resource.name
                    ),
                }
            )
        results.sort(key=lambda row: (row["namespace"], row["name"]))
        ClusterTable(["namespace", "name", "state_store", "path"]).print(results)


class GetAction:
    """Get details about platform resources."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print information about local platform resources",
                description="Print information about supported local resources",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        GetClusterAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args
