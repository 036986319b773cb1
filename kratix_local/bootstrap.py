"""Manifests written to the state location of every newly registered Cluster.

A worker side agent needs a namespace to run in and needs to know the path it
should pull its resources from. Both documents are fully owned by the platform
and are rewritten in full on every reconcile.
"""

import posixpath
from typing import Any

import yaml

__all__ = [
    "build_namespace_manifest",
    "build_resource_path_manifest",
    "cluster_path",
    "join_path",
]

WORKER_NAMESPACE = "kratix-worker-system"
KRATIX_INFO_NAME = "kratix-info"

CRDS_DIR = "crds"
CRDS_FILENAME = "kratix-crds.yaml"
RESOURCES_DIR = "resources"
RESOURCES_FILENAME = "kratix-resources.yaml"


def join_path(*parts: str) -> str:
    """Join path segments, dropping empty segments and redundant separators.

    >>> join_path("foo/", "ns1", "", "c1")
    'foo/ns1/c1'
    """
    if not (segments := [part for part in parts if part]):
        return ""
    return posixpath.normpath(posixpath.join(*segments))


def cluster_path(path: str, namespace: str, name: str) -> str:
    """Return the path under which a Cluster's documents are written."""
    return join_path(path, namespace, name)


def _dump(doc: dict[str, Any]) -> bytes:
    return yaml.safe_dump(doc, sort_keys=True, default_flow_style=False).encode()


def build_namespace_manifest() -> bytes:
    """Serialize the Namespace the worker side agent runs in."""
    return _dump(
        {
            "apiVersion": "v1",
            "kind": "Namespace",
            "metadata": {"name": WORKER_NAMESPACE},
        }
    )


def build_resource_path_manifest(path: str) -> bytes:
    """Serialize the ConfigMap announcing where a Cluster's resources live."""
    return _dump(
        {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {
                "name": KRATIX_INFO_NAME,
                "namespace": WORKER_NAMESPACE,
            },
            "data": {"Path": join_path(path, RESOURCES_DIR)},
        }
    )
