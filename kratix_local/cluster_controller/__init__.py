"""The cluster controller module.

This module provides the reconciler registering a Cluster with its StateStore
and the scheduler, and a controller dispatching it for Clusters in the store.
"""

from .controller import ClusterController, ClusterControllerConfig
from .reconciler import (
    DEFAULT_REQUEUE,
    ClusterReconciler,
    ReconcileResult,
    RequeueReason,
)

__all__ = [
    "ClusterController",
    "ClusterControllerConfig",
    "ClusterReconciler",
    "ReconcileResult",
    "RequeueReason",
    "DEFAULT_REQUEUE",
]
