"""
The store module provides a central, type-safe repository for the platform
resources (Clusters, StateStores, Secrets) seen by the controllers and the
status recorded against them.

- Uses NamedResource as the key for all objects.
- Stores values as dataclass instances from manifest.py for type safety.
- Provides query and update APIs for the reconcilers and event listeners for
  the controllers that dispatch them.

This abstract interface allows for various implementations (in-memory, backed
by a kubernetes API server, etc.).
"""

from .store import Store, StoreEvent
from .in_memory import InMemoryStore
from .status import Status, StatusInfo

__all__ = [
    "Store",
    "StoreEvent",
    "InMemoryStore",
    "Status",
    "StatusInfo",
]
