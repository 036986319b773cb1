"""Store module for holding the platform resources seen by the controllers."""

from abc import ABC, abstractmethod
from collections.abc import Callable, AsyncGenerator
from enum import Enum
from typing import Any, TypeVar, TYPE_CHECKING

from kratix_local.manifest import BaseManifest, NamedResource, CLUSTER_KIND

from .status import Status, StatusInfo

T = TypeVar("T", bound=BaseManifest)


SUPPORTS_STATUS: set[str] = {CLUSTER_KIND}


class StoreEvent(str, Enum):
    """Enum for store events."""

    OBJECT_ADDED = "object_added"
    OBJECT_DELETED = "object_deleted"
    STATUS_UPDATED = "status_updated"


class Store(ABC):
    """Abstract base class for the central type-safe object store with listener support."""

    @abstractmethod
    def add_object(self, obj: BaseManifest) -> None:
        """Add or replace a manifest object in the store."""

    @abstractmethod
    def get_object(self, resource_id: NamedResource, cls: type[T]) -> T | None:
        """Retrieve a manifest object by resource identity and type.

        Returns None when no object exists with that identity.
        """

    @abstractmethod
    def delete_object(self, resource_id: NamedResource) -> bool:
        """Remove a manifest object and its status from the store.

        Returns True if an object was removed.
        """

    @abstractmethod
    def list_objects(self, kind: str | None = None) -> list[BaseManifest]:
        """List all manifest objects in the store, optionally filtered by kind."""

    @abstractmethod
    def update_status(
        self, resource_id: NamedResource, status: Status, message: str | None = None
    ) -> None:
        """Record the status and optional message for a resource."""

    @abstractmethod
    def get_status(self, resource_id: NamedResource) -> StatusInfo | None:
        """Retrieve the status recorded for a resource."""

    @abstractmethod
    def add_listener(
        self,
        event: StoreEvent,
        callback: Callable[[NamedResource, Any], None],
        flush: bool = False,
    ) -> Callable[[], None]:
        """Register a callback for a specific event.

        When `flush` is set the callback is invoked for objects already in the
        store. Returns a callable that can be called to remove the listener.
        """

    @abstractmethod
    async def watch(
        self, kind: str
    ) -> AsyncGenerator[tuple[StoreEvent, NamedResource]]:
        """
        Watch for objects of a specific kind being added or deleted.

        Objects of the kind already in the store are yielded first as
        OBJECT_ADDED events. The generator runs until it is closed or the
        task consuming it is cancelled.

        Args:
            kind: The kind of resource to watch for (e.g. "Cluster").

        Yields:
            A tuple of the event (OBJECT_ADDED or OBJECT_DELETED) and the
            identity of the object it applies to.
        """
        if TYPE_CHECKING:
            yield None, None  # type: ignore[misc]
