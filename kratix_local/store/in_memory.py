"""Module for in memory object store."""

import asyncio
from collections import defaultdict
from collections.abc import Callable, AsyncGenerator
from typing import Any, TypeVar, DefaultDict

import logging

from kratix_local.manifest import BaseManifest, NamedResource

from .status import Status, StatusInfo
from .store import Store, StoreEvent, SUPPORTS_STATUS


_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseManifest)


def _resource_id(obj: BaseManifest) -> NamedResource:
    if (
        not hasattr(obj, "kind")
        or not hasattr(obj, "namespace")
        or not hasattr(obj, "name")
    ):
        raise ValueError("Object must have kind, namespace, and name attributes")
    return NamedResource(obj.kind, obj.namespace, obj.name)


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Stores manifest objects and status keyed by NamedResource and supports
    event listeners for object and status changes.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryStore."""
        self._objects: dict[NamedResource, BaseManifest] = {}
        self._status: dict[NamedResource, StatusInfo] = {}
        self._listeners: DefaultDict[StoreEvent, list[Callable[..., None]]] = (
            defaultdict(list)
        )

    def add_object(self, obj: BaseManifest) -> None:
        """Add or replace a manifest object in the store."""
        resource_id = _resource_id(obj)
        if (existing := self._objects.get(resource_id)) is not None:
            if existing == obj:
                _LOGGER.debug(
                    "Object %s already exists in store, skipping", resource_id
                )
                return
            _LOGGER.debug("Updating existing object %s in store", resource_id)
        else:
            _LOGGER.debug("Adding object %s to store", resource_id)

        self._objects[resource_id] = obj
        self._fire_event(StoreEvent.OBJECT_ADDED, resource_id, obj)

    def get_object(self, resource_id: NamedResource, cls: type[T]) -> T | None:
        """Retrieve a manifest object by resource identity and type."""
        obj = self._objects.get(resource_id)
        if obj is not None:
            if isinstance(obj, cls):
                return obj
            raise ValueError(
                f"Object {resource_id.namespaced_name} is not of type {cls.__name__} (was {obj.__class__.__name__})"
            )
        return None

    def delete_object(self, resource_id: NamedResource) -> bool:
        """Remove a manifest object and its status from the store."""
        if (obj := self._objects.pop(resource_id, None)) is None:
            return False
        _LOGGER.debug("Deleted object %s from store", resource_id)
        self._status.pop(resource_id, None)
        self._fire_event(StoreEvent.OBJECT_DELETED, resource_id, obj)
        return True

    def list_objects(self, kind: str | None = None) -> list[BaseManifest]:
        """List all manifest objects in the store, optionally filtered by kind."""
        if kind is None:
            return list(self._objects.values())
        return [
            obj for obj in self._objects.values() if getattr(obj, "kind", None) == kind
        ]

    def update_status(
        self, resource_id: NamedResource, status: Status, message: str | None = None
    ) -> None:
        """Record the status and optional message for a resource."""
        if resource_id.kind not in SUPPORTS_STATUS:
            raise ValueError(
                f"Resource kind {resource_id.kind} does not support status updates"
            )
        if resource_id not in self._objects:
            _LOGGER.debug(
                "Ignoring status update for %s, object is not in the store",
                resource_id,
            )
            return
        status_info = StatusInfo(status=status, message=message)
        if self._status.get(resource_id) == status_info:
            return
        _LOGGER.debug(
            "Updating status for resource %s to %s",
            resource_id.namespaced_name,
            status_info,
        )
        self._status[resource_id] = status_info
        self._fire_event(StoreEvent.STATUS_UPDATED, resource_id, status_info)

    def get_status(self, resource_id: NamedResource) -> StatusInfo | None:
        """Retrieve the status recorded for a resource."""
        return self._status.get(resource_id)

    def add_listener(
        self,
        event: StoreEvent,
        callback: Callable[[NamedResource, Any], None],
        flush: bool = False,
    ) -> Callable[[], None]:
        """Register a callback for a specific event."""

        def remove() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        self._listeners[event].append(callback)

        if flush:
            _LOGGER.debug("Flushing objects for event type %s", event)
            for rid, obj in list(self._objects.items()):
                if event == StoreEvent.OBJECT_ADDED:
                    callback(rid, obj)
                elif event == StoreEvent.STATUS_UPDATED:
                    if status := self._status.get(rid):
                        callback(rid, status)

        return remove

    def _fire_event(self, event: StoreEvent, *args: Any) -> None:
        for cb in list(self._listeners[event]):  # Iterate over a copy for safe removal
            try:
                cb(*args)
            except Exception:
                _LOGGER.exception("Store listener callback failed for event %s", event)

    async def watch(
        self, kind: str
    ) -> AsyncGenerator[tuple[StoreEvent, NamedResource]]:
        """
        Watch for objects of a specific kind being added or deleted.

        Objects of the kind already in the store are yielded first as
        OBJECT_ADDED events.
        """
        queue: asyncio.Queue[tuple[StoreEvent, NamedResource]] = asyncio.Queue()

        def listener(event: StoreEvent) -> Callable[[NamedResource, Any], None]:
            def callback(resource_id: NamedResource, obj: Any) -> None:
                if resource_id.kind == kind:
                    queue.put_nowait((event, resource_id))

            return callback

        removers = [
            self.add_listener(
                StoreEvent.OBJECT_ADDED, listener(StoreEvent.OBJECT_ADDED), flush=True
            ),
            self.add_listener(
                StoreEvent.OBJECT_DELETED, listener(StoreEvent.OBJECT_DELETED)
            ),
        ]
        try:
            while True:
                yield await queue.get()
        except asyncio.CancelledError:
            _LOGGER.debug("watch for kind '%s' cancelled.", kind)
            raise
        finally:
            _LOGGER.debug("Cleaning up listeners for watch (kind: %s)", kind)
            for remove in removers:
                remove()
