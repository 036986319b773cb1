"""The interface for writing documents to a StateStore."""

from abc import ABC, abstractmethod


class StateStoreWriter(ABC):
    """Persists named documents under a path prefix of a StateStore.

    A writer is owned by the reconcile pass that created it and is closed when
    the pass ends.
    """

    @abstractmethod
    async def write_object(self, path_prefix: str, name: str, content: bytes) -> None:
        """Write the document `name` under `path_prefix`, replacing any existing one.

        Raises:
            StateStoreWriteError: If the backend could not persist the document.
        """

    async def close(self) -> None:
        """Release any resources held by the writer."""
