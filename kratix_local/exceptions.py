"""Exceptions related to kratix-local."""

__all__ = [
    "KratixException",
    "InputException",
    "ObjectNotFoundError",
    "DependencyNotFoundError",
    "StoreReadError",
    "StateStoreConfigError",
    "StateStoreWriteError",
    "SchedulerError",
    "CommandException",
]


class KratixException(Exception):
    """Generic base exception used for this library."""


class InputException(KratixException):
    """Raised when the input files or values are not formatted as expected."""


class CommandException(KratixException):
    """Raised when there is a failure running a subcommand."""


class ObjectNotFoundError(KratixException):
    """Raised when an object is not found in the store."""


class DependencyNotFoundError(ObjectNotFoundError):
    """Raised when a resource referenced by a Cluster does not exist yet."""

    def __init__(self, resource_id: str, referenced_by: str) -> None:
        super().__init__(f"{resource_id} referenced by {referenced_by} not found")
        self.resource_id = resource_id
        self.referenced_by = referenced_by


class StoreReadError(KratixException):
    """Raised when an object could not be read from the store."""


class StateStoreConfigError(KratixException):
    """Raised when a writer can't be constructed for a StateStore.

    This covers malformed backend parameters, missing credentials and
    backends that can't be reached or authenticated against.
    """


class StateStoreWriteError(KratixException):
    """Raised when writing an object to a StateStore backend fails."""


class SchedulerError(KratixException):
    """Raised when the scheduler could not be triggered."""
