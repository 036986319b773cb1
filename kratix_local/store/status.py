"""Status information for a resource."""

from enum import StrEnum
from dataclasses import dataclass


class Status(StrEnum):
    """Registration status for a resource."""

    PENDING = "Pending"
    READY = "Ready"
    FAILED = "Failed"


@dataclass
class StatusInfo:
    """Registration status and optional message for a resource."""

    status: Status
    message: str | None = None

    def __str__(self) -> str:
        """Return a string representation of the status."""
        if self.message:
            return f"{self.status}: {self.message}"
        return str(self.status)
