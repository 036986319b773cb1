"""The scheduler trigger notified when a Cluster becomes available.

The scheduler decides which workloads are placed on which Cluster. The
registration reconciler only needs to tell it to re-evaluate pending
placements because a new destination may now be viable.
"""

from abc import ABC, abstractmethod
import logging
import shlex

from .command import Command, run
from .exceptions import SchedulerError

__all__ = ["Scheduler", "LogScheduler", "CommandScheduler"]

_LOGGER = logging.getLogger(__name__)


class Scheduler(ABC):
    """Capability to trigger a scheduling pass."""

    @abstractmethod
    async def reconcile_cluster(self) -> None:
        """Re-evaluate all pending placements.

        Raises:
            SchedulerError: If the scheduling pass could not be triggered.
        """


class LogScheduler(Scheduler):
    """Scheduler used when no external scheduler is configured."""

    async def reconcile_cluster(self) -> None:
        """Log the trigger."""
        _LOGGER.info("No scheduler configured, skipping placement")


class CommandScheduler(Scheduler):
    """Triggers scheduling by running an external command."""

    def __init__(self, command: str | list[str]) -> None:
        """Initialize with the command to run on every trigger."""
        if isinstance(command, str):
            command = shlex.split(command)
        if not command:
            raise ValueError("Scheduler command must not be empty")
        self._command = command

    async def reconcile_cluster(self) -> None:
        """Run the scheduler command."""
        try:
            out = await run(Command(self._command, exc=SchedulerError))
        except OSError as err:
            raise SchedulerError(f"Failed to run scheduler command: {err}") from err
        _LOGGER.debug("Scheduler command output: %s", out)
