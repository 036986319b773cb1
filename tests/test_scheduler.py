"""Tests for the scheduler triggers."""

from pathlib import Path

import pytest

from kratix_local.exceptions import SchedulerError
from kratix_local.scheduler import CommandScheduler, LogScheduler


async def test_log_scheduler() -> None:
    """Test the default scheduler does nothing."""
    await LogScheduler().reconcile_cluster()


async def test_command_scheduler(tmp_path: Path) -> None:
    """Test the command is run on every trigger."""
    marker = tmp_path / "triggered"
    scheduler = CommandScheduler(f"sh -c 'echo run >> {marker}'")
    await scheduler.reconcile_cluster()
    await scheduler.reconcile_cluster()
    assert marker.read_text() == "run\nrun\n"


async def test_command_scheduler_failure() -> None:
    """Test a failing command is reported as a scheduler error."""
    scheduler = CommandScheduler(["/bin/false"])
    with pytest.raises(SchedulerError, match="return code 1"):
        await scheduler.reconcile_cluster()


async def test_command_scheduler_missing_binary() -> None:
    """Test a command that does not exist is reported as a scheduler error."""
    scheduler = CommandScheduler(["kratix-local-does-not-exist"])
    with pytest.raises(SchedulerError, match="Failed to run scheduler command"):
        await scheduler.reconcile_cluster()


def test_empty_command() -> None:
    """Test a scheduler requires a command."""
    with pytest.raises(ValueError, match="must not be empty"):
        CommandScheduler("  ")
