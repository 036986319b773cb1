"""Tests for the kratix-local `register` command."""

from pathlib import Path

import git
import pytest

from kratix_local.exceptions import CommandException
from kratix_local.state_store.git import AUTHOR

from . import run_command

RESOURCES = """\
---
apiVersion: platform.kratix.io/v1alpha1
kind: Cluster
metadata:
  name: worker-1
spec:
  path: dev
  stateStoreRef:
    name: local
    kind: GitStateStore
---
apiVersion: platform.kratix.io/v1alpha1
kind: GitStateStore
metadata:
  name: local
spec:
  url: {url}
  branch: main
  secretRef:
    name: git-credentials
---
apiVersion: v1
kind: Secret
metadata:
  name: git-credentials
stringData:
  username: kratix
  password: unused
"""

MISSING_STATE_STORE = """\
apiVersion: platform.kratix.io/v1alpha1
kind: Cluster
metadata:
  name: worker-2
spec:
  stateStoreRef:
    name: missing
"""


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    """A bare repository with a single commit on the main branch."""
    seed_path = tmp_path / "seed"
    seed = git.Repo.init(seed_path)
    (seed_path / "README.md").write_text("state\n")
    seed.index.add(["README.md"])
    seed.index.commit("Initial commit", author=AUTHOR, committer=AUTHOR)
    seed.git.branch("-M", "main")
    remote_path = tmp_path / "remote.git"
    git.Repo.clone_from(seed_path, remote_path, bare=True)
    return remote_path


@pytest.fixture
def resources(tmp_path: Path, remote: Path) -> Path:
    path = tmp_path / "resources"
    path.mkdir()
    (path / "platform.yaml").write_text(RESOURCES.format(url=remote))
    return path


async def test_register(resources: Path, remote: Path, tmp_path: Path) -> None:
    """Test registering a Cluster with a git StateStore."""
    marker = tmp_path / "scheduled"
    result = await run_command(
        [
            "register",
            "--path",
            str(resources),
            "--scheduler-command",
            f"touch {marker}",
        ]
    )
    assert [line.split() for line in result.splitlines()] == [
        ["NAMESPACE", "NAME", "PATH", "STATUS"],
        ["default", "worker-1", "dev/default/worker-1", "Ready"],
    ]
    assert marker.exists()

    repo = git.Repo(remote)
    assert "kratix-worker-system" in repo.git.show(
        "main:dev/default/worker-1/crds/kratix-crds.yaml"
    )
    assert "Path: dev/default/worker-1/resources" in repo.git.show(
        "main:dev/default/worker-1/resources/kratix-resources.yaml"
    )


async def test_register_pending(resources: Path) -> None:
    """Test the command fails when a Cluster does not become ready."""
    (resources / "missing.yaml").write_text(MISSING_STATE_STORE)
    with pytest.raises(
        CommandException, match="Waiting for BucketStateStore/default/missing"
    ):
        await run_command(["register", "--path", str(resources), "--wait", "1"])


async def test_register_gives_up(resources: Path) -> None:
    """Test a Cluster is reported as failed once it exhausts its attempts."""
    (resources / "missing.yaml").write_text(MISSING_STATE_STORE)
    with pytest.raises(CommandException, match="Failed: Gave up after 2 attempts"):
        await run_command(
            [
                "register",
                "--path",
                str(resources),
                "--requeue-after",
                "0.1",
                "--max-dependency-attempts",
                "2",
            ]
        )
