"""Writer for StateStores backed by a git repository.

Each write clones the configured branch into a temporary directory, writes
the document, and pushes a commit when the content changed.
"""

import asyncio
import logging
from pathlib import Path
import tempfile
from urllib.parse import quote, urlsplit, urlunsplit

import git

from kratix_local.bootstrap import join_path
from kratix_local.exceptions import StateStoreConfigError, StateStoreWriteError
from kratix_local.manifest import GitStateStore

from .credentials import GitCredentials
from .writer import StateStoreWriter

_LOGGER = logging.getLogger(__name__)

AUTHOR = git.Actor("kratix", "kratix@kratix.io")
GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}
AUTH_SCHEMES = {"http", "https"}


def authenticated_url(url: str, credentials: GitCredentials) -> str:
    """Return the url with basic auth credentials for http(s) remotes.

    Other remotes (ssh, local paths) are returned unchanged.
    """
    parts = urlsplit(url)
    if parts.scheme not in AUTH_SCHEMES or not parts.hostname:
        return url
    netloc = parts.hostname
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    username = quote(credentials.username, safe="")
    password = quote(credentials.password, safe="")
    return urlunsplit(parts._replace(netloc=f"{username}:{password}@{netloc}"))


class GitWriter(StateStoreWriter):
    """Commits documents to a branch of a git repository."""

    def __init__(self, url: str, remote_url: str, branch: str) -> None:
        """Initialize the writer.

        Args:
            url: The repository url used in log messages.
            remote_url: The repository url including any credentials.
            branch: The branch to commit to.
        """
        self._url = url
        self._remote_url = remote_url
        self._branch = branch

    async def write_object(self, path_prefix: str, name: str, content: bytes) -> None:
        """Commit the document to the branch, replacing any existing one."""
        # Paths are relative to the repository root, even when absolute
        rel_path = join_path(path_prefix, name).lstrip("/")
        try:
            pushed = await asyncio.to_thread(self._write, rel_path, content)
        except (git.exc.GitError, OSError, ValueError) as err:
            raise StateStoreWriteError(
                f"Failed to write {rel_path} to {self._url} ({self._branch}): {err}"
            ) from err
        if pushed:
            _LOGGER.info("Pushed %s to %s (%s)", rel_path, self._url, self._branch)
        else:
            _LOGGER.debug("%s is unchanged in %s, skipping commit", rel_path, self._url)

    def _write(self, rel_path: str, content: bytes) -> bool:
        with tempfile.TemporaryDirectory(prefix="kratix-git-") as tmp_dir:
            repo = git.Repo.clone_from(
                self._remote_url,
                tmp_dir,
                branch=self._branch,
                depth=1,
                env=GIT_ENV,
            )
            root = Path(tmp_dir).resolve()
            target = (root / rel_path).resolve()
            if not target.is_relative_to(root) or target == root:
                raise ValueError(f"{rel_path} is outside the repository")
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            repo.index.add([target.relative_to(root).as_posix()])
            if not repo.index.diff("HEAD"):
                return False
            repo.index.commit(f"Update {rel_path}", author=AUTHOR, committer=AUTHOR)
            with repo.git.custom_environment(**GIT_ENV):
                results = repo.remote("origin").push(
                    refspec=f"HEAD:refs/heads/{self._branch}"
                )
            for result in results:
                if result.flags & result.ERROR:
                    raise git.exc.GitError(
                        f"Push rejected: {result.summary.strip()}"
                    )
            return True


def _check_remote(remote_url: str, branch: str) -> bool:
    cmd = git.cmd.Git()
    cmd.update_environment(**GIT_ENV)
    return bool(cmd.ls_remote("--heads", remote_url, branch).strip())


async def new_git_writer(
    state_store: GitStateStore, credentials: GitCredentials
) -> GitWriter:
    """Return a writer for the repository, verifying the branch can be read."""
    if not state_store.url:
        raise StateStoreConfigError(f"{state_store.resource_id} has no url")
    if not state_store.branch:
        raise StateStoreConfigError(f"{state_store.resource_id} has no branch")
    try:
        remote_url = authenticated_url(state_store.url, credentials)
    except ValueError as err:
        raise StateStoreConfigError(
            f"Invalid url for {state_store.resource_id}: {err}"
        ) from err

    _LOGGER.debug("Checking %s (%s)", state_store.url, state_store.branch)
    try:
        found = await asyncio.to_thread(_check_remote, remote_url, state_store.branch)
    except git.exc.GitError as err:
        raise StateStoreConfigError(
            f"Unable to access {state_store.url} for {state_store.resource_id}: {err}"
        ) from err
    if not found:
        raise StateStoreConfigError(
            f"Branch {state_store.branch} not found in {state_store.url}"
        )
    return GitWriter(state_store.url, remote_url, state_store.branch)
