"""Construct the writer for a StateStore's backend."""

import logging

from kratix_local.exceptions import StateStoreConfigError
from kratix_local.manifest import BucketStateStore, GitStateStore

from .bucket import new_bucket_writer
from .credentials import BoundStateStore, BucketCredentials, GitCredentials
from .git import new_git_writer
from .writer import StateStoreWriter

_LOGGER = logging.getLogger(__name__)


async def new_state_store_writer(bound: BoundStateStore) -> StateStoreWriter:
    """Return a writer for the StateStore, verifying the backend is usable.

    Raises:
        StateStoreConfigError: If the StateStore parameters are invalid or the
            backend can't be reached or authenticated against.
    """
    state_store = bound.state_store
    credentials = bound.credentials
    _LOGGER.debug(
        "Creating %s writer for %s", state_store.backend, state_store.resource_id
    )
    if isinstance(state_store, BucketStateStore) and isinstance(
        credentials, BucketCredentials
    ):
        return await new_bucket_writer(state_store, credentials)
    if isinstance(state_store, GitStateStore) and isinstance(
        credentials, GitCredentials
    ):
        return await new_git_writer(state_store, credentials)
    raise StateStoreConfigError(
        f"Unsupported StateStore {state_store.resource_id} with credentials "
        f"{type(credentials).__name__}"
    )
