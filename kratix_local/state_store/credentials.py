"""Module for binding Secret material to a StateStore."""

from dataclasses import dataclass, field
import logging

from kratix_local.exceptions import StateStoreConfigError
from kratix_local.manifest import Secret, StateStore, StateStoreType

_LOGGER = logging.getLogger(__name__)

ACCESS_KEY_ID_KEY = "accessKeyID"
SECRET_ACCESS_KEY_KEY = "secretAccessKey"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"


@dataclass(frozen=True)
class BucketCredentials:
    """Access keys for an object storage service."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass(frozen=True)
class GitCredentials:
    """Basic auth credentials for a git server."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class BoundStateStore:
    """A StateStore paired with the credentials read from its Secret."""

    state_store: StateStore
    credentials: BucketCredentials | GitCredentials


def _get_value(secret: Secret, key: str) -> str:
    if (value := secret.data.get(key)) is None:
        raise StateStoreConfigError(
            f"Secret {secret.namespace}/{secret.name} does not contain {key}"
        )
    try:
        return value.decode("utf-8").strip()
    except UnicodeDecodeError as err:
        raise StateStoreConfigError(
            f"Secret {secret.namespace}/{secret.name} {key} is not valid utf-8"
        ) from err


def bind_credentials(state_store: StateStore, secret: Secret) -> BoundStateStore:
    """Return the StateStore bound to the credentials in the Secret.

    The fetched StateStore is not modified, the secret material only lives on
    the returned object for the duration of a reconcile.
    """
    credentials: BucketCredentials | GitCredentials
    if state_store.backend == StateStoreType.BUCKET:
        credentials = BucketCredentials(
            access_key_id=_get_value(secret, ACCESS_KEY_ID_KEY),
            secret_access_key=_get_value(secret, SECRET_ACCESS_KEY_KEY),
        )
    elif state_store.backend == StateStoreType.GIT:
        credentials = GitCredentials(
            username=_get_value(secret, USERNAME_KEY),
            password=_get_value(secret, PASSWORD_KEY),
        )
    else:
        raise StateStoreConfigError(
            f"Unsupported StateStore backend {state_store.backend}"
        )
    _LOGGER.debug("Bound %s to credentials %s", state_store.resource_id, credentials)
    return BoundStateStore(state_store=state_store, credentials=credentials)
