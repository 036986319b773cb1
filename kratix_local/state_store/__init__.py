"""Writers persisting documents to the StateStore backing a Cluster.

A StateStore only describes where documents live and references the Secret
holding its credentials. `bind_credentials` pairs the two without modifying
either and `new_state_store_writer` builds the writer for the backend kind.
"""

from .credentials import (
    BoundStateStore,
    BucketCredentials,
    GitCredentials,
    bind_credentials,
)
from .factory import new_state_store_writer
from .writer import StateStoreWriter

__all__ = [
    "BoundStateStore",
    "BucketCredentials",
    "GitCredentials",
    "StateStoreWriter",
    "bind_credentials",
    "new_state_store_writer",
]
