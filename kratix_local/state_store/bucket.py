"""Writer for StateStores backed by an S3 compatible bucket."""

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from kratix_local.bootstrap import join_path
from kratix_local.exceptions import StateStoreConfigError, StateStoreWriteError
from kratix_local.manifest import BucketStateStore

from .credentials import BucketCredentials
from .writer import StateStoreWriter

_LOGGER = logging.getLogger(__name__)

CONTENT_TYPE = "application/x-yaml"
CONNECT_TIMEOUT = 10
READ_TIMEOUT = 30
MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}


def _error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", ""))


class BucketWriter(StateStoreWriter):
    """Writes documents as objects in a bucket, keyed by their full path."""

    def __init__(self, client: Any, bucket_name: str) -> None:
        """Initialize the writer with an S3 client."""
        self._client = client
        self._bucket_name = bucket_name

    async def write_object(self, path_prefix: str, name: str, content: bytes) -> None:
        """Write the document as an object, replacing any existing one."""
        key = join_path(path_prefix, name)
        _LOGGER.debug("Writing %s to bucket %s", key, self._bucket_name)
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket_name,
                Key=key,
                Body=content,
                ContentType=CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as err:
            raise StateStoreWriteError(
                f"Failed to write {key} to bucket {self._bucket_name}: {err}"
            ) from err
        _LOGGER.info("Wrote %s to bucket %s", key, self._bucket_name)

    async def close(self) -> None:
        """Close the connections held by the client."""
        self._client.close()


def _create_client(
    state_store: BucketStateStore, credentials: BucketCredentials
) -> Any:
    return boto3.client(
        "s3",
        endpoint_url=state_store.endpoint_url,
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        region_name=state_store.region,
        config=Config(
            connect_timeout=CONNECT_TIMEOUT,
            read_timeout=READ_TIMEOUT,
            s3={"addressing_style": "path"},
        ),
    )


def _ensure_bucket(client: Any, state_store: BucketStateStore) -> None:
    """Check the bucket is reachable, creating it when it does not exist."""
    bucket_name = state_store.bucket_name
    try:
        client.head_bucket(Bucket=bucket_name)
        return
    except ClientError as err:
        if _error_code(err) not in MISSING_BUCKET_CODES:
            raise
    _LOGGER.info("Bucket %s does not exist, creating it", bucket_name)
    params: dict[str, Any] = {"Bucket": bucket_name}
    if state_store.region and state_store.region != "us-east-1":
        params["CreateBucketConfiguration"] = {
            "LocationConstraint": state_store.region
        }
    client.create_bucket(**params)


async def new_bucket_writer(
    state_store: BucketStateStore, credentials: BucketCredentials
) -> BucketWriter:
    """Return a writer for the bucket, verifying it can be accessed."""
    _LOGGER.debug(
        "Connecting to %s bucket %s",
        state_store.endpoint_url,
        state_store.bucket_name,
    )
    try:
        client = _create_client(state_store, credentials)
    except (BotoCoreError, ValueError) as err:
        raise StateStoreConfigError(
            f"Invalid endpoint for {state_store.resource_id}: {err}"
        ) from err
    try:
        await asyncio.to_thread(_ensure_bucket, client, state_store)
    except (BotoCoreError, ClientError) as err:
        client.close()
        raise StateStoreConfigError(
            f"Unable to access bucket {state_store.bucket_name} at "
            f"{state_store.endpoint_url}: {err}"
        ) from err
    return BucketWriter(client, state_store.bucket_name)
