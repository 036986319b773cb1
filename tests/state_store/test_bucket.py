"""Tests for the bucket StateStore writer."""

from collections.abc import Generator
from typing import Any

import boto3
from botocore.stub import Stubber
import pytest

from kratix_local.exceptions import StateStoreConfigError, StateStoreWriteError
from kratix_local.manifest import BucketStateStore
from kratix_local.state_store import BucketCredentials
from kratix_local.state_store import bucket
from kratix_local.state_store.bucket import BucketWriter, new_bucket_writer

CREDENTIALS = BucketCredentials(access_key_id="minioadmin", secret_access_key="x")


@pytest.fixture
def client() -> Any:
    """An S3 client that never talks to a real endpoint."""
    return boto3.client(
        "s3",
        endpoint_url="http://minio:9000",
        region_name="us-east-1",
        aws_access_key_id="minioadmin",
        aws_secret_access_key="x",
    )


@pytest.fixture
def stubber(client: Any) -> Generator[Stubber, None, None]:
    with Stubber(client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture(autouse=True)
def mock_create_client(
    client: Any, monkeypatch: pytest.MonkeyPatch
) -> list[BucketStateStore]:
    """Hand out the stubbed client instead of creating a new one."""
    calls: list[BucketStateStore] = []

    def create_client(state_store: BucketStateStore, credentials: Any) -> Any:
        calls.append(state_store)
        return client

    monkeypatch.setattr(bucket, "_create_client", create_client)
    return calls


async def test_write_object(client: Any, stubber: Stubber) -> None:
    """Test documents are written as objects keyed by their full path."""
    stubber.add_response(
        "put_object",
        {},
        {
            "Bucket": "kratix",
            "Key": "foo/ns1/c1/crds/kratix-crds.yaml",
            "Body": b"kind: Namespace\n",
            "ContentType": "application/x-yaml",
        },
    )
    writer = BucketWriter(client, "kratix")
    await writer.write_object(
        "foo/ns1/c1/crds", "kratix-crds.yaml", b"kind: Namespace\n"
    )


async def test_write_object_failure(client: Any, stubber: Stubber) -> None:
    """Test a rejected write is reported as a write error."""
    stubber.add_client_error(
        "put_object", service_error_code="AccessDenied", http_status_code=403
    )
    writer = BucketWriter(client, "kratix")
    with pytest.raises(StateStoreWriteError, match="foo/kratix-crds.yaml"):
        await writer.write_object("foo", "kratix-crds.yaml", b"")


async def test_new_bucket_writer(
    stubber: Stubber,
    bucket_state_store: BucketStateStore,
    mock_create_client: list[BucketStateStore],
) -> None:
    """Test creating a writer checks the bucket exists."""
    stubber.add_response("head_bucket", {}, {"Bucket": "kratix"})
    writer = await new_bucket_writer(bucket_state_store, CREDENTIALS)
    assert isinstance(writer, BucketWriter)
    assert mock_create_client == [bucket_state_store]


async def test_new_bucket_writer_creates_bucket(
    stubber: Stubber, bucket_state_store: BucketStateStore
) -> None:
    """Test a missing bucket is created in the configured region."""
    bucket_state_store.region = "eu-west-1"
    stubber.add_client_error(
        "head_bucket", service_error_code="404", http_status_code=404
    )
    stubber.add_response(
        "create_bucket",
        {},
        {
            "Bucket": "kratix",
            "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"},
        },
    )
    writer = await new_bucket_writer(bucket_state_store, CREDENTIALS)
    assert isinstance(writer, BucketWriter)


async def test_new_bucket_writer_access_denied(
    stubber: Stubber, bucket_state_store: BucketStateStore
) -> None:
    """Test a bucket that can't be accessed is a configuration error."""
    stubber.add_client_error(
        "head_bucket", service_error_code="403", http_status_code=403
    )
    with pytest.raises(StateStoreConfigError, match="Unable to access bucket kratix"):
        await new_bucket_writer(bucket_state_store, CREDENTIALS)
