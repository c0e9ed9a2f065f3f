# tests/test_replication/test_s3_operations.py
"""Tests for the Result-returning S3 wrapper."""

from __future__ import annotations

import pytest
from botocore.exceptions import EndpointConnectionError

from crossrealm.replication.s3_errors import S3CallFailed, S3ConnectionFailed
from crossrealm.replication.s3_operations import S3Operations

from tests.helpers import FakeS3Client, client_error, expect_failure, expect_success


@pytest.mark.asyncio
async def test_head_maps_response(source_client: FakeS3Client) -> None:
    stored = source_client.seed("b", "k", b"abc", content_type="text/csv", metadata={"a": "1"})

    head = expect_success(await S3Operations(source_client).head_object("b", "k"))

    assert head.content_length == 3
    assert head.content_type == "text/csv"
    assert dict(head.user_metadata) == {"a": "1"}
    assert head.digest == stored.etag
    assert head.tags == ()


@pytest.mark.asyncio
async def test_head_of_missing_object_is_404(source_client: FakeS3Client) -> None:
    error = expect_failure(await S3Operations(source_client).head_object("b", "missing"))

    assert error == S3CallFailed(
        operation="HeadObject", bucket="b", key="missing", error_code="404", message="Not Found"
    )


@pytest.mark.asyncio
async def test_tags_keep_order(source_client: FakeS3Client) -> None:
    source_client.seed("b", "k", b"", tags=[("z", "1"), ("a", "2")])

    tags = expect_success(await S3Operations(source_client).get_object_tagging("b", "k"))

    assert tags == (("z", "1"), ("a", "2"))


@pytest.mark.asyncio
async def test_connection_errors_are_classified(source_client: FakeS3Client) -> None:
    source_client.fail_next(
        "get_object", EndpointConnectionError(endpoint_url="https://s3.example.invalid")
    )
    source_client.seed("b", "k", b"abc")

    error = expect_failure(await S3Operations(source_client).open_object_stream("b", "k"))

    assert isinstance(error, S3ConnectionFailed)
    assert error.error_code == "EndpointConnectionError"
    assert error.operation == "GetObject"


@pytest.mark.asyncio
async def test_put_returns_etag(destination_client: FakeS3Client) -> None:
    etag = expect_success(
        await S3Operations(destination_client).put_object(
            "b", "k", b"abc", content_length=3, metadata={"m": "v"}, tagging="t=1"
        )
    )

    (put,) = destination_client.calls_to("put_object")
    assert etag == destination_client.objects[("b", "k")].etag
    assert put["Tagging"] == "t=1"
    assert put["Metadata"] == {"m": "v"}


@pytest.mark.asyncio
async def test_delete_failure_classified(destination_client: FakeS3Client) -> None:
    destination_client.fail_next("delete_object", client_error("NoSuchBucket"))

    error = expect_failure(await S3Operations(destination_client).delete_object("b", "k"))

    assert isinstance(error, S3CallFailed)
    assert error.error_code == "NoSuchBucket"
