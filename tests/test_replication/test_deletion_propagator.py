# tests/test_replication/test_deletion_propagator.py
"""Tests for deletion propagation to the destination realm."""

from __future__ import annotations

import pytest

from crossrealm.replication.deletion import DeletionPropagator
from crossrealm.replication.errors import DeleteError

from tests.helpers import DESTINATION_BUCKET, FakeS3Client, client_error, expect_failure, expect_success


@pytest.mark.asyncio
async def test_deletes_from_fixed_bucket(
    deletion_propagator: DeletionPropagator, destination_client: FakeS3Client
) -> None:
    destination_client.seed(DESTINATION_BUCKET, "old.txt", b"x")

    expect_success(await deletion_propagator.propagate_delete("old.txt"))

    assert destination_client.calls_to("delete_object") == [
        {"Bucket": DESTINATION_BUCKET, "Key": "old.txt"}
    ]
    assert (DESTINATION_BUCKET, "old.txt") not in destination_client.objects


@pytest.mark.asyncio
async def test_absent_key_succeeds(
    deletion_propagator: DeletionPropagator, destination_client: FakeS3Client
) -> None:
    """Deleting twice is fine; the storage call itself is idempotent."""
    expect_success(await deletion_propagator.propagate_delete("gone.txt"))
    expect_success(await deletion_propagator.propagate_delete("gone.txt"))

    assert len(destination_client.calls_to("delete_object")) == 2


@pytest.mark.asyncio
async def test_failure_is_delete_error_with_key(
    deletion_propagator: DeletionPropagator, destination_client: FakeS3Client
) -> None:
    destination_client.fail_next("delete_object", client_error("AccessDenied", "Access Denied"))

    error = expect_failure(await deletion_propagator.propagate_delete("old.txt"))

    assert isinstance(error, DeleteError)
    assert error.key == "old.txt"
    assert error.bucket == DESTINATION_BUCKET
    assert error.cause.error_code == "AccessDenied"


@pytest.mark.asyncio
async def test_failure_is_not_retried(
    deletion_propagator: DeletionPropagator, destination_client: FakeS3Client
) -> None:
    destination_client.fail_next("delete_object", client_error("ServiceUnavailable"))

    expect_failure(await deletion_propagator.propagate_delete("old.txt"))

    assert len(destination_client.calls_to("delete_object")) == 1
