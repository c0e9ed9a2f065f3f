"""Propagation of source deletions to the destination realm."""

from __future__ import annotations

import logging

from ..result import Failure, Result, Success
from .errors import DeleteError
from .s3_operations import S3Operations


_logger = logging.getLogger(__name__)


class DeletionPropagator:
    """Issues one delete against the fixed destination bucket. Never retried."""

    def __init__(self, destination: S3Operations, destination_bucket: str) -> None:
        self._destination = destination
        self.destination_bucket = destination_bucket

    async def propagate_delete(self, key: str) -> Result[None, DeleteError]:
        match await self._destination.delete_object(self.destination_bucket, key):
            case Success(_):
                _logger.info(f"Deleted {self.destination_bucket}/{key}")
                return Success(None)
            case Failure(cause):
                _logger.error(f"Delete of {self.destination_bucket}/{key} failed: {cause}")
                return Failure(DeleteError(bucket=self.destination_bucket, key=key, cause=cause))
        raise AssertionError("Unreachable: delete result is Success or Failure")
