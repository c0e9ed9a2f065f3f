"""
Single-object transfer from the source realm to the destination realm.

One call to ``ObjectTransfer.transfer``:
1. reads HEAD metadata and the tag set concurrently (one snapshot),
2. pipes the source body into the destination ``put_object`` chunk by chunk,
3. verifies the destination ETag against the snapshot digest.

Source stream failures are reported through ``SourceStream.failure`` rather
than escaping from inside the HTTP client's body consumer, so a broken read
ends the transfer with a ``StreamError`` result like any other failure.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import AsyncIterator
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from ..result import Failure, Result, Success
from .errors import DestinationWriteError, SourceReadError, StreamError, TransferError
from .integrity import verify_digest
from .models import ObjectMetadata, Tag
from .protocols import StreamingBodyProtocol
from .s3_errors import S3ConnectionFailed, S3OperationError, classify_s3_exception
from .s3_operations import S3Operations


_logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024

# Characters JavaScript's encodeURIComponent leaves untouched besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_tagging(tags: tuple[Tag, ...]) -> str:
    """Render a tag set as the ``x-amz-tagging`` query string.

    Each key and value is percent-encoded on its own; pairs are joined by ``&``.

    >>> encode_tagging((("team", "data eng"), ("tier", "a&b")))
    'team=data%20eng&tier=a%26b'
    """
    return "&".join(
        f"{quote(key, safe=_URI_COMPONENT_SAFE)}={quote(value, safe=_URI_COMPONENT_SAFE)}"
        for key, value in tags
    )


class SourceStreamInterrupted(Exception):
    """Raised into the destination writer to abandon the in-flight put."""

    def __init__(self, failure: StreamError) -> None:
        self.failure = failure
        super().__init__(f"Source stream failed for {failure.bucket}/{failure.key}")


class SourceStream:
    """Async-readable view over a source body, used as the destination ``Body``.

    Reads are delegated to the source StreamingBody in bounded chunks, so the
    destination write rate gates the source read rate. The first read failure
    (or a body shorter than announced) is stored in ``failure`` and raised as
    ``SourceStreamInterrupted``; every later read re-raises it.
    """

    def __init__(
        self,
        body: StreamingBodyProtocol,
        bucket: str,
        key: str,
        content_length: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._body = body
        self._bucket = bucket
        self._key = key
        self._content_length = content_length
        self._chunk_size = chunk_size
        self.bytes_read = 0
        self.failure: StreamError | None = None

    @property
    def remaining(self) -> int:
        return max(self._content_length - self.bytes_read, 0)

    def _fail(self, cause: S3OperationError) -> SourceStreamInterrupted:
        self.failure = StreamError(
            bucket=self._bucket, key=self._key, cause=cause, bytes_streamed=self.bytes_read
        )
        return SourceStreamInterrupted(self.failure)

    async def read(self, amt: int | None = None) -> bytes:
        """Read up to ``amt`` bytes (all remaining bytes when ``amt`` is None or negative)."""
        if self.failure is not None:
            raise SourceStreamInterrupted(self.failure)
        if self.remaining == 0:
            return b""

        wanted = self.remaining if amt is None or amt < 0 else min(amt, self.remaining)
        try:
            chunk = await self._body.read(wanted)
        except (ClientError, BotoCoreError) as e:
            raise self._fail(classify_s3_exception(e, "GetObject", self._bucket, self._key)) from e
        except OSError as e:
            raise self._fail(
                S3ConnectionFailed(
                    operation="GetObject",
                    bucket=self._bucket,
                    key=self._key,
                    error_code=type(e).__name__,
                    message=str(e),
                )
            ) from e

        if not chunk:
            raise self._fail(
                S3ConnectionFailed(
                    operation="GetObject",
                    bucket=self._bucket,
                    key=self._key,
                    error_code="IncompleteReadError",
                    message=(
                        f"Source body ended after {self.bytes_read} of "
                        f"{self._content_length} bytes"
                    ),
                )
            )
        self.bytes_read += len(chunk)
        return chunk

    def __len__(self) -> int:
        return self._content_length

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        while self.remaining > 0:
            yield await self.read(self._chunk_size)

    def close(self) -> None:
        self._body.close()


class ObjectTransfer:
    """Copies one object, with its metadata and tags, into the destination bucket.

    Attributes:
        destination_bucket: Fixed destination bucket; keys are preserved
    """

    def __init__(
        self,
        source: S3Operations,
        destination: S3Operations,
        destination_bucket: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._source = source
        self._destination = destination
        self.destination_bucket = destination_bucket
        self._chunk_size = chunk_size

    async def capture_metadata(
        self, source_bucket: str, key: str
    ) -> Result[ObjectMetadata, SourceReadError]:
        """HEAD and tag fetch issued together; either failing fails the snapshot."""
        head_result, tags_result = await asyncio.gather(
            self._source.head_object(source_bucket, key),
            self._source.get_object_tagging(source_bucket, key),
        )
        match head_result, tags_result:
            case Success(head), Success(tags):
                return Success(dataclasses.replace(head, tags=tags))
            case Failure(cause), _:
                return Failure(SourceReadError(bucket=source_bucket, key=key, cause=cause))
            case _, Failure(cause):
                return Failure(SourceReadError(bucket=source_bucket, key=key, cause=cause))
        raise AssertionError("Unreachable: both results are Success or Failure")

    async def transfer(self, source_bucket: str, key: str) -> Result[None, TransferError]:
        """Run one complete transfer attempt."""
        match await self.capture_metadata(source_bucket, key):
            case Failure(read_error):
                return Failure(read_error)
            case Success(metadata):
                pass

        match await self._source.open_object_stream(source_bucket, key):
            case Failure(cause):
                return Failure(StreamError(bucket=source_bucket, key=key, cause=cause))
            case Success(body):
                stream = SourceStream(
                    body, source_bucket, key, metadata.content_length, self._chunk_size
                )

        _logger.debug(
            f"Streaming {source_bucket}/{key} ({metadata.content_length} bytes) "
            f"to {self.destination_bucket}"
        )
        put_result: Result[str, S3OperationError]
        try:
            put_result = await self._destination.put_object(
                self.destination_bucket,
                key,
                stream,
                content_length=metadata.content_length,
                content_type=metadata.content_type,
                metadata=metadata.user_metadata,
                tagging=encode_tagging(metadata.tags),
            )
        except SourceStreamInterrupted as interrupted:
            return Failure(interrupted.failure)
        except Exception as e:
            # Raised by the HTTP client outside botocore's exception hierarchy.
            put_result = Failure(
                S3ConnectionFailed(
                    operation="PutObject",
                    bucket=self.destination_bucket,
                    key=key,
                    error_code=type(e).__name__,
                    message=str(e),
                )
            )
            _logger.debug(f"Unclassified error writing {self.destination_bucket}/{key}: {e!r}")
        finally:
            stream.close()

        # The HTTP client may have wrapped the interruption in its own error.
        if stream.failure is not None:
            return Failure(stream.failure)

        match put_result:
            case Failure(cause):
                return Failure(
                    DestinationWriteError(bucket=self.destination_bucket, key=key, cause=cause)
                )
            case Success(destination_digest):
                verified: Result[None, TransferError] = verify_digest(
                    key, metadata.digest, destination_digest
                )
                return verified
