"""Result-returning wrapper around the realm S3 clients.

All botocore ``ClientError`` / ``BotoCoreError`` exceptions are converted into
``S3OperationError`` ADTs so that callers handle realm failures by pattern
matching instead of try/except.
"""

from __future__ import annotations

from typing import Mapping

from botocore.exceptions import BotoCoreError, ClientError

from ..result import Failure, Result, Success
from .models import ObjectMetadata, Tag
from .protocols import S3ClientProtocol, StreamingBodyProtocol
from .s3_errors import S3CallFailed, S3OperationError, classify_s3_exception


class S3Operations:
    """Functional interface for the S3 calls the replication engine needs.

    Example:
        ```python
        source = S3Operations(source_client)
        match await source.head_object("assets", "dir/file.txt"):
            case Success(head):
                print(head.content_length, head.digest)
            case Failure(S3CallFailed(error_code="404")):
                print("gone before we could copy it")
            case Failure(error):
                print(f"S3 error: {error}")
        ```
    """

    def __init__(self, s3_client: S3ClientProtocol) -> None:
        """Initialize S3 operations wrapper.

        Args:
            s3_client: aioboto3 S3 client bound to one realm
        """
        self._client = s3_client

    async def head_object(self, bucket: str, key: str) -> Result[ObjectMetadata, S3OperationError]:
        """Read size, type, user metadata and ETag. Tags are not part of HEAD."""
        try:
            response = await self._client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            return Failure(classify_s3_exception(e, "HeadObject", bucket, key))

        content_length = response.get("ContentLength", 0)
        content_type = response.get("ContentType")
        metadata = response.get("Metadata") or {}
        etag = response.get("ETag", "")
        if not isinstance(content_length, int) or not isinstance(metadata, dict):
            return Failure(
                S3CallFailed(
                    operation="HeadObject",
                    bucket=bucket,
                    key=key,
                    error_code="InvalidResponse",
                    message=f"Unexpected HEAD response shape for {bucket}/{key}",
                )
            )
        return Success(
            ObjectMetadata(
                content_length=content_length,
                content_type=content_type if isinstance(content_type, str) else None,
                user_metadata={str(k): str(v) for k, v in metadata.items()},
                digest=str(etag),
            )
        )

    async def get_object_tagging(
        self, bucket: str, key: str
    ) -> Result[tuple[Tag, ...], S3OperationError]:
        """Read the tag set, preserving the order the realm returns."""
        try:
            response = await self._client.get_object_tagging(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            return Failure(classify_s3_exception(e, "GetObjectTagging", bucket, key))

        tag_set = response.get("TagSet") or []
        if not isinstance(tag_set, list):
            return Success(())
        return Success(
            tuple(
                (str(tag["Key"]), str(tag["Value"]))
                for tag in tag_set
                if isinstance(tag, dict) and "Key" in tag and "Value" in tag
            )
        )

    async def open_object_stream(
        self, bucket: str, key: str
    ) -> Result[StreamingBodyProtocol, S3OperationError]:
        """Start a GET and return its unread streaming body."""
        try:
            response = await self._client.get_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            return Failure(classify_s3_exception(e, "GetObject", bucket, key))

        body = response["Body"]
        if not isinstance(body, StreamingBodyProtocol):
            return Failure(
                S3CallFailed(
                    operation="GetObject",
                    bucket=bucket,
                    key=key,
                    error_code="InvalidResponse",
                    message=f"Expected streaming body with read() method, got {type(body)}",
                )
            )
        return Success(body)

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: object,
        *,
        content_length: int,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
        tagging: str = "",
    ) -> Result[str, S3OperationError]:
        """Write an object and return the ETag the realm assigned to it.

        Args:
            bucket: Destination bucket
            key: Object key
            body: Bytes or an async-readable stream
            content_length: Exact body size; required for a streamed body
            content_type: MIME type to store, omitted when None
            metadata: User metadata to store
            tagging: URL-encoded tag string, omitted when empty
        """
        params: dict[str, object] = {
            "Bucket": bucket,
            "Key": key,
            "Body": body,
            "ContentLength": content_length,
            "Metadata": dict(metadata or {}),
        }
        if content_type is not None:
            params["ContentType"] = content_type
        if tagging:
            params["Tagging"] = tagging

        try:
            response = await self._client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            return Failure(classify_s3_exception(e, "PutObject", bucket, key))
        return Success(str(response.get("ETag", "")))

    async def delete_object(self, bucket: str, key: str) -> Result[None, S3OperationError]:
        """Delete an object. S3 itself answers success for absent keys."""
        try:
            await self._client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            return Failure(classify_s3_exception(e, "DeleteObject", bucket, key))
        return Success(None)
