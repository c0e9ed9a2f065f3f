"""S3 call failure ADTs.

Every collaborator call made against a storage realm is wrapped so that
``botocore`` exceptions become frozen dataclasses. The ``error_code`` carried
here is what the invocation boundary reports as ``statusCode``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from botocore.exceptions import BotoCoreError, ClientError


@dataclass(frozen=True)
class S3CallFailed:
    """The realm answered a request with an error response.

    Corresponds to a boto3 ``ClientError``. HEAD requests carry no body, so a
    missing object there surfaces as code ``"404"`` rather than ``"NoSuchKey"``.

    Attributes:
        operation: S3 operation that failed (e.g. "HeadObject", "PutObject")
        bucket: Bucket addressed by the request
        key: Object key addressed by the request
        error_code: S3 error code from the response
        message: Error message from the response
    """

    operation: str
    bucket: str
    key: str
    error_code: str
    message: str
    kind: Literal["S3CallFailed"] = "S3CallFailed"


@dataclass(frozen=True)
class S3ConnectionFailed:
    """The request never produced a realm response.

    Corresponds to a ``BotoCoreError`` (endpoint unreachable, read timeout,
    truncated body). ``error_code`` is the botocore exception class name.
    """

    operation: str
    bucket: str
    key: str
    error_code: str
    message: str
    kind: Literal["S3ConnectionFailed"] = "S3ConnectionFailed"


S3OperationError = S3CallFailed | S3ConnectionFailed


def classify_client_error(
    error: ClientError, operation: str, bucket: str, key: str
) -> S3CallFailed:
    """Convert a boto3 ClientError into an ``S3CallFailed``."""
    details = error.response.get("Error", {})
    return S3CallFailed(
        operation=operation,
        bucket=bucket,
        key=key,
        error_code=str(details.get("Code", "Unknown")),
        message=str(details.get("Message", str(error))),
    )


def classify_botocore_error(
    error: BotoCoreError, operation: str, bucket: str, key: str
) -> S3ConnectionFailed:
    """Convert a transport-level botocore error into an ``S3ConnectionFailed``."""
    return S3ConnectionFailed(
        operation=operation,
        bucket=bucket,
        key=key,
        error_code=type(error).__name__,
        message=str(error),
    )


def classify_s3_exception(
    error: ClientError | BotoCoreError, operation: str, bucket: str, key: str
) -> S3OperationError:
    """Dispatch on the botocore exception family."""
    match error:
        case ClientError():
            return classify_client_error(error, operation, bucket, key)
        case BotoCoreError():
            return classify_botocore_error(error, operation, bucket, key)
