"""Error ADTs for the replication engine.

Component-level failures are frozen dataclasses returned inside ``Result``.
Only ``ReplicationAborted`` is an exception: it is raised once, at the
invocation boundary, carrying the structured ``{statusCode, key, body}``
payload that the trigger source receives.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import Literal, TypeAlias

from .s3_errors import S3OperationError


JsonValue: TypeAlias = str | int | float | bool | None | dict[str, "JsonValue"] | list["JsonValue"]
JsonDict: TypeAlias = dict[str, JsonValue]


@dataclass(frozen=True)
class SourceReadError:
    """Head metadata or tag set could not be read from the source realm."""

    bucket: str
    key: str
    cause: S3OperationError
    kind: Literal["SourceReadError"] = "SourceReadError"


@dataclass(frozen=True)
class StreamError:
    """The source body stream failed while it was being piped to the destination."""

    bucket: str
    key: str
    cause: S3OperationError
    bytes_streamed: int = 0
    kind: Literal["StreamError"] = "StreamError"


@dataclass(frozen=True)
class DestinationWriteError:
    """The destination realm rejected the write for a reason other than the source stream."""

    bucket: str
    key: str
    cause: S3OperationError
    kind: Literal["DestinationWriteError"] = "DestinationWriteError"


@dataclass(frozen=True)
class IntegrityError:
    """Destination digest differs from the source digest captured before the transfer.

    The bytes differ; nothing failed on the network.
    """

    key: str
    expected_digest: str
    actual_digest: str
    kind: Literal["IntegrityError"] = "IntegrityError"


TransferError = SourceReadError | StreamError | DestinationWriteError | IntegrityError


@dataclass(frozen=True)
class ReplicationExhausted:
    """Attempt budget consumed; wraps the failure of the final attempt."""

    key: str
    attempts: int
    cause: TransferError
    kind: Literal["ReplicationExhausted"] = "ReplicationExhausted"


@dataclass(frozen=True)
class DeleteError:
    """The destination realm rejected the delete."""

    bucket: str
    key: str
    cause: S3OperationError
    kind: Literal["DeleteError"] = "DeleteError"


ReplicationError = ReplicationExhausted | DeleteError


@dataclass(frozen=True)
class EnvelopeError:
    """The change notification could not be turned into change descriptors."""

    message: str
    path: str = ""
    kind: Literal["EnvelopeError"] = "EnvelopeError"


def status_code_of(error: ReplicationError | TransferError) -> str | None:
    """Return the collaborator error code underlying a replication error.

    A digest mismatch has no collaborator error behind it and yields ``None``.
    """
    match error:
        case ReplicationExhausted(cause=cause):
            return status_code_of(cause)
        case SourceReadError(cause=cause) | StreamError(cause=cause) | DestinationWriteError(
            cause=cause
        ) | DeleteError(cause=cause):
            return cause.error_code
        case IntegrityError():
            return None


def error_key(error: ReplicationError) -> str:
    """Object key a terminal error refers to."""
    return error.key


def error_body(error: ReplicationError | EnvelopeError) -> JsonDict:
    """Structured (JSON-ready) form of an error ADT, nested causes included."""
    body: JsonDict = dataclasses.asdict(error)
    return body


class ReplicationAborted(Exception):
    """Unrecoverable invocation failure.

    ``str(exc)`` is the JSON serialization of ``payload`` so that a runtime
    that only records the exception message still delivers the structured
    value to dead-letter queues and alarms.
    """

    def __init__(self, status_code: str | None, key: str, body: JsonDict) -> None:
        self.payload: JsonDict = {"statusCode": status_code, "key": key, "body": body}
        super().__init__(json.dumps(self.payload))

    @property
    def status_code(self) -> str | None:
        value = self.payload["statusCode"]
        return value if isinstance(value, str) else None

    @property
    def key(self) -> str:
        value = self.payload["key"]
        return value if isinstance(value, str) else ""

    @classmethod
    def from_error(cls, error: ReplicationError) -> ReplicationAborted:
        """Wrap a terminal replication error into the boundary exception."""
        return cls(status_code_of(error), error_key(error), error_body(error))

    @classmethod
    def from_envelope_error(cls, error: EnvelopeError) -> ReplicationAborted:
        """Wrap a malformed-notification error; there is no object key to report."""
        return cls("InvalidEnvelope", "", error_body(error))


__all__ = [
    "SourceReadError",
    "StreamError",
    "DestinationWriteError",
    "IntegrityError",
    "TransferError",
    "ReplicationExhausted",
    "DeleteError",
    "ReplicationError",
    "EnvelopeError",
    "ReplicationAborted",
    "status_code_of",
    "error_body",
]
