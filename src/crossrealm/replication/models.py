"""Immutable records flowing through the replication engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ..result import Result
from .errors import TransferError


REMOVAL_EVENT_PREFIX = "ObjectRemoved"
CREATION_EVENT_PREFIX = "ObjectCreated"


class EventKind(Enum):
    """Coarse class of a storage change notification."""

    CREATED = "created"
    REMOVED = "removed"
    OTHER = "other"

    @classmethod
    def from_event_name(cls, event_name: str) -> EventKind:
        """Classify an S3 event name such as ``ObjectRemoved:Delete`` by prefix."""
        if event_name.startswith(REMOVAL_EVENT_PREFIX):
            return cls.REMOVED
        if event_name.startswith(CREATION_EVENT_PREFIX):
            return cls.CREATED
        return cls.OTHER


@dataclass(frozen=True)
class ChangeDescriptor:
    """One storage change, normalized from the notification envelope.

    Attributes:
        event_kind: Coarse event class used for routing
        event_name: Raw event name as delivered (kept for logging)
        source_bucket: Bucket the change happened in
        object_key: Percent-decoded object key
    """

    event_kind: EventKind
    event_name: str
    source_bucket: str
    object_key: str

    @classmethod
    def from_event(cls, event_name: str, source_bucket: str, object_key: str) -> ChangeDescriptor:
        return cls(
            event_kind=EventKind.from_event_name(event_name),
            event_name=event_name,
            source_bucket=source_bucket,
            object_key=object_key,
        )


Tag = tuple[str, str]


@dataclass(frozen=True)
class ObjectMetadata:
    """Snapshot of the source object taken before its body is streamed.

    Attributes:
        content_length: Body size in bytes
        content_type: MIME type, if the source object has one
        user_metadata: ``x-amz-meta-*`` pairs (read-only view)
        tags: Tag set in source order
        digest: Source ETag; the destination must report the same token
    """

    content_length: int
    content_type: str | None
    user_metadata: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    tags: tuple[Tag, ...] = ()
    digest: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.user_metadata, MappingProxyType):
            object.__setattr__(self, "user_metadata", MappingProxyType(dict(self.user_metadata)))


@dataclass(frozen=True)
class TransferAttempt:
    """Outcome of one pass through Object Transfer. Never persisted."""

    attempt_number: int
    outcome: Result[None, TransferError]

    @property
    def succeeded(self) -> bool:
        return self.outcome.is_success()


__all__ = [
    "EventKind",
    "ChangeDescriptor",
    "Tag",
    "ObjectMetadata",
    "TransferAttempt",
    "REMOVAL_EVENT_PREFIX",
]
