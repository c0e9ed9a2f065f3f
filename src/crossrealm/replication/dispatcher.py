"""Routes a change descriptor to the copy path or the delete path."""

from __future__ import annotations

import logging
from typing import Protocol

from ..result import Result
from .errors import DeleteError, ReplicationError, ReplicationExhausted
from .models import ChangeDescriptor, EventKind


_logger = logging.getLogger(__name__)


class CopyPath(Protocol):
    async def with_retry(
        self, source_bucket: str, key: str, max_attempts: int | None = None
    ) -> Result[None, ReplicationExhausted]: ...


class DeletePath(Protocol):
    async def propagate_delete(self, key: str) -> Result[None, DeleteError]: ...


class ReplicationDispatcher:
    """Exactly one of the two paths runs per descriptor; its result is returned unchanged."""

    def __init__(self, copy_path: CopyPath, delete_path: DeletePath) -> None:
        self._copy_path = copy_path
        self._delete_path = delete_path

    async def dispatch(self, descriptor: ChangeDescriptor) -> Result[None, ReplicationError]:
        _logger.info(
            f"Processing {descriptor.event_name} {descriptor.source_bucket}/{descriptor.object_key}"
        )
        result: Result[None, ReplicationError]
        match descriptor.event_kind:
            case EventKind.REMOVED:
                result = await self._delete_path.propagate_delete(descriptor.object_key)
            case EventKind.CREATED | EventKind.OTHER:
                result = await self._copy_path.with_retry(
                    descriptor.source_bucket, descriptor.object_key
                )
        return result
