"""
Shared Protocol definitions for the realm S3 clients.

Both realms are typed against the same structural protocol so the engine can
be driven by aioboto3 clients in production and by in-memory fakes in tests.
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol, runtime_checkable

from botocore.config import Config


# ---------------------------------------------------------------------------
# S3 Response Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class StreamingBodyProtocol(Protocol):
    """Protocol for the aiobotocore StreamingBody of a get_object response."""

    async def read(self, amt: int | None = None) -> bytes: ...

    def close(self) -> None: ...


class S3ResponseProtocol(Protocol):
    """Protocol for S3 response dictionaries."""

    def __getitem__(self, key: str) -> object: ...

    def get(self, key: str, default: object = None) -> object: ...


# ---------------------------------------------------------------------------
# S3 Client Protocol
# ---------------------------------------------------------------------------


class S3ClientProtocol(Protocol):
    """
    Protocol for an async S3 client.

    Only the calls the replication engine issues: reads against the source
    realm and writes/deletes against the destination realm.
    """

    async def head_object(self, **kwargs: object) -> S3ResponseProtocol: ...
    async def get_object_tagging(self, **kwargs: object) -> S3ResponseProtocol: ...
    async def get_object(self, **kwargs: object) -> S3ResponseProtocol: ...
    async def put_object(self, **kwargs: object) -> S3ResponseProtocol: ...
    async def delete_object(self, **kwargs: object) -> S3ResponseProtocol: ...


# ---------------------------------------------------------------------------
# Async Context Manager / Session Protocols
# ---------------------------------------------------------------------------


class AsyncContextManagerProtocol(Protocol):
    """Protocol for async context manager returned by session.client()."""

    async def __aenter__(self) -> S3ClientProtocol: ...
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None: ...


class SessionProtocol(Protocol):
    """Protocol for aioboto3.Session."""

    def client(
        self,
        service_name: str,
        endpoint_url: str | None = ...,
        config: Config | None = ...,
        **kwargs: object,
    ) -> AsyncContextManagerProtocol: ...


__all__ = [
    "StreamingBodyProtocol",
    "S3ResponseProtocol",
    "S3ClientProtocol",
    "AsyncContextManagerProtocol",
    "SessionProtocol",
]
