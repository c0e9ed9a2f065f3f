"""
Process-wide S3 clients for the source and destination realms.

The source realm is reached with the ambient identity of the process (the
default credential chain); the destination realm with the explicit
credentials from the settings. Both clients are created once, when the
context is entered, and only issue independent requests afterwards.
"""

from __future__ import annotations

import logging
from types import TracebackType

import aioboto3
from botocore.config import Config

from ..config import ReplicatorSettings
from .deletion import DeletionPropagator
from .dispatcher import ReplicationDispatcher
from .protocols import AsyncContextManagerProtocol, S3ClientProtocol
from .retry import RetryController, Sleep
from .s3_operations import S3Operations
from .transfer import ObjectTransfer


_logger = logging.getLogger(__name__)


def source_client_config() -> Config:
    """Connection pooling and adaptive throttling retries for source reads."""
    return Config(
        max_pool_connections=50,
        connect_timeout=5,
        read_timeout=60,
        retries={"max_attempts": 3, "mode": "adaptive"},
    )


def destination_client_config(region: str) -> Config:
    """
    Client settings for writes whose body is the live source stream.

    The body can be read exactly once, front to back, so botocore must not
    read it ahead of the send:

    - no resend on failure (``total_max_attempts=1``),
    - no flexible checksum (``when_required``): it would either seek the body
      or switch to aws-chunked encoding, which conflicts with the explicit
      ``Content-Length``,
    - no SigV4 payload hash (``payload_signing_enabled=False``), which would
      hash the whole body before sending it; the request is signed with
      ``UNSIGNED-PAYLOAD`` and integrity is checked through the returned ETag.
    """
    return Config(
        region_name=region,
        max_pool_connections=50,
        connect_timeout=5,
        read_timeout=60,
        retries={"total_max_attempts": 1, "mode": "standard"},
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
        s3={"payload_signing_enabled": False},
    )


class RealmClients:
    """
    Async context manager owning both realm clients.

    Usage:
        async with RealmClients(settings) as realms:
            dispatcher = realms.dispatcher()
            result = await dispatcher.dispatch(descriptor)
    """

    def __init__(self, settings: ReplicatorSettings) -> None:
        self.settings = settings
        self._source_context: AsyncContextManagerProtocol | None = None
        self._destination_context: AsyncContextManagerProtocol | None = None
        self.source: S3Operations | None = None
        self.destination: S3Operations | None = None

    async def __aenter__(self) -> RealmClients:
        settings = self.settings
        credentials = settings.destination_credentials

        source_session = aioboto3.Session(region_name=settings.source_region)
        destination_session = aioboto3.Session(
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key.get_secret_value(),
            region_name=settings.destination_region,
        )

        self._source_context = source_session.client(
            "s3", endpoint_url=settings.source_endpoint_url, config=source_client_config()
        )
        self._destination_context = destination_session.client(
            "s3",
            endpoint_url=settings.destination_endpoint_url,
            config=destination_client_config(settings.destination_region),
        )

        source_client: S3ClientProtocol = await self._source_context.__aenter__()
        destination_client: S3ClientProtocol = await self._destination_context.__aenter__()
        self.source = S3Operations(source_client)
        self.destination = S3Operations(destination_client)
        _logger.info(
            f"Realm clients ready: destination bucket {settings.destination_bucket} "
            f"in {settings.destination_region}"
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        for context in (self._destination_context, self._source_context):
            if context is not None:
                await context.__aexit__(exc_type, exc_val, exc_tb)
        self._source_context = None
        self._destination_context = None
        self.source = None
        self.destination = None
        return None

    def dispatcher(self, sleep: Sleep | None = None) -> ReplicationDispatcher:
        """Wire the engine on top of the open clients."""
        if self.source is None or self.destination is None:
            raise RuntimeError("Realm clients not initialized. Use 'async with' context manager.")
        return build_dispatcher(self.settings, self.source, self.destination, sleep)


def build_dispatcher(
    settings: ReplicatorSettings,
    source: S3Operations,
    destination: S3Operations,
    sleep: Sleep | None = None,
) -> ReplicationDispatcher:
    """Assemble transfer, retry, deletion and dispatch components from settings."""
    transfer = ObjectTransfer(
        source, destination, settings.destination_bucket, settings.stream_chunk_size
    )
    retry = (
        RetryController(transfer, settings.max_attempts, settings.backoff_step_seconds)
        if sleep is None
        else RetryController(transfer, settings.max_attempts, settings.backoff_step_seconds, sleep)
    )
    deletion = DeletionPropagator(destination, settings.destination_bucket)
    return ReplicationDispatcher(retry, deletion)
