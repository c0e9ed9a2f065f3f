# src/crossrealm/replication/__init__.py
"""
Replication engine: dispatch, transfer, integrity verification and retry.

A change descriptor is routed either to deletion propagation (single call,
no retry) or to the retry controller, which drives object transfers until
the destination holds a byte-identical copy or the attempt budget runs out.
"""

from __future__ import annotations

from .backoff import RetryScheduled, linear_backoff
from .deletion import DeletionPropagator
from .dispatcher import ReplicationDispatcher
from .errors import (
    DeleteError,
    DestinationWriteError,
    EnvelopeError,
    IntegrityError,
    ReplicationAborted,
    ReplicationError,
    ReplicationExhausted,
    SourceReadError,
    StreamError,
    TransferError,
    status_code_of,
)
from .events import decode_object_key, parse_envelope
from .integrity import verify_digest
from .models import ChangeDescriptor, EventKind, ObjectMetadata, TransferAttempt
from .realms import RealmClients, build_dispatcher
from .retry import Attempting, Exhausted, RetryController, Succeeded
from .s3_errors import S3CallFailed, S3ConnectionFailed, S3OperationError
from .s3_operations import S3Operations
from .transfer import ObjectTransfer, SourceStream, encode_tagging


__all__ = [
    # Records
    "ChangeDescriptor",
    "EventKind",
    "ObjectMetadata",
    "TransferAttempt",
    # Errors
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
    "S3CallFailed",
    "S3ConnectionFailed",
    "S3OperationError",
    # Components
    "linear_backoff",
    "RetryScheduled",
    "verify_digest",
    "ObjectTransfer",
    "SourceStream",
    "encode_tagging",
    "RetryController",
    "Attempting",
    "Succeeded",
    "Exhausted",
    "DeletionPropagator",
    "ReplicationDispatcher",
    # Wiring
    "S3Operations",
    "RealmClients",
    "build_dispatcher",
    "parse_envelope",
    "decode_object_key",
]
