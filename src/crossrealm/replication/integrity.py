"""Copy integrity verification.

Digests are opaque tokens produced by the storage realms (S3 ETags, quotes
included). They are compared verbatim: no normalization and no local hash
computation, because the digest format belongs to the realm.
"""

from __future__ import annotations

from ..result import Failure, Result, Success
from .errors import IntegrityError


def verify_digest(key: str, expected_digest: str, actual_digest: str) -> Result[None, IntegrityError]:
    """
    Compare the source digest captured before the transfer with the one the
    destination returned for the write.

    Args:
        key: Object key (for diagnostics)
        expected_digest: Source ETag from the pre-transfer HEAD
        actual_digest: ETag returned by the destination put

    Returns:
        Success(None) if the tokens are equal, otherwise Failure(IntegrityError)
    """
    if expected_digest == actual_digest:
        return Success(None)
    return Failure(
        IntegrityError(key=key, expected_digest=expected_digest, actual_digest=actual_digest)
    )
