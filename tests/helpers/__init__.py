# tests/helpers/__init__.py
"""Shared test utilities for the crossrealm test suite.

Usage:
    >>> from tests.helpers import make_realms, expect_success
    >>> realms = make_realms()
    >>> realms.source.seed("src", "dir/file.txt", b"payload")
    >>> expect_success(await realms.dispatcher.dispatch(descriptor))
"""

from __future__ import annotations

from tests.helpers.constants import (
    ACCESS_KEY_ID,
    BASE_ENVIRON,
    DESTINATION_BUCKET,
    DESTINATION_REGION,
    SECRET_ACCESS_KEY,
    SOURCE_BUCKET,
)
from tests.helpers.factories import (
    Realms,
    SleepRecorder,
    make_realms,
    make_s3_record,
    make_settings,
    make_sns_envelope,
)
from tests.helpers.fake_s3 import FakeS3Client, FakeStreamingBody, client_error, etag_of
from tests.helpers.result_utils import expect_failure, expect_success

__all__ = [
    "ACCESS_KEY_ID",
    "BASE_ENVIRON",
    "DESTINATION_BUCKET",
    "DESTINATION_REGION",
    "SECRET_ACCESS_KEY",
    "SOURCE_BUCKET",
    "Realms",
    "SleepRecorder",
    "make_realms",
    "make_s3_record",
    "make_settings",
    "make_sns_envelope",
    "FakeS3Client",
    "FakeStreamingBody",
    "client_error",
    "etag_of",
    "expect_failure",
    "expect_success",
]
