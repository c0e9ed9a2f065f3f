# tests/conftest.py
"""Global PyTest fixtures for the test-suite.

No test talks to a real storage realm: both realms are in-memory
``FakeS3Client`` instances from ``tests.helpers``.
"""

from __future__ import annotations

import logging
import signal
from types import FrameType
from typing import Callable, Generator

import pytest

from crossrealm.replication.deletion import DeletionPropagator
from crossrealm.replication.s3_operations import S3Operations
from crossrealm.replication.transfer import ObjectTransfer

from tests.helpers import DESTINATION_BUCKET, FakeS3Client, Realms, SleepRecorder, make_realms

DEFAULT_TEST_TIMEOUT_SECONDS = 10.0


def _build_timeout_handler(
    timeout_seconds: float,
) -> Callable[[int, FrameType | None], None]:
    """Create SIGALRM handler that fails the test when timeout is reached."""

    def _handle_timeout(signum: int, frame: FrameType | None) -> None:
        pytest.fail(
            f"Test exceeded {timeout_seconds:.0f}s timeout (includes setup/teardown)",
            pytrace=True,
        )

    return _handle_timeout


def _resolve_timeout_seconds(request: pytest.FixtureRequest) -> float:
    """Return timeout for current test (marker override allowed)."""
    marker = request.node.get_closest_marker("timeout")
    if marker is None:
        return DEFAULT_TEST_TIMEOUT_SECONDS

    raw_value = marker.kwargs.get("seconds", marker.args[0] if marker.args else None)
    if raw_value is None:
        pytest.fail("timeout marker requires seconds argument", pytrace=True)

    seconds = float(raw_value)
    if seconds <= 0:
        pytest.fail("timeout marker must be positive seconds", pytrace=True)

    return seconds


@pytest.fixture(autouse=True)
def per_test_timeout(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Fail any test that runs longer than the default timeout.

    Retry tests replace ``asyncio.sleep``; a real backoff sleep leaking into
    a test shows up here instead of hanging the run.
    """
    if not hasattr(signal, "SIGALRM") or not hasattr(signal, "setitimer"):
        yield
        return

    timeout_seconds = _resolve_timeout_seconds(request)
    handler = _build_timeout_handler(timeout_seconds)
    previous_handler = signal.getsignal(signal.SIGALRM)
    signal.signal(signal.SIGALRM, handler)
    signal.setitimer(signal.ITIMER_REAL, timeout_seconds)
    try:
        yield
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0.0)
        signal.signal(signal.SIGALRM, previous_handler)


@pytest.fixture(autouse=True)
def crossrealm_logging(caplog: pytest.LogCaptureFixture) -> None:
    """Capture engine logs at DEBUG so tests can assert on them."""
    caplog.set_level(logging.DEBUG, logger="crossrealm")


# =========================================================================== #
#                          FAKE REALM FIXTURES                                #
# =========================================================================== #


@pytest.fixture
def source_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def destination_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def object_transfer(source_client: FakeS3Client, destination_client: FakeS3Client) -> ObjectTransfer:
    """Object Transfer between the two fake realms with a tiny chunk size."""
    return ObjectTransfer(
        S3Operations(source_client),
        S3Operations(destination_client),
        DESTINATION_BUCKET,
        chunk_size=8,
    )


@pytest.fixture
def deletion_propagator(destination_client: FakeS3Client) -> DeletionPropagator:
    return DeletionPropagator(S3Operations(destination_client), DESTINATION_BUCKET)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def realms() -> Realms:
    """Fully wired engine over two fake realms with recorded backoff sleeps."""
    return make_realms()
