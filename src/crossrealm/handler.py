"""
Invocation entrypoint.

``lambda_handler`` is what the function runtime calls for each notification.
Settings, the event loop and both realm clients are built on the first
invocation and reused by every later invocation of the same process; nothing
in that runtime is mutated after construction.
"""

from __future__ import annotations

import asyncio
import logging

from .config import ConfigError, ReplicatorSettings, load_settings
from .replication.dispatcher import ReplicationDispatcher
from .replication.errors import JsonDict, JsonValue, ReplicationAborted, ReplicationError
from .replication.events import parse_envelope
from .replication.models import ChangeDescriptor, EventKind
from .replication.realms import RealmClients
from .result import Failure, Success


_logger = logging.getLogger(__name__)


def action_of(descriptor: ChangeDescriptor) -> str:
    return "delete" if descriptor.event_kind is EventKind.REMOVED else "copy"


async def handle_event(event: object, dispatcher: ReplicationDispatcher) -> JsonDict:
    """
    Replicate every change carried by one notification.

    Records are dispatched one after another. A failing record does not stop
    the remaining ones; once all ran, the first failure is raised.

    Args:
        event: Decoded invocation payload
        dispatcher: Engine wired to the realm clients

    Returns:
        ``{"statusCode": 200, "processed": [{"key", "action"}, ...]}``

    Raises:
        ReplicationAborted: Malformed envelope or any unrecoverable record failure
    """
    match parse_envelope(event):
        case Failure(envelope_error):
            _logger.error(f"Rejected notification: {envelope_error}")
            raise ReplicationAborted.from_envelope_error(envelope_error)
        case Success(descriptors):
            pass

    if not descriptors:
        _logger.info("Notification carried no change records")

    processed: list[JsonValue] = []
    failures: list[ReplicationError] = []
    for descriptor in descriptors:
        match await dispatcher.dispatch(descriptor):
            case Success(_):
                processed.append({"key": descriptor.object_key, "action": action_of(descriptor)})
            case Failure(error):
                _logger.error(f"ERROR: {error}")
                failures.append(error)

    if failures:
        raise ReplicationAborted.from_error(failures[0])
    return {"statusCode": 200, "processed": processed}


def configuration_aborted(error: ConfigError) -> ReplicationAborted:
    return ReplicationAborted(
        "InvalidConfiguration", "", {"kind": error.kind, "message": str(error.error)}
    )


class ReplicatorRuntime:
    """Settings, event loop and realm clients for the lifetime of the process."""

    def __init__(self, settings: ReplicatorSettings) -> None:
        self.settings = settings
        logging.getLogger("crossrealm").setLevel(settings.log_level)
        self._loop = asyncio.new_event_loop()
        self._realms = RealmClients(settings)
        self._loop.run_until_complete(self._realms.__aenter__())
        self.dispatcher = self._realms.dispatcher()

    def handle(self, event: object) -> JsonDict:
        return self._loop.run_until_complete(handle_event(event, self.dispatcher))

    def close(self) -> None:
        self._loop.run_until_complete(self._realms.__aexit__(None, None, None))
        self._loop.close()


_runtime: ReplicatorRuntime | None = None


def get_runtime() -> ReplicatorRuntime:
    """Build the process runtime on first use.

    Raises:
        ReplicationAborted: If the environment does not hold valid settings
    """
    global _runtime
    if _runtime is None:
        match load_settings():
            case Failure(error):
                _logger.error(str(error))
                raise configuration_aborted(error)
            case Success(settings):
                _runtime = ReplicatorRuntime(settings)
    return _runtime


def lambda_handler(event: object, context: object = None) -> JsonDict:
    return get_runtime().handle(event)
