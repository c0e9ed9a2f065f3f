"""Operator CLI for the cross-realm replicator.

Usage:
    python -m crossrealm replay <event.json>
    python -m crossrealm copy <source-bucket> <key>
    python -m crossrealm delete <key>

Examples:
    # Re-run a notification captured from a dead-letter queue
    python -m crossrealm replay failed-event.json

    # Replicate one object by hand (key as stored, not percent-encoded)
    python -m crossrealm copy assets "reports/2024 q1.pdf"

    # Propagate a deletion by hand
    python -m crossrealm delete reports/old.pdf

Settings are read from the same environment variables as the function
runtime (REPLICA_REGION, REPLICA_BUCKET, REPLICA_CREDENTIALS, ...).

Exit codes:
    0: Success
    1: Replication failed
    2: Configuration or input error
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

from .config import ReplicatorSettings, load_settings
from .handler import handle_event
from .replication.dispatcher import ReplicationDispatcher
from .replication.errors import ReplicationAborted, status_code_of
from .replication.models import ChangeDescriptor, EventKind
from .replication.realms import RealmClients
from .result import Failure, Success


async def run_descriptor(dispatcher: ReplicationDispatcher, descriptor: ChangeDescriptor) -> int:
    """Dispatch one descriptor and print the outcome. Returns the exit code."""
    match await dispatcher.dispatch(descriptor):
        case Success(_):
            print(f"✓ {descriptor.event_name} {descriptor.object_key}")
            return 0
        case Failure(error):
            print(
                f"✗ {descriptor.event_name} {descriptor.object_key} failed "
                f"(statusCode={status_code_of(error)}): {error}",
                file=sys.stderr,
            )
            return 1
    raise AssertionError("Unreachable")


async def run_event(dispatcher: ReplicationDispatcher, event: object) -> int:
    """Run a saved notification through the handler. Returns the exit code."""
    try:
        summary = await handle_event(event, dispatcher)
    except ReplicationAborted as aborted:
        print(json.dumps(aborted.payload, indent=2), file=sys.stderr)
        return 2 if aborted.status_code == "InvalidEnvelope" else 1
    print(json.dumps(summary, indent=2))
    return 0


async def cmd_copy(settings: ReplicatorSettings, source_bucket: str, key: str) -> int:
    descriptor = ChangeDescriptor(
        event_kind=EventKind.CREATED,
        event_name="ObjectCreated:Manual",
        source_bucket=source_bucket,
        object_key=key,
    )
    async with RealmClients(settings) as realms:
        return await run_descriptor(realms.dispatcher(), descriptor)


async def cmd_delete(settings: ReplicatorSettings, key: str) -> int:
    descriptor = ChangeDescriptor(
        event_kind=EventKind.REMOVED,
        event_name="ObjectRemoved:Manual",
        source_bucket="",
        object_key=key,
    )
    async with RealmClients(settings) as realms:
        return await run_descriptor(realms.dispatcher(), descriptor)


async def cmd_replay(settings: ReplicatorSettings, event: object) -> int:
    async with RealmClients(settings) as realms:
        return await run_event(realms.dispatcher(), event)


def load_event(path: Path) -> object | None:
    """Read a notification JSON file; prints the problem and returns None on failure."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            event: object = json.load(handle)
    except (OSError, json.JSONDecodeError) as e:
        print(f"✗ Cannot read event file {path}: {e}", file=sys.stderr)
        return None
    return event


def main() -> NoReturn:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Cross-realm object replicator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="Process a saved change notification")
    replay_parser.add_argument("event_file", type=Path, help="Path to notification JSON")

    copy_parser = subparsers.add_parser("copy", help="Replicate one object with retry")
    copy_parser.add_argument("source_bucket", help="Source bucket name")
    copy_parser.add_argument("key", help="Object key (decoded)")

    delete_parser = subparsers.add_parser("delete", help="Delete one object from the destination")
    delete_parser.add_argument("key", help="Object key (decoded)")

    args = parser.parse_args()

    match load_settings():
        case Failure(error):
            print(f"✗ {error}", file=sys.stderr)
            sys.exit(2)
        case Success(settings):
            pass

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "replay":
        event = load_event(args.event_file)
        if event is None:
            sys.exit(2)
        exit_code = asyncio.run(cmd_replay(settings, event))
    elif args.command == "copy":
        exit_code = asyncio.run(cmd_copy(settings, args.source_bucket, args.key))
    elif args.command == "delete":
        exit_code = asyncio.run(cmd_delete(settings, args.key))
    else:
        parser.print_help()
        sys.exit(2)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
