"""Parsing of change notifications into change descriptors.

Two shapes are accepted:

* SNS fan-out: ``{"Records": [{"Sns": {"Message": "<S3 event JSON>"}}]}``
* Direct S3 notification: ``{"Records": [{"eventName": ..., "s3": {...}}]}``

Every record of every entry is turned into a descriptor, in delivery order.
Object keys arrive percent-encoded and are decoded with
``encodeURIComponent``'s inverse (``+`` is not treated as a space).
"""

from __future__ import annotations

import json
import re
from urllib.parse import unquote

from ..result import Failure, Result, Success
from .errors import EnvelopeError
from .models import ChangeDescriptor


_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_object_key(raw_key: str) -> str:
    """Percent-decode an object key from a notification.

    >>> decode_object_key("a%20b")
    'a b'

    Raises:
        ValueError: If an escape is malformed or the escapes are not valid UTF-8
    """
    if _MALFORMED_ESCAPE.search(raw_key):
        raise ValueError(f"malformed percent-escape in {raw_key!r}")
    return unquote(raw_key, errors="strict")


def _records_of(container: object, path: str) -> Result[list[object], EnvelopeError]:
    if not isinstance(container, dict):
        return Failure(EnvelopeError(message="Expected a JSON object", path=path))
    records = container.get("Records")
    if records is None and container.get("Event") == "s3:TestEvent":
        return Success([])
    if not isinstance(records, list):
        return Failure(EnvelopeError(message="Missing 'Records' list", path=f"{path}.Records"))
    return Success(records)


def _field(container: object, name: str, path: str) -> Result[object, EnvelopeError]:
    if isinstance(container, dict) and name in container:
        return Success(container[name])
    return Failure(EnvelopeError(message=f"Missing field '{name}'", path=f"{path}.{name}"))


def parse_s3_record(record: object, path: str) -> Result[ChangeDescriptor, EnvelopeError]:
    """Build a descriptor from one S3 event record."""
    match (
        _field(record, "eventName", path),
        _field(record, "s3", path).and_then(lambda s3: _field(s3, "bucket", f"{path}.s3"))
        .and_then(lambda bucket: _field(bucket, "name", f"{path}.s3.bucket")),
        _field(record, "s3", path).and_then(lambda s3: _field(s3, "object", f"{path}.s3"))
        .and_then(lambda obj: _field(obj, "key", f"{path}.s3.object")),
    ):
        case Success(str(event_name)), Success(str(bucket)), Success(str(raw_key)):
            try:
                object_key = decode_object_key(raw_key)
            except ValueError as e:
                return Failure(
                    EnvelopeError(message=f"Invalid object key: {e}", path=f"{path}.s3.object.key")
                )
            return Success(ChangeDescriptor.from_event(event_name, bucket, object_key))
        case Failure(error), _, _:
            return Failure(error)
        case _, Failure(error), _:
            return Failure(error)
        case _, _, Failure(error):
            return Failure(error)
        case _:
            return Failure(EnvelopeError(message="Record fields must be strings", path=path))


def _parse_s3_event(event: object, path: str) -> Result[list[ChangeDescriptor], EnvelopeError]:
    match _records_of(event, path):
        case Failure(error):
            return Failure(error)
        case Success(records):
            descriptors: list[ChangeDescriptor] = []
            for index, record in enumerate(records):
                match parse_s3_record(record, f"{path}.Records[{index}]"):
                    case Failure(error):
                        return Failure(error)
                    case Success(descriptor):
                        descriptors.append(descriptor)
            return Success(descriptors)
    raise AssertionError("Unreachable")


def _unwrap_sns(entry: object, path: str) -> Result[object, EnvelopeError]:
    match _field(entry, "Sns", path).and_then(lambda sns: _field(sns, "Message", f"{path}.Sns")):
        case Success(str(message)):
            try:
                return Success(json.loads(message))
            except json.JSONDecodeError as e:
                return Failure(
                    EnvelopeError(message=f"Invalid JSON message: {e}", path=f"{path}.Sns.Message")
                )
        case Success(_):
            return Failure(
                EnvelopeError(message="SNS message must be a string", path=f"{path}.Sns.Message")
            )
        case Failure(error):
            return Failure(error)
    raise AssertionError("Unreachable")


def parse_envelope(event: object) -> Result[tuple[ChangeDescriptor, ...], EnvelopeError]:
    """Turn an invocation event into the change descriptors it carries.

    Args:
        event: Decoded invocation payload

    Returns:
        Success(descriptors in delivery order) or Failure(EnvelopeError) naming
        the first malformed field
    """
    match _records_of(event, "$"):
        case Failure(error):
            return Failure(error)
        case Success(entries):
            pass

    descriptors: list[ChangeDescriptor] = []
    for index, entry in enumerate(entries):
        path = f"$.Records[{index}]"
        if isinstance(entry, dict) and "Sns" in entry:
            parsed = _unwrap_sns(entry, path).and_then(
                lambda message, p=path: _parse_s3_event(message, f"{p}.Sns.Message")
            )
        else:
            parsed = parse_s3_record(entry, path).map(lambda descriptor: [descriptor])
        match parsed:
            case Failure(error):
                return Failure(error)
            case Success(found):
                descriptors.extend(found)
    return Success(tuple(descriptors))
