"""Process-wide replicator settings, loaded once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Annotated, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from crossrealm.result import Failure, Result, Success
from crossrealm.validation import validate_model


PosInt = Annotated[int, Field(gt=0)]
PosFloat = Annotated[float, Field(gt=0)]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CREDENTIALS_DELIMITER = ":"

# Environment variable → settings field.
ENV_FIELDS: dict[str, str] = {
    "REPLICA_REGION": "destination_region",
    "REPLICA_BUCKET": "destination_bucket",
    "REPLICA_CREDENTIALS": "destination_credentials",
    "REPLICA_ENDPOINT_URL": "destination_endpoint_url",
    "SOURCE_REGION": "source_region",
    "SOURCE_ENDPOINT_URL": "source_endpoint_url",
    "REPLICATION_MAX_ATTEMPTS": "max_attempts",
    "REPLICATION_BACKOFF_SECONDS": "backoff_step_seconds",
    "REPLICATION_CHUNK_SIZE": "stream_chunk_size",
    "LOG_LEVEL": "log_level",
}

# Names read by earlier deployments of the replicator; the current names win.
LEGACY_ENV_FIELDS: dict[str, str] = {
    "CN_REGION": "destination_region",
    "CN_S3_BUCKET": "destination_bucket",
    "SSM_CN_CREDENTIALS": "destination_credentials",
}


class RealmCredentials(BaseModel):
    """Explicit identity for one storage realm. The secret never appears in repr."""

    access_key_id: str = Field(..., min_length=1)
    secret_access_key: SecretStr

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_secret_string(cls, raw: str) -> RealmCredentials:
        """Split ``"<id>:<secret>"`` on the first colon; the secret may contain colons.

        Raises:
            ValueError: If the string has no colon
        """
        key_id, delimiter, secret = raw.partition(CREDENTIALS_DELIMITER)
        if not delimiter:
            raise ValueError("credentials must be '<access-key-id>:<secret-access-key>'")
        return cls(access_key_id=key_id, secret_access_key=SecretStr(secret))


class ReplicatorSettings(BaseModel):
    """Immutable configuration shared by every invocation of the process."""

    destination_region: str = Field(..., min_length=1)
    destination_bucket: str = Field(..., min_length=1)
    destination_credentials: RealmCredentials
    destination_endpoint_url: str | None = None
    source_region: str | None = None
    source_endpoint_url: str | None = None
    max_attempts: PosInt = 5
    backoff_step_seconds: PosFloat = 3.0
    stream_chunk_size: PosInt = 1024 * 1024
    log_level: LogLevel = "INFO"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("destination_credentials", mode="before")
    @classmethod
    def _parse_credentials(cls, value: object) -> object:
        if isinstance(value, str):
            return RealmCredentials.from_secret_string(value)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


@dataclass(frozen=True)
class ConfigError:
    """Settings failed validation."""

    error: ValidationError
    kind: Literal["ConfigError"] = "ConfigError"

    def __str__(self) -> str:
        return f"Invalid replicator configuration: {self.error}"


def load_settings(environ: Mapping[str, str] | None = None) -> Result[ReplicatorSettings, ConfigError]:
    """
    Build settings from environment variables.

    Unset or empty variables fall back to the field default (or fail
    validation when the field is required). ``CN_REGION``, ``CN_S3_BUCKET``
    and ``SSM_CN_CREDENTIALS`` are still honored when the ``REPLICA_*``
    equivalent is unset.

    Args:
        environ: Mapping to read; defaults to ``os.environ``

    Returns:
        Success(ReplicatorSettings) or Failure(ConfigError)
    """
    env = os.environ if environ is None else environ
    data: dict[str, object] = {}
    for mapping in (LEGACY_ENV_FIELDS, ENV_FIELDS):
        data.update({field_name: env[var] for var, field_name in mapping.items() if env.get(var)})
    match validate_model(ReplicatorSettings, **data):
        case Success(settings):
            return Success(settings)
        case Failure(error):
            return Failure(ConfigError(error=error))
    raise AssertionError("Unreachable")
