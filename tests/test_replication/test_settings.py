# tests/test_replication/test_settings.py
"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from crossrealm.config import RealmCredentials, load_settings

from tests.helpers import (
    ACCESS_KEY_ID,
    BASE_ENVIRON,
    DESTINATION_BUCKET,
    DESTINATION_REGION,
    SECRET_ACCESS_KEY,
    expect_failure,
    expect_success,
)


def test_required_fields_and_defaults() -> None:
    settings = expect_success(load_settings(BASE_ENVIRON))

    assert settings.destination_region == DESTINATION_REGION
    assert settings.destination_bucket == DESTINATION_BUCKET
    assert settings.max_attempts == 5
    assert settings.backoff_step_seconds == 3.0
    assert settings.stream_chunk_size == 1024 * 1024
    assert settings.log_level == "INFO"
    assert settings.destination_endpoint_url is None


def test_credentials_split_on_first_colon() -> None:
    """Secrets may contain colons; only the first one separates id from secret."""
    credentials = expect_success(load_settings(BASE_ENVIRON)).destination_credentials

    assert credentials.access_key_id == ACCESS_KEY_ID
    assert credentials.secret_access_key.get_secret_value() == SECRET_ACCESS_KEY


def test_secret_hidden_from_repr() -> None:
    settings = expect_success(load_settings(BASE_ENVIRON))

    assert SECRET_ACCESS_KEY not in repr(settings)


@pytest.mark.parametrize("raw", ["no-delimiter", ":secret-without-id"])
def test_bad_credentials_rejected(raw: str) -> None:
    error = expect_failure(load_settings({**BASE_ENVIRON, "REPLICA_CREDENTIALS": raw}))

    assert "destination_credentials" in str(error)


def test_empty_secret_allowed() -> None:
    credentials = RealmCredentials.from_secret_string("AKIA:")

    assert credentials.access_key_id == "AKIA"
    assert credentials.secret_access_key.get_secret_value() == ""


@pytest.mark.parametrize("missing", ["REPLICA_REGION", "REPLICA_BUCKET", "REPLICA_CREDENTIALS"])
def test_missing_required_variable(missing: str) -> None:
    environ = {k: v for k, v in BASE_ENVIRON.items() if k != missing}

    expect_failure(load_settings(environ))


def test_overrides_are_parsed() -> None:
    settings = expect_success(
        load_settings(
            {
                **BASE_ENVIRON,
                "REPLICATION_MAX_ATTEMPTS": "3",
                "REPLICATION_BACKOFF_SECONDS": "0.5",
                "REPLICA_ENDPOINT_URL": "https://s3.cn-north-1.amazonaws.com.cn",
                "LOG_LEVEL": "debug",
            }
        )
    )

    assert settings.max_attempts == 3
    assert settings.backoff_step_seconds == 0.5
    assert settings.destination_endpoint_url == "https://s3.cn-north-1.amazonaws.com.cn"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("variable", "value"),
    [("REPLICATION_MAX_ATTEMPTS", "0"), ("REPLICATION_BACKOFF_SECONDS", "-1"), ("LOG_LEVEL", "LOUD")],
)
def test_invalid_overrides(variable: str, value: str) -> None:
    expect_failure(load_settings({**BASE_ENVIRON, variable: value}))


def test_settings_are_immutable() -> None:
    settings = expect_success(load_settings(BASE_ENVIRON))

    with pytest.raises(ValidationError):
        settings.destination_bucket = "elsewhere"  # type: ignore[misc]


LEGACY_ENVIRON = {
    "CN_REGION": "cn-northwest-1",
    "CN_S3_BUCKET": "legacy-bucket",
    "SSM_CN_CREDENTIALS": "AKIALEGACY:legacy:secret",
}


def test_legacy_variable_names_accepted() -> None:
    settings = expect_success(load_settings(LEGACY_ENVIRON))

    assert settings.destination_region == "cn-northwest-1"
    assert settings.destination_bucket == "legacy-bucket"
    assert settings.destination_credentials.access_key_id == "AKIALEGACY"
    assert settings.destination_credentials.secret_access_key.get_secret_value() == "legacy:secret"


def test_current_names_take_precedence_over_legacy() -> None:
    settings = expect_success(load_settings({**LEGACY_ENVIRON, **BASE_ENVIRON}))

    assert settings.destination_region == DESTINATION_REGION
    assert settings.destination_bucket == DESTINATION_BUCKET
    assert settings.destination_credentials.access_key_id == ACCESS_KEY_ID
