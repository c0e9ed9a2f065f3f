"""Helper utilities for Result-based Pydantic validation."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from crossrealm.result import Failure, Result, Success


TModel = TypeVar("TModel", bound=BaseModel)

__all__: list[str] = ["validate_model"]


def validate_model(model_cls: type[TModel], **data: object) -> Result[TModel, ValidationError]:
    """
    Construct a Pydantic model and surface validation issues as a Result.

    Settings are validated once at process start; a bad environment becomes a
    ``Failure`` that the entrypoint reports instead of a traceback from deep
    inside client construction.
    """
    try:
        return Success(model_cls(**data))
    except ValidationError as exc:
        return Failure(exc)
