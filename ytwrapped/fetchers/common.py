"""Helpers shared by the YouTrack fetchers."""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ytwrapped.errors import ProtocolError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], payload: Any) -> ModelT:
    """Validate one API payload, reporting shape mismatches as protocol errors."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        message = f"Unexpected {model.__name__} payload from YouTrack: {exc}"
        raise ProtocolError(message, body=str(payload)) from exc
