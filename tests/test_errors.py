"""Tests for error classification."""

import pytest
from pydantic import BaseModel, ValidationError

from calboard.api.errors import (
    ErrorKind,
    NotFoundError,
    ValidationFailure,
    classify_error,
)


class _Strict(BaseModel):
    count: int


def _validation_error() -> ValidationError:
    try:
        _Strict(count="many")
    except ValidationError as e:
        return e
    raise AssertionError("expected a validation error")


@pytest.mark.parametrize("exc,kind,status", [
    (NotFoundError("Event not found"), ErrorKind.NOT_FOUND, 404),
    (ValidationFailure("Expected an array of events"), ErrorKind.VALIDATION, 400),
    (RuntimeError("disk on fire"), ErrorKind.INTERNAL, 500),
    (KeyError("id"), ErrorKind.INTERNAL, 500),
])
def test_classify_error(exc, kind, status):
    classified = classify_error(exc)

    assert classified.kind == kind
    assert classified.status_code == status


def test_domain_messages_pass_through():
    assert classify_error(NotFoundError("Task not found")).message == "Task not found"


def test_internal_details_are_hidden():
    classified = classify_error(RuntimeError("password=hunter2"))

    assert classified.message == "Internal server error"
    assert "hunter2" not in classified.message


def test_pydantic_errors_are_validation():
    classified = classify_error(_validation_error())

    assert classified.kind == ErrorKind.VALIDATION
    assert classified.message.startswith("count:")
