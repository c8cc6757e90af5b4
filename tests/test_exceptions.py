"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from magnetic_grid.exceptions import (
    ConfigurationError,
    LayoutDefinitionError,
    LayoutValidationError,
    MagneticGridError,
    StorageError,
    UnknownFieldError,
)


@pytest.mark.parametrize(
    "exc",
    [
        ConfigurationError("x"),
        LayoutDefinitionError("x"),
        LayoutValidationError(["x"]),
        UnknownFieldError("x"),
        StorageError("key", "x"),
    ],
)
def test_all_derive_from_base(exc):
    assert isinstance(exc, MagneticGridError)


def test_validation_error_is_definition_error():
    assert issubclass(LayoutValidationError, LayoutDefinitionError)


def test_validation_error_lists_errors():
    exc = LayoutValidationError(["first problem", "second problem"])
    assert exc.errors == ["first problem", "second problem"]
    assert "Layout validation failed" in str(exc)
    assert "  - first problem" in str(exc)
    assert "  - second problem" in str(exc)


class TestUnknownFieldError:
    def test_plain_message(self):
        exc = UnknownFieldError("phone")
        assert str(exc) == "Unknown field: phone"
        assert exc.field_id == "phone"

    def test_suggests_close_matches(self):
        exc = UnknownFieldError("emial", ["email", "name", "notes"])
        assert "Did you mean: email?" in str(exc)

    def test_no_suggestion_when_nothing_close(self):
        exc = UnknownFieldError("zzz", ["email", "name"])
        assert "Did you mean" not in str(exc)
        assert exc.available == ["email", "name"]


def test_storage_error_message():
    exc = StorageError("contact_form", "disk full")
    assert exc.key == "contact_form"
    assert str(exc) == "Storage error for 'contact_form': disk full"
