"""Custom exception hierarchy for magnetic-grid."""

from __future__ import annotations


class MagneticGridError(Exception):
    """Base exception for all magnetic-grid errors."""


class ConfigurationError(MagneticGridError):
    """Settings are missing or invalid."""


class LayoutDefinitionError(MagneticGridError):
    """Error in layout structure or serialized layout content."""


class LayoutValidationError(LayoutDefinitionError):
    """A layout failed validation (overlaps, bad widths, out of bounds)."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        error_list = "\n  - ".join(errors)
        super().__init__(f"Layout validation failed:\n  - {error_list}")


class UnknownFieldError(MagneticGridError):
    """Field id is not part of the layout or the field registry."""

    def __init__(self, field_id: str, available: list[str] | None = None):
        self.field_id = field_id
        self.available = available
        msg = f"Unknown field: {field_id}"
        if available:
            from difflib import get_close_matches

            suggestions = get_close_matches(field_id, available, n=3, cutoff=0.4)
            if suggestions:
                msg += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(msg)


class StorageError(MagneticGridError):
    """Error reading or writing a persisted layout."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Storage error for '{key}': {message}")
