"""Validation for the placement request payload."""

from __future__ import annotations

from typing import Any

from .errors import ValidationError

_REQUIRED_PATH_FIELDS = ("students_path",)
_OPTIONAL_PATH_FIELDS = ("tracks_path", "subjects_path")


def validate_placement_request(payload: dict[str, Any]) -> list[ValidationError]:
    """Check that the request names the files it needs as non-empty paths."""
    errors: list[ValidationError] = []

    for field_name in _REQUIRED_PATH_FIELDS + _OPTIONAL_PATH_FIELDS:
        value = payload.get(field_name)
        if value is None:
            if field_name in _REQUIRED_PATH_FIELDS:
                errors.append(
                    ValidationError(
                        code="missing_field",
                        message=f"Missing required field: {field_name}",
                        path=f"$.{field_name}",
                    )
                )
            continue
        if not isinstance(value, str) or not value.strip():
            errors.append(
                ValidationError(
                    code="invalid_type",
                    message=f"Field must be a non-empty string path: {field_name}",
                    path=f"$.{field_name}",
                )
            )

    return errors
