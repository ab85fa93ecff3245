"""Normalization for incoming request payloads."""

from __future__ import annotations

from typing import Any


def normalize_request(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a normalized copy of the placement request."""
    normalized = dict(payload)
    if "schema_version" not in normalized:
        normalized["schema_version"] = "1.0"
    for key in ("students_path", "tracks_path", "subjects_path"):
        value = normalized.get(key)
        if isinstance(value, str):
            normalized[key] = value.strip()
    return normalized
