"""JSON schema validation for placement inputs and output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import ValidationReport

_SCHEMA_DIR = Path(__file__).resolve().parents[3] / "schema"

_SCHEMA_BY_PAYLOAD = {
    "placement_request": "placement_request.schema.json",
    "students": "placement_students.schema.json",
    "tracks": "placement_tracks.schema.json",
    "subjects": "placement_subjects.schema.json",
}
_OUTPUT_SCHEMA = "placement_output.schema.json"


def _load_schema(schema_file: str) -> dict[str, Any]:
    return json.loads((_SCHEMA_DIR / schema_file).read_text(encoding="utf-8"))


def validate_inputs_with_schema(payloads: dict[str, Any]) -> ValidationReport:
    report = ValidationReport()

    for payload_name, schema_file in _SCHEMA_BY_PAYLOAD.items():
        if payload_name not in payloads:
            continue
        _validate_node(
            value=payloads[payload_name],
            schema=_load_schema(schema_file),
            path=f"$.{payload_name}",
            report=report,
        )

    return report


def validate_placement_output_with_schema(placement_output: dict[str, Any]) -> ValidationReport:
    report = ValidationReport()
    _validate_node(
        value=placement_output,
        schema=_load_schema(_OUTPUT_SCHEMA),
        path="$.placement_output",
        report=report,
    )
    return report


def _validate_node(*, value: Any, schema: dict[str, Any], path: str, report: ValidationReport) -> None:
    expected_type = schema.get("type")
    if expected_type and not _matches_type(value, expected_type):
        report.add_error(
            code="INVALID_TYPE",
            message=f"Expected type {expected_type}, got {type(value).__name__}",
            field_path=path,
        )
        return

    if "enum" in schema and value not in schema["enum"]:
        report.add_error(
            code="INVALID_ENUM_VALUE",
            message=f"Value {value!r} not in enum",
            field_path=path,
        )

    if isinstance(value, dict):
        for key in schema.get("required", []):
            if key not in value:
                report.add_error(
                    code="MISSING_REQUIRED_FIELD",
                    message=f"Missing required field: {key}",
                    field_path=f"{path}.{key}",
                )

        properties = schema.get("properties", {})
        if schema.get("additionalProperties") is False:
            for key in value:
                if key not in properties:
                    report.add_error(
                        code="UNKNOWN_FIELD",
                        message=f"Unknown field: {key}",
                        field_path=f"{path}.{key}",
                        suggested_fix="Remove unsupported key or use one of schema-defined fields.",
                    )

        for key, prop_schema in properties.items():
            if key in value:
                _validate_node(value=value[key], schema=prop_schema, path=f"{path}.{key}", report=report)

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            for key, item in value.items():
                if key not in properties:
                    _validate_node(value=item, schema=additional, path=f"{path}.{key}", report=report)

    elif isinstance(value, list):
        min_items = schema.get("minItems")
        if min_items is not None and len(value) < min_items:
            report.add_error(
                code="EMPTY_ARRAY_NOT_ALLOWED",
                message=f"Array must have at least {min_items} items",
                field_path=path,
            )
        items_schema = schema.get("items")
        if isinstance(items_schema, dict):
            for idx, item in enumerate(value):
                _validate_node(value=item, schema=items_schema, path=f"{path}[{idx}]", report=report)

    elif isinstance(value, str):
        min_len = schema.get("minLength")
        if min_len is not None and len(value.strip()) < min_len:
            report.add_error(
                code="MISSING_REQUIRED_FIELD",
                message="String cannot be empty",
                field_path=path,
            )

    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        minimum = schema.get("minimum")
        if minimum is not None and value < minimum:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be >= {minimum}", field_path=path)
        maximum = schema.get("maximum")
        if maximum is not None and value > maximum:
            report.add_error(code="OUT_OF_RANGE", message=f"Value must be <= {maximum}", field_path=path)


def _matches_type(value: Any, expected_type: str | list[str]) -> bool:
    if isinstance(expected_type, list):
        return any(_matches_type(value, item) for item in expected_type)
    return {
        "object": isinstance(value, dict),
        "array": isinstance(value, list),
        "string": isinstance(value, str),
        "integer": isinstance(value, int) and not isinstance(value, bool),
        "number": isinstance(value, (int, float)) and not isinstance(value, bool),
        "boolean": isinstance(value, bool),
        "null": value is None,
    }.get(expected_type, True)
