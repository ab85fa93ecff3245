"""Build CLI reports."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from placement.validation import ValidationError, ValidationReport


def build_error_report(errors: list[ValidationError], code: str = "validation_error") -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    return {
        "status": "error",
        "error": {
            "code": code,
            "count": len(errors),
            "details": [err.as_dict() for err in errors],
        },
    }


def build_error_report_with_validation(
    errors: list[ValidationError],
    validation_report: ValidationReport,
    code: str = "validation_error",
) -> dict[str, Any]:
    payload = build_error_report(errors, code=code)
    payload["validation_report"] = validation_report.as_dict()
    return payload


def build_success_report(
    result: dict[str, Any],
    metrics: dict[str, Any],
    validation_report: ValidationReport,
    cohort: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a JSON-serializable success report."""
    generated_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    placement_id = f"placement-{generated_at.replace(':', '').replace('-', '').replace('T', '-').replace('Z', '')}"
    placement_output = {
        "schema_version": "1.0.0",
        "placement_id": placement_id,
        "generated_at": generated_at,
        "cohort": dict(cohort or {}),
        "placement_summary": result.get("placement_summary", {}),
        "students": result.get("students", []),
        "rosters": result.get("rosters", {}),
        "waiting_list": result.get("waiting_list", []),
        "metrics": metrics,
        "warnings": result.get("warnings", []),
        "suggestions": result.get("suggestions", []),
        "decision_trace": result.get("decision_trace", []),
        "effective_config": result.get("effective_config", {}),
        "validation_report": validation_report.as_dict(),
    }
    return {
        "status": "ok",
        "metrics": metrics,
        "placement_output": placement_output,
    }
