"""CLI entrypoint for track placement."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from placement.engine import run_placement
from placement.io import read_json, write_json
from placement.logging_utils import configure_logging, resolve_level
from placement.metrics import collect_metrics
from placement.normalization import normalize_request, resolve_effective_config
from placement.reporting import (
    build_error_report,
    build_error_report_with_validation,
    build_success_report,
)
from placement.validation import (
    ValidationError,
    ValidationReport,
    validate_domain_inputs,
    validate_inputs_with_schema,
    validate_placement_request,
)

logger = logging.getLogger(__name__)

_REFERENCED_INPUTS = {
    "students_path": "students",
    "tracks_path": "tracks",
    "subjects_path": "subjects",
}


def _resolve_input_path(request_file: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return (request_file.parent / path).resolve()


def _load_referenced_inputs(request_file: Path, request: dict[str, Any]) -> tuple[dict[str, Any], list[ValidationError]]:
    loaded: dict[str, Any] = {}
    errors: list[ValidationError] = []

    for path_field, target_field in _REFERENCED_INPUTS.items():
        if not request.get(path_field):
            continue
        resolved = _resolve_input_path(request_file, request[path_field])
        try:
            loaded[target_field] = read_json(resolved)
        except FileNotFoundError:
            errors.append(
                ValidationError(
                    code="file_not_found",
                    message=f"Referenced file not found: {resolved}",
                    path=f"$.{path_field}",
                )
            )
        except ValueError as exc:
            errors.append(
                ValidationError(
                    code="invalid_json",
                    message=str(exc),
                    path=f"$.{path_field}",
                )
            )

    return loaded, errors


def run_allocate_command(request_path: str, output_path: str) -> int:
    validation_report = ValidationReport()

    try:
        request_payload = read_json(request_path)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read placement request %s: %s", request_path, exc)
        write_json(
            output_path,
            build_error_report(
                [ValidationError(code="invalid_request", message=str(exc), path="$.request")],
                code="request_read_error",
            ),
        )
        return 2

    request_payload = normalize_request(request_payload)
    errors = validate_placement_request(request_payload)
    if errors:
        logger.error("Placement request rejected with %d error(s)", len(errors))
        write_json(output_path, build_error_report(errors))
        return 2

    loaded_request, load_errors = _load_referenced_inputs(Path(request_path), request_payload)
    if load_errors:
        logger.error("Failed to load %d referenced input file(s)", len(load_errors))
        write_json(
            output_path,
            build_error_report_with_validation(
                load_errors,
                validation_report=validation_report,
                code="input_load_error",
            ),
        )
        return 2

    loaded_request["placement_request"] = request_payload
    schema_report = validate_inputs_with_schema(loaded_request)
    loaded_request["effective_config"] = resolve_effective_config(loaded_request, validation_report)
    domain_report = validate_domain_inputs(loaded_request)
    validation_report.extend(schema_report)
    validation_report.extend(domain_report)

    if validation_report.errors:
        logger.error("Validation failed with %d error(s)", len(validation_report.errors))
        write_json(
            output_path,
            build_error_report_with_validation(
                [issue.to_error() for issue in validation_report.errors],
                validation_report=validation_report,
                code="validation_error",
            ),
        )
        return 2

    for issue in validation_report.infos:
        logger.info("%s at %s: %s", issue.code, issue.field_path, issue.message)

    result = run_placement(loaded_request)
    metrics = collect_metrics(result)
    cohort = request_payload.get("cohort") if isinstance(request_payload.get("cohort"), dict) else None
    write_json(output_path, build_success_report(result, metrics, validation_report, cohort=cohort))
    logger.info("Placement report written to %s", output_path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="placement", description="Rank students and place them into study tracks")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    allocate_parser = subparsers.add_parser("allocate", help="Rank and place a cohort from placement_request JSON")
    allocate_parser.add_argument("--request", required=True, help="Path to placement_request.json")
    allocate_parser.add_argument("--output", required=True, help="Path to placement_output.json")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(resolve_level(args.log_level))

    if args.command == "allocate":
        return run_allocate_command(args.request, args.output)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
