"""Domain-level cross-file validation rules."""

from __future__ import annotations

from typing import Any

from .errors import ValidationReport


def validate_domain_inputs(loaded_payload: dict[str, Any]) -> ValidationReport:
    """Validate cross-file coherence and rules the schemas cannot express."""
    report = ValidationReport()

    subjects = _effective_items(loaded_payload, "subjects")
    tracks = _effective_items(loaded_payload, "tracks")

    max_by_subject = _check_subjects(subjects, report)
    track_names = _check_tracks(tracks, report)

    students_root = loaded_payload.get("students", {})
    students = students_root.get("students", []) if isinstance(students_root, dict) else []
    seen_ids: set[str] = set()
    for idx, student in enumerate(students):
        if not isinstance(student, dict):
            continue
        path = f"$.students.students[{idx}]"

        student_id = student.get("student_id")
        if isinstance(student_id, str):
            if student_id in seen_ids:
                report.add_error(
                    code="DUPLICATE_STUDENT_ID",
                    message=f"Duplicate student_id: {student_id}",
                    field_path=f"{path}.student_id",
                    suggested_fix="Each student_id must be unique within one cohort.",
                )
            seen_ids.add(student_id)

        scores = student.get("scores")
        if isinstance(scores, dict):
            _check_scores(scores, max_by_subject, f"{path}.scores", report)

        preferences = student.get("preferred_tracks")
        if isinstance(preferences, list):
            _check_preferences(preferences, track_names, f"{path}.preferred_tracks", report)

    return report


def _effective_items(loaded_payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
    effective = loaded_payload.get("effective_config")
    if isinstance(effective, dict) and isinstance(effective.get(key), list):
        return [item for item in effective[key] if isinstance(item, dict)]
    root = loaded_payload.get(key, {})
    items = root.get(key, []) if isinstance(root, dict) else []
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


def _check_subjects(subjects: list[dict[str, Any]], report: ValidationReport) -> dict[str, float]:
    max_by_subject: dict[str, float] = {}
    for idx, subject in enumerate(subjects):
        subject_id = subject.get("subject_id")
        if not isinstance(subject_id, str):
            continue
        if subject_id in max_by_subject:
            report.add_error(
                code="DUPLICATE_SUBJECT_ID",
                message=f"Duplicate subject_id: {subject_id}",
                field_path=f"$.subjects.subjects[{idx}].subject_id",
            )
            continue
        max_score = subject.get("max_score")
        if isinstance(max_score, (int, float)) and not isinstance(max_score, bool):
            max_by_subject[subject_id] = float(max_score)
        else:
            max_by_subject[subject_id] = float("inf")
    return max_by_subject


def _check_tracks(tracks: list[dict[str, Any]], report: ValidationReport) -> set[str]:
    names: set[str] = set()
    for idx, track in enumerate(tracks):
        name = track.get("name")
        if not isinstance(name, str):
            continue
        path = f"$.tracks.tracks[{idx}]"
        if name in names:
            report.add_error(
                code="DUPLICATE_TRACK_NAME",
                message=f"Duplicate track name: {name}",
                field_path=f"{path}.name",
                suggested_fix="Merge the quotas into a single track definition.",
            )
        names.add(name)
    return names


def _check_scores(
    scores: dict[str, Any],
    max_by_subject: dict[str, float],
    path: str,
    report: ValidationReport,
) -> None:
    for subject_id, value in scores.items():
        if subject_id not in max_by_subject:
            report.add_info(
                code="INFO_UNKNOWN_SUBJECT_SCORE",
                message=f"Score for unconfigured subject {subject_id!r} is ignored",
                field_path=f"{path}.{subject_id}",
            )
            continue
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            continue
        if value < 0 or value > max_by_subject[subject_id]:
            report.add_error(
                code="SCORE_OUT_OF_RANGE",
                message=f"Score for {subject_id!r} must be within [0, {max_by_subject[subject_id]:g}]",
                field_path=f"{path}.{subject_id}",
            )


def _check_preferences(
    preferences: list[Any],
    track_names: set[str],
    path: str,
    report: ValidationReport,
) -> None:
    seen: set[str] = set()
    for idx, name in enumerate(preferences):
        if not isinstance(name, str):
            continue
        if name in seen:
            report.add_info(
                code="INFO_DUPLICATE_PREFERENCE",
                message=f"Track {name!r} is listed more than once; later entries have no effect",
                field_path=f"{path}[{idx}]",
            )
            continue
        seen.add(name)
        if track_names and name not in track_names:
            report.add_info(
                code="INFO_UNKNOWN_TRACK_PREFERENCE",
                message=f"Preferred track {name!r} is not configured and will be skipped",
                field_path=f"{path}[{idx}]",
            )
