"""Resolve the effective subject and track configuration for one run."""

from __future__ import annotations

from typing import Any

from placement.validation import ValidationReport

DEFAULT_SUBJECTS: tuple[dict[str, Any], ...] = (
    {"subject_id": "math", "name": "Mathematics", "max_score": 100},
    {"subject_id": "science", "name": "Science", "max_score": 100},
    {"subject_id": "thai", "name": "Thai", "max_score": 100},
    {"subject_id": "english", "name": "English", "max_score": 100},
    {"subject_id": "social", "name": "Social Studies", "max_score": 100},
)

DEFAULT_TRACKS: tuple[dict[str, Any], ...] = (
    {"name": "Science-Math", "quota": 10},
    {"name": "Arts-Math", "quota": 10},
    {"name": "Arts-Language", "quota": 10},
    {"name": "Arts-Social", "quota": 10},
    {"name": "Special-Program", "quota": 10},
)


def resolve_effective_config(loaded_payload: dict[str, Any], validation_report: ValidationReport) -> dict[str, Any]:
    """Build the engine-ready configuration from defaults and loaded files.

    Nothing is cached: callers re-run this for every placement so that subject
    or quota edits made between runs are always picked up.
    """
    subjects = _resolve_subjects(loaded_payload.get("subjects"), validation_report)
    tracks = _resolve_tracks(loaded_payload.get("tracks"), validation_report)

    max_total = 0.0
    for subject in subjects:
        max_score = subject.get("max_score", 0)
        if isinstance(max_score, (int, float)) and not isinstance(max_score, bool):
            max_total += max(0.0, float(max_score))

    return {
        "subjects": subjects,
        "subject_ids": [str(subject["subject_id"]) for subject in subjects],
        "tracks": tracks,
        "max_total_score": max_total,
    }


def _items(root: Any, key: str) -> list[dict[str, Any]]:
    if isinstance(root, dict):
        items = root.get(key, [])
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
    return []


def _is_absent(source: Any, key: str) -> bool:
    return not isinstance(source, dict) or key not in source


def _resolve_subjects(source: Any, validation_report: ValidationReport) -> list[dict[str, Any]]:
    if not _is_absent(source, "subjects"):
        return [
            dict(item)
            for item in _items(source, "subjects")
            if isinstance(item.get("subject_id"), str) and item["subject_id"]
        ]

    validation_report.add_info(
        code="INFO_DEFAULT_SUBJECTS_APPLIED",
        message="No subjects configured; default subject set applied",
        field_path="$.subjects",
        extra={"applied_value": [item["subject_id"] for item in DEFAULT_SUBJECTS]},
    )
    return [dict(item) for item in DEFAULT_SUBJECTS]


def _resolve_tracks(source: Any, validation_report: ValidationReport) -> list[dict[str, Any]]:
    if _is_absent(source, "tracks"):
        validation_report.add_info(
            code="INFO_DEFAULT_TRACKS_APPLIED",
            message="No tracks configured; default track set applied",
            field_path="$.tracks",
            extra={"applied_value": [item["name"] for item in DEFAULT_TRACKS]},
        )
        return [dict(item) for item in DEFAULT_TRACKS]

    raw_tracks = [item for item in _items(source, "tracks") if isinstance(item.get("name"), str) and item["name"]]
    tracks: list[dict[str, Any]] = []
    for idx, item in enumerate(raw_tracks):
        track = dict(item)
        quota = track.get("quota", 0)
        if not isinstance(quota, (int, float)) or isinstance(quota, bool):
            quota = 0
        clamped = max(0, int(quota))
        if clamped != quota:
            validation_report.add_info(
                code="INFO_CLAMP_QUOTA_APPLIED",
                message=f"Quota for track {track['name']!r} was clamped to a non-negative integer",
                field_path=f"$.tracks.tracks[{idx}].quota",
                extra={"applied_value": clamped},
            )
        track["quota"] = clamped
        tracks.append(track)
    return tracks
