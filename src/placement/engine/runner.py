"""Placement engine runner."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from placement.normalization import resolve_effective_config
from placement.reporting.decision_trace import DecisionTraceCollector
from placement.reporting.warnings import build_warnings_and_suggestions
from placement.validation import ValidationReport

from .allocator import allocate_tracks
from .ranking import rank_students

logger = logging.getLogger(__name__)


def _extract_students(payload: dict[str, Any]) -> list[dict[str, Any]]:
    root = payload.get("students", {})
    if isinstance(root, dict):
        items = root.get("students", [])
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
    return []


def _start_timestamp(payload: dict[str, Any]) -> datetime:
    request = payload.get("placement_request")
    raw = request.get("generated_at") if isinstance(request, dict) else None
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


def _resolve_config(payload: dict[str, Any]) -> dict[str, Any]:
    effective = payload.get("effective_config")
    if isinstance(effective, dict) and isinstance(effective.get("subjects"), list) and isinstance(effective.get("tracks"), list):
        return effective
    return resolve_effective_config(payload, ValidationReport())


def run_placement(payload: dict[str, Any]) -> dict[str, Any]:
    """Rank the cohort, then place it into tracks, from a loaded payload.

    Decision trace timestamps start at ``placement_request.generated_at``. When
    the payload carries no parseable ``generated_at`` they start at the current
    UTC time, so only the trace timestamps differ between otherwise identical
    runs.
    """
    effective_config = _resolve_config(payload)
    subjects = [item for item in effective_config["subjects"] if isinstance(item, dict)]
    tracks = [item for item in effective_config["tracks"] if isinstance(item, dict)]
    subject_ids = effective_config.get("subject_ids")
    if not isinstance(subject_ids, list):
        subject_ids = [str(subject.get("subject_id")) for subject in subjects]

    students = _extract_students(payload)
    ranked = rank_students(students, subjects=subjects, subject_ids=subject_ids)

    decision_trace = DecisionTraceCollector(start_timestamp=_start_timestamp(payload))
    allocation = allocate_tracks(ranked, tracks, decision_trace=decision_trace)
    allocated = allocation["students"]

    rosters: dict[str, list[str]] = {name: [] for name in allocation["remaining_by_track"]}
    for student in allocated:
        track = student.get("qualified_track")
        if track is not None:
            rosters[track].append(str(student.get("student_id", "")))

    warnings, suggestions = build_warnings_and_suggestions(
        students=allocated,
        tracks=tracks,
        assigned_by_track=allocation["assigned_by_track"],
        unassigned_ids=allocation["unassigned_ids"],
    )

    total_quota = sum(max(0, int(track.get("quota", 0) or 0)) for track in tracks)
    assigned_count = len(allocated) - len(allocation["unassigned_ids"])
    logger.info(
        "Placed %d of %d students into %d tracks (%d waiting)",
        assigned_count,
        len(allocated),
        len(rosters),
        len(allocation["unassigned_ids"]),
    )

    return {
        "status": "ok",
        "students": allocated,
        "rosters": rosters,
        "waiting_list": list(allocation["unassigned_ids"]),
        "placement_summary": {
            "students_count": len(allocated),
            "tracks_count": len(rosters),
            "assigned_count": assigned_count,
            "unassigned_count": len(allocation["unassigned_ids"]),
            "total_quota": total_quota,
            "max_total_score": effective_config.get("max_total_score", 0.0),
        },
        "remaining_by_track": allocation["remaining_by_track"],
        "assigned_by_track": allocation["assigned_by_track"],
        "warnings": warnings,
        "suggestions": suggestions,
        "decision_trace": decision_trace.as_list(),
        "subjects": subjects,
        "tracks": tracks,
        "effective_config": effective_config,
    }
