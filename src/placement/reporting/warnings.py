"""Warning and suggestion generation for placement output."""

from __future__ import annotations

from typing import Any


def _fill_ratio(assigned: int, quota: int) -> float:
    if quota <= 0:
        return 1.0
    return max(0.0, min(1.0, assigned / quota))


def build_warnings_and_suggestions(
    *,
    students: list[dict[str, Any]],
    tracks: list[dict[str, Any]],
    assigned_by_track: dict[str, int],
    unassigned_ids: list[str],
    underfill_threshold: float = 0.5,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Summarise capacity pressure and preference quality of one placement."""
    warnings: list[dict[str, Any]] = []
    suggestions: list[dict[str, Any]] = []

    quota_by_track: dict[str, int] = {}
    for track in tracks:
        name = track.get("name")
        if isinstance(name, str) and name not in quota_by_track:
            quota_by_track[name] = max(0, int(track.get("quota", 0) or 0))
    total_quota = sum(quota_by_track.values())

    # (1) Fewer seats than students.
    if students and total_quota < len(students):
        warnings.append(
            {
                "code": "WARN_CAPACITY_SHORTFALL",
                "severity": "warning",
                "message": "Total track quota is lower than the number of students.",
                "total_quota": total_quota,
                "students_count": len(students),
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_RAISE_QUOTA",
                "message": "Raise quotas or open another track so every student can be placed.",
            }
        )

    # (2) Students on the waiting list.
    if unassigned_ids:
        warnings.append(
            {
                "code": "WARN_STUDENTS_UNASSIGNED",
                "severity": "warning",
                "message": "Some students could not be placed in any preferred track.",
                "unassigned_count": len(unassigned_ids),
                "student_ids": list(unassigned_ids),
            }
        )

    # (3) Tracks that nobody can enter or that stay mostly empty.
    for name, quota in quota_by_track.items():
        if quota == 0:
            warnings.append(
                {
                    "code": "WARN_ZERO_QUOTA_TRACK",
                    "severity": "info",
                    "track": name,
                    "message": "Track has no seats and never accepts students.",
                }
            )
            continue
        ratio = _fill_ratio(assigned_by_track.get(name, 0), quota)
        if unassigned_ids and ratio < underfill_threshold:
            warnings.append(
                {
                    "code": "WARN_TRACK_UNDERFILLED",
                    "severity": "warning",
                    "track": name,
                    "fill_ratio": round(ratio, 4),
                    "message": "Track has free seats while students are waiting.",
                }
            )
            suggestions.append(
                {
                    "code": "SUGGEST_COLLECT_MORE_PREFERENCES",
                    "track": name,
                    "message": "Ask waiting students to add this track as a lower choice.",
                }
            )

    # (4) Preference list quality.
    empty_ids = [
        str(student.get("student_id", ""))
        for student in students
        if not student.get("preferred_tracks")
    ]
    if empty_ids:
        warnings.append(
            {
                "code": "WARN_EMPTY_PREFERENCES",
                "severity": "warning",
                "message": "Students without any preferred track are always left unassigned.",
                "student_ids": empty_ids,
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_COLLECT_MORE_PREFERENCES",
                "message": "Collect at least one track choice from every student.",
            }
        )

    unknown_names = sorted(
        {
            str(name)
            for student in students
            for name in (student.get("preferred_tracks") or [])
            if name not in quota_by_track
        }
    )
    if unknown_names:
        warnings.append(
            {
                "code": "WARN_UNKNOWN_PREFERENCES",
                "severity": "warning",
                "message": "Some preferred tracks are not configured and were skipped.",
                "tracks": unknown_names,
            }
        )
        suggestions.append(
            {
                "code": "SUGGEST_FIX_TRACK_NAMES",
                "message": "Align the track names in student preferences with the configured tracks.",
            }
        )

    unique_suggestions: list[dict[str, Any]] = []
    seen: set[tuple[str, str]] = set()
    for item in suggestions:
        key = (str(item.get("code", "")), str(item.get("track", "*")))
        if key in seen:
            continue
        seen.add(key)
        unique_suggestions.append(item)

    return warnings, unique_suggestions
