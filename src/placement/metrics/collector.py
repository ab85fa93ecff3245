"""Placement metrics collector."""

from __future__ import annotations

from statistics import mean, pstdev
from typing import Any


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def collect_metrics(result: dict[str, Any]) -> dict[str, Any]:
    """Compute placement quality ratios (clamped to [0,1]) and score statistics."""
    students = [item for item in result.get("students", []) if isinstance(item, dict)]
    tracks = [item for item in result.get("tracks", []) if isinstance(item, dict)]

    quota_by_track: dict[str, int] = {}
    for track in tracks:
        name = track.get("name")
        if isinstance(name, str) and name not in quota_by_track:
            quota_by_track[name] = max(0, int(track.get("quota", 0) or 0))

    assigned_by_track: dict[str, int] = {name: 0 for name in quota_by_track}
    positions: list[int] = []
    first_choice = 0
    for student in students:
        track = student.get("qualified_track")
        if track is None:
            continue
        assigned_by_track[track] = assigned_by_track.get(track, 0) + 1
        position = student.get("preference_position")
        if isinstance(position, int):
            positions.append(position)
            if position == 1:
                first_choice += 1

    students_count = len(students)
    assigned_count = sum(assigned_by_track.values())
    total_quota = sum(quota_by_track.values())

    fill_ratio_by_track = {
        name: round(_clamp01(assigned_by_track.get(name, 0) / quota), 4) if quota > 0 else 0.0
        for name, quota in quota_by_track.items()
    }

    totals = [float(student.get("total_score", 0) or 0) for student in students]

    return {
        "students_count": students_count,
        "assigned_count": assigned_count,
        "unassigned_count": students_count - assigned_count,
        "total_quota": total_quota,
        "assigned_ratio": round(_clamp01(assigned_count / students_count), 4) if students_count else 0.0,
        "first_choice_ratio": round(_clamp01(first_choice / students_count), 4) if students_count else 0.0,
        "mean_preference_position": round(mean(positions), 4) if positions else 0.0,
        "overall_fill_ratio": round(_clamp01(assigned_count / total_quota), 4) if total_quota else 0.0,
        "fill_ratio_by_track": fill_ratio_by_track,
        "assigned_by_track": assigned_by_track,
        "score_mean": round(mean(totals), 4) if totals else 0.0,
        "score_stdev": round(pstdev(totals), 4) if totals else 0.0,
        "score_max": max(totals) if totals else 0.0,
        "score_min": min(totals) if totals else 0.0,
    }
