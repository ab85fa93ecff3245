"""Rank-ordered preference waterfall.

Students are visited best rank first. Each one walks their own preference
list and claims the first configured track that still has a free seat.
Seats taken by a higher-ranked student are never given back, so a student's
outcome depends only on their own rank and preferences and on the choices
already made for everyone ranked above them.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from placement.reporting.decision_trace import DecisionTraceCollector

from .ranking import copy_student

logger = logging.getLogger(__name__)

SKIP_UNKNOWN_TRACK = "unknown_track"
SKIP_TRACK_FULL = "track_full"


def build_remaining_capacity(tracks: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    """Return a fresh name -> free seats mapping for a single allocation pass.

    Negative quotas are floored at 0. If a name repeats, the first definition
    wins.
    """
    remaining: dict[str, int] = {}
    for track in tracks:
        name = track.get("name")
        if not isinstance(name, str) or name in remaining:
            continue
        remaining[name] = max(0, int(track.get("quota", 0) or 0))
    return remaining


def _claim_track(
    preferences: Iterable[Any],
    remaining: dict[str, int],
) -> tuple[str | None, int | None, list[str], list[dict[str, str]]]:
    considered: list[str] = []
    skipped: list[dict[str, str]] = []
    for position, name in enumerate(preferences, start=1):
        considered.append(str(name))
        if name not in remaining:
            skipped.append({"track": str(name), "reason": SKIP_UNKNOWN_TRACK})
            continue
        if remaining[name] <= 0:
            skipped.append({"track": str(name), "reason": SKIP_TRACK_FULL})
            continue
        remaining[name] -= 1
        return name, position, considered, skipped
    return None, None, considered, skipped


def allocate_tracks(
    ranked_students: Iterable[Mapping[str, Any]],
    tracks: Iterable[Mapping[str, Any]],
    *,
    decision_trace: DecisionTraceCollector | None = None,
) -> dict[str, Any]:
    """Assign each ranked student to at most one preferred track.

    ``ranked_students`` must carry ``rank``; they are processed in ascending
    rank whatever order they arrive in. Returns new student dicts with
    ``qualified_track`` (``None`` when unassigned) and ``preference_position``,
    together with the per-track counters of this pass.
    """
    track_list = list(tracks)
    remaining = build_remaining_capacity(track_list)
    assigned_by_track = {name: 0 for name in remaining}

    ordered = sorted(ranked_students, key=lambda student: int(student.get("rank", 0)))

    allocated: list[dict[str, Any]] = []
    unassigned_ids: list[str] = []
    for student in ordered:
        record = copy_student(student)
        student_id = str(record.get("student_id", ""))
        preferences = record.get("preferred_tracks") or []

        selected, position, considered, skipped = _claim_track(preferences, remaining)
        record["qualified_track"] = selected
        record["preference_position"] = position
        allocated.append(record)

        if selected is None:
            unassigned_ids.append(student_id)
            rules = ["RULE_RANK_ORDER", "RULE_NO_AVAILABLE_PREFERENCE"]
            logger.debug("Student %s (rank %s) left unassigned", student_id, record.get("rank"))
        else:
            assigned_by_track[selected] += 1
            rules = ["RULE_RANK_ORDER", "RULE_FIRST_AVAILABLE_PREFERENCE"]
            logger.debug(
                "Student %s (rank %s) placed in %s (choice %d)",
                student_id,
                record.get("rank"),
                selected,
                position,
            )

        if decision_trace is not None:
            decision_trace.record(
                student_id=student_id,
                rank=int(record.get("rank", 0)),
                considered_tracks=considered,
                skipped_tracks=skipped,
                selected_track=selected,
                applied_rules=rules,
                remaining_after=remaining[selected] if selected is not None else None,
            )

    return {
        "students": allocated,
        "remaining_by_track": dict(remaining),
        "assigned_by_track": assigned_by_track,
        "unassigned_ids": unassigned_ids,
    }
