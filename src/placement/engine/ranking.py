"""Total-order ranking with a fixed tie-break policy.

Rank is positional: after a stable sort, the student at position ``i`` gets
rank ``i + 1``. Students that tie on every key keep their input order and
still receive distinct consecutive ranks; there is no shared "competition"
rank.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from placement.normalization.config_resolver import DEFAULT_SUBJECTS

from .aggregation import compute_max_total, compute_percentage, compute_total_score, subject_score

logger = logging.getLogger(__name__)

# Compared in this order, each descending, once total scores are equal.
TIE_BREAK_SUBJECTS: tuple[str, ...] = ("science", "math", "english", "thai", "social")


def copy_student(student: Mapping[str, Any]) -> dict[str, Any]:
    """Copy a student record, including its ``scores`` and ``preferred_tracks``."""
    record = dict(student)
    if isinstance(record.get("scores"), dict):
        record["scores"] = dict(record["scores"])
    if isinstance(record.get("preferred_tracks"), list):
        record["preferred_tracks"] = list(record["preferred_tracks"])
    return record


def ranking_sort_key(
    student: Mapping[str, Any],
    *,
    subject_ids: Sequence[str],
    tie_break: Sequence[str] = TIE_BREAK_SUBJECTS,
) -> tuple[float | int, ...]:
    """Return the ascending sort key (negated scores) for one student."""
    scores = student.get("scores")
    total = compute_total_score(scores, subject_ids)
    return (-total, *(-subject_score(scores, subject_id) for subject_id in tie_break))


def rank_students(
    students: Iterable[Mapping[str, Any]],
    *,
    subjects: Sequence[Mapping[str, Any]] | None = None,
    subject_ids: Sequence[str] | None = None,
    tie_break: Sequence[str] = TIE_BREAK_SUBJECTS,
) -> list[dict[str, Any]]:
    """Annotate students with ``total_score``, ``percentage`` and ``rank``.

    Returns new dicts ordered by rank ascending; inputs are left untouched.
    ``subject_ids`` defaults to the ids in ``subjects``; with neither given the
    default subject set is used.
    """
    if subjects is None and subject_ids is None:
        subjects = DEFAULT_SUBJECTS
    subject_list = list(subjects or [])
    if subject_ids is None:
        subject_ids = [str(subject.get("subject_id")) for subject in subject_list]
    ids = list(subject_ids)
    max_total = compute_max_total(subject_list)

    annotated: list[tuple[tuple[float | int, ...], dict[str, Any]]] = []
    for student in students:
        record = copy_student(student)
        scores = record.get("scores")
        total = compute_total_score(scores, ids)
        record["total_score"] = total
        record["percentage"] = compute_percentage(total, max_total)
        annotated.append((ranking_sort_key(record, subject_ids=ids, tie_break=tie_break), record))

    annotated.sort(key=lambda item: item[0])

    ranked: list[dict[str, Any]] = []
    for position, (_, record) in enumerate(annotated, start=1):
        record["rank"] = position
        ranked.append(record)

    logger.debug("Ranked %d students over subjects %s", len(ranked), ids)
    return ranked
