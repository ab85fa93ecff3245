"""Total and percentage score formulas."""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def subject_score(scores: Mapping[str, Any] | None, subject_id: str) -> float | int:
    """Return one subject score, treating a missing key or ``None`` as 0."""
    if not scores:
        return 0
    value = scores.get(subject_id)
    return 0 if value is None else value


def compute_total_score(scores: Mapping[str, Any] | None, subject_ids: Iterable[str]) -> float | int:
    """Sum the configured subject scores.

    Keys outside ``subject_ids`` are ignored and missing keys count as 0.
    Values are not coerced, so a non-numeric score raises ``TypeError``.
    """
    total: float | int = 0
    for subject_id in subject_ids:
        total = total + subject_score(scores, subject_id)
    return total


def compute_max_total(subjects: Iterable[Mapping[str, Any]]) -> float:
    total = 0.0
    for subject in subjects:
        max_score = subject.get("max_score", 0)
        if isinstance(max_score, (int, float)) and not isinstance(max_score, bool):
            total += max(0.0, float(max_score))
    return total


def compute_percentage(total_score: float | int, max_total: float | int) -> float:
    """Percentage of the attainable total, for display only."""
    if max_total <= 0:
        return 0.0
    return round(float(total_score) / float(max_total) * 100.0, 4)
