"""Placement engine."""

from .aggregation import compute_max_total, compute_percentage, compute_total_score, subject_score
from .allocator import allocate_tracks, build_remaining_capacity
from .ranking import TIE_BREAK_SUBJECTS, rank_students, ranking_sort_key
from .runner import run_placement

__all__ = [
    "TIE_BREAK_SUBJECTS",
    "allocate_tracks",
    "build_remaining_capacity",
    "compute_max_total",
    "compute_percentage",
    "compute_total_score",
    "rank_students",
    "ranking_sort_key",
    "run_placement",
    "subject_score",
]
