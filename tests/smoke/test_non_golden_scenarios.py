from __future__ import annotations

from placement.engine import run_placement
from placement.metrics import collect_metrics


def _loaded(students: list[dict], tracks: list[dict]) -> dict:
    return {
        "placement_request": {"schema_version": "1.0", "generated_at": "2026-01-01T00:00:00Z"},
        "students": {"schema_version": "1.0", "students": students},
        "tracks": {"schema_version": "1.0", "tracks": tracks},
    }


def _warning_codes(result: dict) -> set[str]:
    return {item["code"] for item in result["warnings"]}


def test_smoke_everyone_placed_on_first_choice() -> None:
    students = [
        {"student_id": f"s{i}", "scores": {"math": 90 - i}, "preferred_tracks": ["Science-Math" if i % 2 else "Arts-Math"]}
        for i in range(6)
    ]
    result = run_placement(_loaded(students, [{"name": "Science-Math", "quota": 3}, {"name": "Arts-Math", "quota": 3}]))
    metrics = collect_metrics(result)
    assert result["waiting_list"] == []
    assert metrics["first_choice_ratio"] == 1.0
    assert metrics["overall_fill_ratio"] == 1.0
    assert result["warnings"] == []
    assert result["suggestions"] == []


def test_smoke_popular_track_spills_to_second_choice() -> None:
    students = [
        {"student_id": f"s{i}", "scores": {"science": 100 - i}, "preferred_tracks": ["Science-Math", "Arts-Math"]}
        for i in range(5)
    ]
    result = run_placement(_loaded(students, [{"name": "Science-Math", "quota": 2}, {"name": "Arts-Math", "quota": 5}]))
    assert result["rosters"] == {"Science-Math": ["s0", "s1"], "Arts-Math": ["s2", "s3", "s4"]}
    assert collect_metrics(result)["mean_preference_position"] == 1.6


def test_smoke_waiting_students_and_underfilled_track() -> None:
    students = [
        {"student_id": "a", "scores": {"math": 90}, "preferred_tracks": ["Full"]},
        {"student_id": "b", "scores": {"math": 80}, "preferred_tracks": ["Full"]},
        {"student_id": "c", "scores": {"math": 70}, "preferred_tracks": []},
        {"student_id": "d", "scores": {"math": 60}, "preferred_tracks": ["Retired"]},
    ]
    tracks = [{"name": "Full", "quota": 1}, {"name": "Quiet", "quota": 10}, {"name": "Closed", "quota": 0}]
    result = run_placement(_loaded(students, tracks))
    assert result["waiting_list"] == ["b", "c", "d"]
    codes = _warning_codes(result)
    assert {
        "WARN_STUDENTS_UNASSIGNED",
        "WARN_TRACK_UNDERFILLED",
        "WARN_ZERO_QUOTA_TRACK",
        "WARN_EMPTY_PREFERENCES",
        "WARN_UNKNOWN_PREFERENCES",
    } <= codes
    assert "WARN_CAPACITY_SHORTFALL" not in codes
    suggestion_codes = [item["code"] for item in result["suggestions"]]
    assert suggestion_codes.count("SUGGEST_FIX_TRACK_NAMES") == 1
    assert "SUGGEST_COLLECT_MORE_PREFERENCES" in suggestion_codes


def test_smoke_empty_cohort() -> None:
    result = run_placement(_loaded([], [{"name": "X", "quota": 3}]))
    assert result["students"] == []
    assert result["rosters"] == {"X": []}
    assert result["waiting_list"] == []
    assert result["placement_summary"]["students_count"] == 0
    assert result["warnings"] == []


def test_smoke_subject_set_change_recomputes_totals() -> None:
    students = [
        {"student_id": "a", "scores": {"math": 90, "art": 0}, "preferred_tracks": ["X"]},
        {"student_id": "b", "scores": {"math": 50, "art": 100}, "preferred_tracks": ["X"]},
    ]
    loaded = _loaded(students, [{"name": "X", "quota": 1}])
    default_run = run_placement(loaded)
    assert default_run["rosters"] == {"X": ["a"]}

    loaded["subjects"] = {"subjects": [{"subject_id": "math", "max_score": 100}, {"subject_id": "art", "max_score": 100}]}
    widened_run = run_placement(loaded)
    assert widened_run["rosters"] == {"X": ["b"]}
    assert widened_run["effective_config"]["subject_ids"] == ["math", "art"]


def test_smoke_explicitly_empty_track_list_places_nobody() -> None:
    students = [
        {"student_id": "s0", "scores": {"math": 90}, "preferred_tracks": ["Science-Math"]},
        {"student_id": "s1", "scores": {"math": 80}, "preferred_tracks": ["Arts-Math"]},
    ]
    result = run_placement(_loaded(students, []))
    assert result["tracks"] == []
    assert result["rosters"] == {}
    assert result["waiting_list"] == ["s0", "s1"]
    assert all(s["qualified_track"] is None for s in result["students"])
    assert result["placement_summary"]["total_quota"] == 0
    assert "WARN_CAPACITY_SHORTFALL" in _warning_codes(result)
