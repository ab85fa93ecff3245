from __future__ import annotations

import json
import shutil
from pathlib import Path

from placement.cli import main, run_allocate_command
from placement.validation import validate_placement_output_with_schema

EXAMPLES = Path(__file__).resolve().parents[2] / "examples"


def _write(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def _students() -> dict:
    return {
        "schema_version": "1.0",
        "students": [
            {
                "student_id": "A1",
                "title": "Miss",
                "first_name": "Anong",
                "last_name": "S",
                "scores": {"math": 80, "science": 90, "thai": 70, "english": 60, "social": 50},
                "preferred_tracks": ["Science-Math", "Arts-Math"],
            },
            {
                "student_id": "B2",
                "scores": {"math": 70, "science": 90, "thai": 80, "english": 60, "social": 50},
                "preferred_tracks": ["Science-Math", "Arts-Math"],
            },
            {
                "student_id": "C3",
                "scores": {"math": 40, "science": 40, "thai": 40, "english": 40, "social": 40},
                "preferred_tracks": ["Arts-Math"],
            },
        ],
    }


def _tracks() -> dict:
    return {
        "schema_version": "1.0",
        "tracks": [
            {"name": "Science-Math", "quota": 1},
            {"name": "Arts-Math", "quota": 1},
        ],
    }


def _run(tmp_path: Path, *, students: dict | None = None, tracks: dict | None = None, request_extra: dict | None = None) -> tuple[int, dict]:
    request = tmp_path / "placement_request.json"
    output = tmp_path / "out" / "placement_output.json"
    _write(tmp_path / "students.json", students if students is not None else _students())
    req = {
        "schema_version": "1.0",
        "request_id": "it",
        "generated_at": "2026-02-01T00:00:00Z",
        "students_path": "students.json",
    }
    if tracks is not None:
        _write(tmp_path / "tracks.json", tracks)
        req["tracks_path"] = "tracks.json"
    if request_extra:
        req.update(request_extra)
    _write(request, req)
    code = run_allocate_command(str(request), str(output))
    return code, json.loads(output.read_text(encoding="utf-8"))


def test_cli_end_to_end_success(tmp_path: Path) -> None:
    code, payload = _run(tmp_path, tracks=_tracks())
    assert code == 0
    assert payload["status"] == "ok"

    output = payload["placement_output"]
    assert validate_placement_output_with_schema(output).errors == []

    students = output["students"]
    assert [(s["student_id"], s["rank"], s["qualified_track"]) for s in students] == [
        ("A1", 1, "Science-Math"),
        ("B2", 2, "Arts-Math"),
        ("C3", 3, None),
    ]
    assert students[0]["total_score"] == 350
    assert students[0]["percentage"] == 70.0
    assert students[0]["first_name"] == "Anong"
    assert output["rosters"] == {"Science-Math": ["A1"], "Arts-Math": ["B2"]}
    assert output["waiting_list"] == ["C3"]
    assert output["placement_summary"]["assigned_count"] == 2
    assert output["placement_summary"]["total_quota"] == 2
    assert output["metrics"]["first_choice_ratio"] == round(1 / 3, 4)
    assert "WARN_CAPACITY_SHORTFALL" in {w["code"] for w in output["warnings"]}
    assert len(output["decision_trace"]) == 3


def test_cli_uses_default_tracks_and_subjects(tmp_path: Path) -> None:
    code, payload = _run(tmp_path)
    assert code == 0
    output = payload["placement_output"]
    assert set(output["rosters"]) == {"Science-Math", "Arts-Math", "Arts-Language", "Arts-Social", "Special-Program"}
    assert output["placement_summary"]["max_total_score"] == 500.0
    infos = {item["code"] for item in output["validation_report"]["infos"]}
    assert {"INFO_DEFAULT_SUBJECTS_APPLIED", "INFO_DEFAULT_TRACKS_APPLIED"} <= infos


def test_cli_missing_students_path(tmp_path: Path) -> None:
    request = tmp_path / "placement_request.json"
    output = tmp_path / "placement_output.json"
    _write(request, {"schema_version": "1.0"})
    code = run_allocate_command(str(request), str(output))
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert code == 2
    assert payload["error"]["code"] == "validation_error"
    assert payload["error"]["details"][0]["path"] == "$.students_path"


def test_cli_unreadable_request(tmp_path: Path) -> None:
    request = tmp_path / "placement_request.json"
    request.write_text("{not json", encoding="utf-8")
    output = tmp_path / "placement_output.json"
    code = run_allocate_command(str(request), str(output))
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert code == 2
    assert payload["error"]["code"] == "request_read_error"


def test_cli_referenced_file_not_found(tmp_path: Path) -> None:
    request = tmp_path / "placement_request.json"
    output = tmp_path / "placement_output.json"
    _write(request, {"schema_version": "1.0", "students_path": "missing.json"})
    code = run_allocate_command(str(request), str(output))
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert code == 2
    assert payload["error"]["code"] == "input_load_error"
    assert payload["error"]["details"][0]["code"] == "file_not_found"


def test_cli_validation_errors_are_aggregated(tmp_path: Path) -> None:
    students = _students()
    students["students"][1]["student_id"] = "A1"
    students["students"][2]["scores"]["math"] = 140
    tracks = {"tracks": [{"name": "Science-Math", "quota": 1}, {"name": "Science-Math", "quota": 2}]}
    code, payload = _run(tmp_path, students=students, tracks=tracks)
    assert code == 2
    assert payload["error"]["code"] == "validation_error"
    codes = {item["code"] for item in payload["validation_report"]["errors"]}
    assert {"DUPLICATE_STUDENT_ID", "SCORE_OUT_OF_RANGE", "DUPLICATE_TRACK_NAME"} <= codes


def test_cli_unknown_request_field_rejected(tmp_path: Path) -> None:
    code, payload = _run(tmp_path, request_extra={"shuffle": True})
    assert code == 2
    assert "UNKNOWN_FIELD" in {item["code"] for item in payload["validation_report"]["errors"]}


def test_cli_cohort_metadata_passed_through(tmp_path: Path) -> None:
    code, payload = _run(
        tmp_path,
        tracks=_tracks(),
        request_extra={"cohort": {"label": "Intake", "level": "M.4", "academic_year": "2026"}},
    )
    assert code == 0
    assert payload["placement_output"]["cohort"]["level"] == "M.4"


def test_main_runs_bundled_example(tmp_path: Path) -> None:
    for name in ("placement_request.json", "students.json", "tracks.json", "subjects.json"):
        shutil.copy(EXAMPLES / name, tmp_path / name)
    output = tmp_path / "placement_output.json"
    code = main(["--log-level", "WARNING", "allocate", "--request", str(tmp_path / "placement_request.json"), "--output", str(output)])
    assert code == 0

    placement_output = json.loads(output.read_text(encoding="utf-8"))["placement_output"]
    assert [(s["student_id"], s["qualified_track"]) for s in placement_output["students"]] == [
        ("66002", "Science-Math"),
        ("66001", "Science-Math"),
        ("66003", "Arts-Language"),
        ("66004", "Arts-Math"),
        ("66005", None),
    ]
    assert placement_output["waiting_list"] == ["66005"]


def test_cli_explicitly_empty_tracks_file_is_not_replaced_by_defaults(tmp_path: Path) -> None:
    code, payload = _run(tmp_path, tracks={"schema_version": "1.0", "tracks": []})
    assert code == 0
    output = payload["placement_output"]
    assert output["rosters"] == {}
    assert output["waiting_list"] == ["A1", "B2", "C3"]
    assert output["placement_summary"]["total_quota"] == 0
    infos = {item["code"] for item in output["validation_report"]["infos"]}
    assert "INFO_DEFAULT_TRACKS_APPLIED" not in infos
    assert "INFO_DEFAULT_SUBJECTS_APPLIED" in infos


def test_cli_negative_quota_reported_as_clamp(tmp_path: Path) -> None:
    tracks = {"tracks": [{"name": "Science-Math", "quota": -2}, {"name": "Arts-Math", "quota": 3}]}
    code, payload = _run(tmp_path, tracks=tracks)
    assert code == 0
    output = payload["placement_output"]
    infos = [item for item in output["validation_report"]["infos"] if item["code"] == "INFO_CLAMP_QUOTA_APPLIED"]
    assert [item["field_path"] for item in infos] == ["$.tracks.tracks[0].quota"]
    assert output["rosters"] == {"Science-Math": [], "Arts-Math": ["A1", "B2", "C3"]}
