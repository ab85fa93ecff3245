from __future__ import annotations

import json
import random
import sys
from copy import deepcopy
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from placement.engine import run_placement
from placement.metrics import collect_metrics
from placement.normalization import DEFAULT_SUBJECTS, DEFAULT_TRACKS, resolve_effective_config
from placement.validation import ValidationReport

OUT = ROOT / "results" / "cohort_smoke" / "invariant_checks.json"
README_OUT = ROOT / "results" / "cohort_smoke" / "README.md"

SCENARIOS: list[dict] = [
    {
        "scenario": "balanced_cohort",
        "seed": 11,
        "size": 40,
        "tracks": [{"name": track["name"], "quota": 10} for track in DEFAULT_TRACKS],
        "popular_bias": 0.0,
        "empty_preference_rate": 0.0,
        "unknown_preference_rate": 0.0,
    },
    {
        "scenario": "oversubscribed_science",
        "seed": 23,
        "size": 60,
        "tracks": [{"name": track["name"], "quota": 10} for track in DEFAULT_TRACKS],
        "popular_bias": 0.8,
        "empty_preference_rate": 0.0,
        "unknown_preference_rate": 0.0,
    },
    {
        "scenario": "capacity_shortfall",
        "seed": 37,
        "size": 80,
        "tracks": [{"name": track["name"], "quota": 8} for track in DEFAULT_TRACKS],
        "popular_bias": 0.3,
        "empty_preference_rate": 0.05,
        "unknown_preference_rate": 0.0,
    },
    {
        "scenario": "zero_quota_and_unknown_names",
        "seed": 41,
        "size": 30,
        "tracks": [
            {"name": "Science-Math", "quota": 10},
            {"name": "Arts-Math", "quota": 10},
            {"name": "Arts-Language", "quota": 0},
            {"name": "Arts-Social", "quota": 10},
        ],
        "popular_bias": 0.2,
        "empty_preference_rate": 0.1,
        "unknown_preference_rate": 0.2,
    },
]


def build_cohort(
    *,
    seed: int,
    size: int,
    track_names: list[str],
    popular_bias: float = 0.0,
    empty_preference_rate: float = 0.0,
    unknown_preference_rate: float = 0.0,
) -> list[dict]:
    """Generate a reproducible synthetic cohort.

    ``popular_bias`` is the probability that the first track is forced as first
    choice; scores are integers so exact ties show up regularly.
    """
    rng = random.Random(seed)
    subject_ids = [str(subject["subject_id"]) for subject in DEFAULT_SUBJECTS]
    students: list[dict] = []
    for idx in range(size):
        base = rng.randint(35, 90)
        scores = {sid: max(0, min(100, base + rng.randint(-15, 15))) for sid in subject_ids}

        if rng.random() < empty_preference_rate:
            preferences: list[str] = []
        else:
            preferences = list(track_names)
            rng.shuffle(preferences)
            preferences = preferences[: rng.randint(1, len(preferences))]
            if track_names and rng.random() < popular_bias:
                preferences = [track_names[0], *[name for name in preferences if name != track_names[0]]]
            if rng.random() < unknown_preference_rate:
                preferences.insert(0, "Retired-Track")

        students.append(
            {
                "student_id": f"S{idx + 1:04d}",
                "title": "",
                "first_name": f"Student{idx + 1}",
                "last_name": "Synthetic",
                "scores": scores,
                "preferred_tracks": preferences,
            }
        )
    return students


def _payload(students: list[dict], tracks: list[dict]) -> dict:
    loaded = {
        "placement_request": {"schema_version": "1.0", "generated_at": "2026-01-01T00:00:00Z"},
        "students": {"schema_version": "1.0", "students": students},
        "tracks": {"schema_version": "1.0", "tracks": tracks},
    }
    loaded["effective_config"] = resolve_effective_config(loaded, ValidationReport())
    return loaded


def evaluate_invariants(students: list[dict], tracks: list[dict], result: dict, rerun: dict) -> dict[str, dict]:
    """Check the placement guarantees on one result; every check is pass/fail."""
    placed = result["students"]
    subject_ids = result["effective_config"]["subject_ids"]
    quota_by_track = {track["name"]: max(0, int(track["quota"])) for track in tracks}
    by_id = {student["student_id"]: student for student in students}

    ranks = sorted(student["rank"] for student in placed)
    rank_ok = ranks == list(range(1, len(students) + 1))

    totals_ok = all(
        student["total_score"] == sum(by_id[student["student_id"]]["scores"].get(sid, 0) for sid in subject_ids)
        for student in placed
    )

    counts: dict[str, int] = {}
    for student in placed:
        if student["qualified_track"] is not None:
            counts[student["qualified_track"]] = counts.get(student["qualified_track"], 0) + 1
    capacity_ok = all(count <= quota_by_track.get(name, 0) for name, count in counts.items())

    containment_ok = all(
        student["qualified_track"] is None or student["qualified_track"] in student["preferred_tracks"]
        for student in placed
    )

    # A waiting or lower-choice student must never see a better choice held open.
    fairness_ok = True
    for student in placed:
        position = student["preference_position"] or len(student["preferred_tracks"]) + 1
        better = student["preferred_tracks"][: position - 1]
        for name in better:
            if name in quota_by_track and counts.get(name, 0) < quota_by_track[name]:
                fairness_ok = False

    determinism_ok = (
        [(s["student_id"], s["rank"], s["qualified_track"]) for s in result["students"]]
        == [(s["student_id"], s["rank"], s["qualified_track"]) for s in rerun["students"]]
    )

    return {
        "rank_permutation": {"passed": rank_ok},
        "total_score_exact": {"passed": totals_ok},
        "capacity_respected": {"passed": capacity_ok, "assigned_by_track": counts},
        "preference_containment": {"passed": containment_ok},
        "no_better_seat_left_open": {"passed": fairness_ok},
        "deterministic_rerun": {"passed": determinism_ok},
    }


def run_scenario(case: dict) -> dict:
    tracks = deepcopy(case["tracks"])
    students = build_cohort(
        seed=int(case["seed"]),
        size=int(case["size"]),
        track_names=[track["name"] for track in tracks],
        popular_bias=float(case.get("popular_bias", 0.0)),
        empty_preference_rate=float(case.get("empty_preference_rate", 0.0)),
        unknown_preference_rate=float(case.get("unknown_preference_rate", 0.0)),
    )
    result = run_placement(_payload(deepcopy(students), tracks))
    rerun = run_placement(_payload(deepcopy(students), tracks))
    checks = evaluate_invariants(students, tracks, result, rerun)
    metrics = collect_metrics(result)
    return {
        "scenario": case["scenario"],
        "seed": case["seed"],
        "size": case["size"],
        "passed": all(check["passed"] for check in checks.values()),
        "checks": checks,
        "metrics": metrics,
        "warning_codes": sorted({warning["code"] for warning in result["warnings"]}),
    }


def build_results_readme(report: dict) -> str:
    lines = [
        "# Cohort smoke results",
        "",
        f"Overall: **{'PASS' if report['passed'] else 'FAIL'}** ({len(report['scenarios'])} scenarios)",
        "",
        "| scenario | students | assigned | first choice | fill | result |",
        "|---|---:|---:|---:|---:|---|",
    ]
    for item in report["scenarios"]:
        metrics = item["metrics"]
        lines.append(
            f"| {item['scenario']} | {metrics['students_count']} | {metrics['assigned_count']} "
            f"| {metrics['first_choice_ratio']:.2%} | {metrics['overall_fill_ratio']:.2%} "
            f"| {'PASS' if item['passed'] else 'FAIL'} |"
        )

    failures = [
        (item["scenario"], name)
        for item in report["scenarios"]
        for name, check in item["checks"].items()
        if not check["passed"]
    ]
    if failures:
        lines.extend(["", "## Failed checks", ""])
        lines.extend(f"- `{scenario}`: {name}" for scenario, name in failures)

    return "\n".join(lines) + "\n"


def main() -> None:
    scenarios = [run_scenario(case) for case in SCENARIOS]
    report = {
        "schema_version": "1.0",
        "passed": all(item["passed"] for item in scenarios),
        "scenarios": scenarios,
    }
    OUT.parent.mkdir(parents=True, exist_ok=True)
    OUT.write_text(json.dumps(report, ensure_ascii=False, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    README_OUT.write_text(build_results_readme(report), encoding="utf-8")
    print(f"Wrote {OUT.relative_to(ROOT)} ({'PASS' if report['passed'] else 'FAIL'})")
    if not report["passed"]:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
