"""
Integration tests for the lift-scheduler engine.

Each test exercises a full path through the package: YAML config and
approach tables (with user overrides in a temporary HOME), JSONL history
-> progression target -> technique expansion, and plateau detection over
the same history.  Hand-computed expected values are included in comments.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from lift_scheduler.core.adaptation import detect_plateau, should_deload
from lift_scheduler.core.engine.config_loader import (
    list_approaches,
    load_approach_landmarks,
    load_deload_config,
    load_model_config,
    load_near_mrv_margin,
    load_plateau_config,
    load_stagnation_config,
)
from lift_scheduler.core.models import SetRecord
from lift_scheduler.core.progression import get_progressive_target, resolve_exercise_target
from lift_scheduler.core.scheduler import build_split_plan, generate_schedule
from lift_scheduler.core.techniques import (
    TECHNIQUE_TYPES,
    AppliedTechnique,
    DropSetConfig,
    GiantSetConfig,
    RestPauseConfig,
    default_config,
    expand,
)
from lift_scheduler.core.volume import classify_all
from lift_scheduler.io.history_store import SetHistoryStore
from lift_scheduler.io.serializers import (
    ValidationError,
    expansion_result_to_dict,
    plateau_assessment_to_dict,
    progressive_target_to_dict,
    set_record_from_dict,
    split_plan_to_dict,
    technique_from_dict,
    technique_to_dict,
)


# ===========================================================================
# Helpers
# ===========================================================================

@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point HOME at an empty temp dir so user overrides are under test control."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def _write_user_file(home, relative: str, text: str):
    path = home / ".lift-scheduler" / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _write_history(path, records: list[dict]) -> None:
    path.write_text("".join(json.dumps(r) + "\n" for r in records), encoding="utf-8")


def _bench_history() -> list[dict]:
    """Three bench sessions two days apart; last session 80 x 10 @ RIR 1."""
    start = datetime(2026, 2, 2, 18, 0)
    rows = []
    for i, (weight, reps, rir) in enumerate([(77.5, 10, 2), (80, 9, 2), (80, 10, 1)]):
        day = start + timedelta(days=2 * i)
        rows.append({
            "exercise_name": "Bench Press", "weight": 40, "reps": 10, "rir": 5,
            "set_type": "warmup", "completed_at": day.isoformat(),
        })
        rows.append({
            "exercise_name": "Bench Press", "weight": weight, "reps": reps, "rir": rir,
            "completed_at": (day + timedelta(minutes=5)).isoformat(),
        })
    return rows


# ===========================================================================
# Config loading
# ===========================================================================

class TestModelConfig:
    def test_bundled_defaults(self, home):
        cfg = load_model_config()
        assert cfg["plateau"]["stall_sessions"] == 2
        plateau = load_plateau_config(cfg)
        assert (plateau.stall_sessions, plateau.plateau_sessions) == (2, 2)
        assert load_stagnation_config(cfg).window_weeks == 8
        assert load_deload_config(cfg).min_triggers == 2
        assert load_near_mrv_margin(cfg) == 0

    def test_user_override_is_deep_merged(self, home):
        _write_user_file(home, "model.yaml", "plateau:\n  stall_sessions: 3\n")
        plateau = load_plateau_config()
        assert plateau.stall_sessions == 3
        assert plateau.plateau_sessions == 2

    def test_invalid_values_fall_back_to_defaults(self, home):
        _write_user_file(home, "model.yaml", "deload:\n  min_triggers: 7\n")
        with pytest.warns(UserWarning, match="deload"):
            cfg = load_deload_config()
        assert cfg.min_triggers == 2

    def test_unparseable_user_file_is_ignored(self, home):
        _write_user_file(home, "model.yaml", "plateau: [unclosed\n")
        with pytest.warns(UserWarning):
            cfg = load_model_config()
        assert cfg["plateau"]["stall_sessions"] == 2


class TestApproachLandmarks:
    def test_bundled_approaches(self, home):
        ids = [a["approach_id"] for a in list_approaches()]
        assert ids == ["fst7", "mountain_dog", "y3t"]

    def test_fst7_chest(self, home):
        chest = load_approach_landmarks("fst7")["chest"]
        assert (chest.mev, chest.mav, chest.mrv) == (10, 16, 20)

    def test_y3t_abs_allows_zero_mev(self, home):
        abs_ = load_approach_landmarks("y3t")["abs"]
        assert (abs_.mev, abs_.mav, abs_.mrv) == (0, 10, 20)

    def test_user_override_merges_one_field(self, home):
        _write_user_file(home, "approaches/fst7.yaml", "volume_landmarks:\n  chest: {mav: 17}\n")
        chest = load_approach_landmarks("fst7")["chest"]
        assert (chest.mev, chest.mav, chest.mrv) == (10, 17, 20)

    def test_user_only_approach(self, home):
        _write_user_file(
            home,
            "approaches/custom.yaml",
            "display_name: Custom\nvolume_landmarks:\n  chest: {mev: 6, mav: 10, mrv: 14}\n",
        )
        assert "custom" in [a["approach_id"] for a in list_approaches()]
        assert load_approach_landmarks("custom")["chest"].mav == 10

    def test_invalid_user_approach_is_skipped_in_listing(self, home):
        _write_user_file(
            home, "approaches/broken.yaml", "volume_landmarks:\n  chest: {mev: 12, mav: 10, mrv: 14}\n"
        )
        with pytest.warns(UserWarning, match="broken"):
            ids = [a["approach_id"] for a in list_approaches()]
        assert "broken" not in ids

    def test_unknown_approach(self, home):
        with pytest.raises(ValueError, match="Unknown approach"):
            load_approach_landmarks("westside")


# ===========================================================================
# History store
# ===========================================================================

class TestSetHistoryStore:
    def test_load_sets(self, tmp_path):
        path = tmp_path / "history.jsonl"
        _write_history(path, [{"type": "comment", "text": "imported"}] + _bench_history())
        sets = SetHistoryStore(path).load_sets()
        assert len(sets) == 6
        assert sets[0].set_type == "warmup"

    def test_recent_working_sets(self, tmp_path):
        path = tmp_path / "history.jsonl"
        _write_history(path, _bench_history())
        recent = SetHistoryStore(path).recent_working_sets("bench press")
        assert [(s.weight, s.reps) for s in recent] == [(80, 10), (80, 9), (77.5, 10)]

    def test_bad_line_reports_line_number(self, tmp_path):
        path = tmp_path / "history.jsonl"
        path.write_text('{"exercise_name": "Squat", "weight": 100, "reps": 5}\n{"weight": 1}\n')
        with pytest.raises(ValidationError, match="line 2"):
            SetHistoryStore(path).load_sets()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SetHistoryStore(tmp_path / "nope.jsonl").load_sets()

    def test_append_set(self, tmp_path):
        store = SetHistoryStore(tmp_path / "sub" / "history.jsonl")
        record = SetRecord("Squat", 100.0, 5, 2, completed_at=datetime(2026, 2, 2, 9, 0))
        store.append_set(record)
        assert store.load_sets() == [record]


# ===========================================================================
# Serializers
# ===========================================================================

class TestSerializers:
    def test_set_record_utc_timestamp(self):
        record = set_record_from_dict({
            "exercise_name": "Squat", "weight": 100, "reps": 5.0,
            "completed_at": "2026-02-02T09:00:00Z",
        })
        assert record.reps == 5
        assert record.completed_at == datetime(2026, 2, 2, 9, 0, tzinfo=timezone.utc)
        assert record.rir is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"weight": 100, "reps": 5},
            {"exercise_name": "Squat", "reps": 5.5},
            {"exercise_name": "Squat", "weight": "heavy"},
            {"exercise_name": "Squat", "set_type": "dropset"},
            {"exercise_name": "Squat", "completed_at": "yesterday"},
        ],
    )
    def test_set_record_rejects(self, payload):
        with pytest.raises(ValidationError):
            set_record_from_dict(payload)

    def test_technique_camel_case(self):
        applied = technique_from_dict({
            "technique": "drop_set",
            "config": {"drops": 2, "dropPercentage": 30},
            "rationale": "weak point",
        })
        assert applied.config == DropSetConfig(drops=2, drop_percentage=30.0)
        assert applied.rationale == "weak point"

    def test_technique_tuple_fields(self):
        applied = technique_from_dict({
            "technique": "giant_set",
            "config": {"exercise_indices": [0, 1, 2], "rest_after_all": 120},
        })
        assert applied.config == GiantSetConfig(exercise_indices=(0, 1, 2), rest_after_all=120)
        assert technique_to_dict(applied)["config"]["exercise_indices"] == [0, 1, 2]

    @pytest.mark.parametrize(
        "payload, match",
        [
            ({"technique": "21s", "config": {}}, "Invalid technique"),
            ({"technique": "drop_set", "config": {"drops": 2}}, "Incomplete"),
            ({"technique": "drop_set", "config": {"drops": "two", "drop_percentage": 20}}, "drops"),
            ({"technique": "drop_set", "config": {"drops": True, "drop_percentage": 20}}, "drops"),
            ({"technique": "rest_pause", "config": {"mini_sets": 2, "rest_seconds": 15, "x": 1}}, "Unknown"),
            ({"technique": "pyramid", "config": {"direction": "sideways", "steps": 3}}, "direction"),
        ],
    )
    def test_technique_rejects(self, payload, match):
        with pytest.raises(ValidationError, match=match):
            technique_from_dict(payload)

    def test_every_default_config_survives_a_dict_trip(self):
        for kind in TECHNIQUE_TYPES:
            applied = AppliedTechnique(config=default_config(kind))
            assert technique_from_dict(technique_to_dict(applied)) == applied


# ===========================================================================
# Full pipelines
# ===========================================================================

class TestPipelines:
    def test_history_to_target_to_expansion(self, tmp_path):
        # Last working set 80 x 10 @ RIR 1 -> 82.5 x 8
        # Rest-pause on 3 sets: 3 x (82.5 x 8), then 2 x (82.5 x max(2, 8 // 3) = 2)
        path = tmp_path / "history.jsonl"
        _write_history(path, _bench_history())
        history = SetHistoryStore(path).load_sets()

        target = resolve_exercise_target("Bench Press", (8, 12), history)
        assert (target.weight, target.reps, target.based_on_sets) == (82.5, 8, 3)

        technique = AppliedTechnique(config=RestPauseConfig(mini_sets=2, rest_seconds=15))
        result = expand(technique, target.weight, target.reps, 3)
        assert [(v.weight, v.target_reps) for v in result.virtual_sets] == [
            (82.5, 8), (82.5, 8), (82.5, 8), (82.5, 2), (82.5, 2),
        ]

    def test_history_to_plateau(self, tmp_path):
        # Scores 775, 720, 800: the last session is a new best
        path = tmp_path / "history.jsonl"
        _write_history(path, _bench_history())
        history = SetHistoryStore(path).load_sets()
        assessment = detect_plateau("Bench Press", history, load_plateau_config({}))
        assert (assessment.state, assessment.sessions_analyzed, assessment.best_score) == (
            "progressing", 3, 800,
        )

    def test_split_plan_against_approach(self, home):
        landmarks = load_approach_landmarks("fst7")
        base = {m: lm.mav for m, lm in landmarks.items()}
        plan = build_split_plan("biceps", 5, base, aggressiveness="moderate")
        # cycle 6, target 4, interval 1 -> arms x4, then pull (4 % 3), legs (5 % 3)
        assert plan.sessions == ["arms", "arms", "arms", "arms", "pull", "legs"]
        # biceps MAV 14 * 1.3 = 18.2 -> 18
        assert plan.volume_distribution["biceps"] == 18
        assert plan.volume_distribution["quads"] == 16
        assert "chest" not in plan.volume_distribution

        statuses = {s.muscle: s for s in classify_all(landmarks, plan.volume_distribution)}
        assert statuses["biceps"].status == "over_mrv"
        assert statuses["quads"].zone == "optimal"
        assert statuses["chest"].status == "under_mev"

    def test_deload_from_history_and_volume(self, home):
        sets = [
            SetRecord(name, 100.0, 8, 2, completed_at=datetime(2026, 2, 2) + timedelta(days=2 * i))
            for name in ("Bench Press", "Squat")
            for i in range(3)
        ]
        assessments = [detect_plateau(n, sets) for n in ("Bench Press", "Squat")]
        assert {a.state for a in assessments} == {"stalled"}
        landmarks = load_approach_landmarks("fst7")
        rec = should_deload(assessments, classify_all(landmarks, {"chest": 22}))
        assert rec.recommended
        assert rec.triggers == ["stalled_exercises", "over_mrv"]


# ===========================================================================
# Purity
# ===========================================================================

class TestIdempotence:
    """Identical input, identical output: nothing is cached or mutated."""

    @pytest.mark.parametrize("wf", [0, 1, 3, 6])
    @pytest.mark.parametrize("muscle", ["chest", "quads", "abs", "shoulders_rear"])
    def test_scheduling(self, muscle, wf):
        first = split_plan_to_dict(build_split_plan(muscle, wf, {muscle: 12, "back": 14}))
        second = split_plan_to_dict(build_split_plan(muscle, wf, {muscle: 12, "back": 14}))
        assert json.dumps(first) == json.dumps(second)
        assert generate_schedule(muscle, wf) == generate_schedule(muscle, wf)

    @pytest.mark.parametrize(
        "weight, reps, rir",
        [(100, 12, 1), (37.5, 9, 3), (0, 10, None), (None, None, -1), (float("inf"), 3, 2)],
    )
    def test_progression(self, weight, reps, rir):
        sets = [SetRecord("Bench Press", weight, reps, rir)]
        first = progressive_target_to_dict(get_progressive_target("Bench Press", (8, 12), sets))
        second = progressive_target_to_dict(get_progressive_target("Bench Press", (8, 12), sets))
        assert json.dumps(first) == json.dumps(second)

    @pytest.mark.parametrize("kind", TECHNIQUE_TYPES)
    @pytest.mark.parametrize("weight, reps, sets", [(50, 10, 3), (22.3, 12, 1), (0, 0, 0)])
    def test_expansion(self, kind, weight, reps, sets):
        technique = AppliedTechnique(config=default_config(kind))
        first = expansion_result_to_dict(expand(technique, weight, reps, sets))
        second = expansion_result_to_dict(expand(technique, weight, reps, sets))
        assert json.dumps(first) == json.dumps(second)
        numbers = [v["set_number"] for v in first["virtual_sets"]]
        assert numbers == list(range(1, len(numbers) + 1))

    def test_plateau(self):
        sets = [SetRecord("Dip", 0, 10, completed_at=datetime(2026, 2, d)) for d in (2, 4, 6, 9, 11)]
        first = plateau_assessment_to_dict(detect_plateau("Dip", sets))
        second = plateau_assessment_to_dict(detect_plateau("Dip", sets))
        assert first == second
        assert first["suggestion"] == {"exercise_name": "Dip", "suggested_action": "escalate_technique"}
