"""
Minimal smoke tests for lift-scheduler CLI.

Tests basic functionality:
- App runs without errors
- Split is generated
- Volume is classified
- Target, expansion and plateau work from a history file
- Bad input exits with an error instead of a traceback
"""

import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from lift_scheduler.cli.main import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.lift-scheduler overrides of the machine out of the tests."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def history_path(tmp_path) -> Path:
    """Bench press history: 77.5x10, 80x9, 80x10 @ RIR 1 on alternate days."""
    path = tmp_path / "history.jsonl"
    start = datetime(2026, 2, 2, 18, 0)
    rows = [{"type": "comment", "text": "test history"}]
    for i, (weight, reps, rir) in enumerate([(77.5, 10, 2), (80, 9, 2), (80, 10, 1)]):
        rows.append({
            "exercise_name": "Bench Press", "weight": weight, "reps": reps, "rir": rir,
            "completed_at": (start + timedelta(days=2 * i)).isoformat(),
        })
    path.write_text("".join(json.dumps(r) + "\n" for r in rows), encoding="utf-8")
    return path


@pytest.fixture
def flat_history_path(tmp_path) -> Path:
    """Squat and bench flat at 100 kg x 8, one set every Monday for 5 weeks."""
    path = tmp_path / "flat.jsonl"
    start = datetime(2026, 1, 26, 18, 0)
    rows = [
        {
            "exercise_name": name, "weight": 100, "reps": 8, "rir": 2,
            "completed_at": (start + timedelta(weeks=i)).isoformat(),
        }
        for name in ("Squat", "Bench Press")
        for i in range(5)
    ]
    path.write_text("".join(json.dumps(r) + "\n" for r in rows), encoding="utf-8")
    return path


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "schedule" in result.output
        assert "expand" in result.output

    def test_schedule_json(self):
        """Chest, 4 days: cycle of 5, chest x3 then push/pull, FST-7 MAV 16 x 1.5."""
        result = runner.invoke(app, ["schedule", "chest", "--days", "4", "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["cycle_days"] == 5
        assert data["sessions"] == ["chest", "chest", "chest", "push", "pull"]
        assert data["specialization_frequency"] == 3
        assert data["volume_distribution"]["chest"] == 24
        assert data["frequency_map"]["chest"] == 4
        assert data["recommended_frequency"]["optimal"] == 3

    def test_schedule_table(self):
        result = runner.invoke(app, ["schedule", "quads", "--days", "3", "-a", "moderate"])
        assert result.exit_code == 0
        assert "legs" in result.output

    def test_schedule_table_has_one_row_per_cycle_day(self):
        from lift_scheduler.cli.views import format_schedule_table
        from lift_scheduler.core.scheduler import build_split_plan

        plan = build_split_plan("chest", 4, {"chest": 16})
        table = format_schedule_table(plan)
        assert plan.cycle_days == 5
        assert table.row_count == 5

    def test_schedule_unknown_muscle(self):
        result = runner.invoke(app, ["schedule", "pinkies"])
        assert result.exit_code == 1
        assert "Unknown muscle" in result.output

    def test_schedule_unknown_approach(self):
        result = runner.invoke(app, ["schedule", "chest", "--approach", "westside"])
        assert result.exit_code == 1

    def test_approaches_json(self):
        result = runner.invoke(app, ["approaches", "--json"])
        assert result.exit_code == 0
        ids = [a["approach_id"] for a in json.loads(result.stdout)]
        assert ids == ["fst7", "mountain_dog", "y3t"]

    def test_volume_json(self):
        """12 chest sets against FST-7 10/16/20: in range, sub-optimal, 75% of MAV."""
        result = runner.invoke(app, [
            "volume", "--actual", "chest=12", "--previous", "chest=8", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        chest = next(s for s in data["statuses"] if s["muscle"] == "chest")
        assert (chest["status"], chest["zone"], chest["percentage"]) == ("in_range", "sub_optimal", 75)
        assert data["changes"] == [{
            "muscle": "chest", "current": 12.0, "previous": 8.0,
            "delta": 4.0, "percent_change": 50.0,
        }]

    def test_volume_bad_pair(self):
        result = runner.invoke(app, ["volume", "--actual", "chest"])
        assert result.exit_code != 0

    def test_target_json(self, history_path):
        """Last set 80 x 10 @ RIR 1 -> 82.5 x 8."""
        result = runner.invoke(app, [
            "target", "Bench Press", "--history", str(history_path), "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert (data["weight"], data["reps"], data["rule"]) == (82.5, 8, "increase_load")
        assert data["exercise_name"] == "Bench Press"

    def test_target_without_history_estimates(self, history_path):
        result = runner.invoke(app, [
            "target", "Leg Press", "--history", str(history_path), "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["has_history"] is False
        assert data["reps"] == 8

    def test_target_missing_history(self, tmp_path):
        result = runner.invoke(app, [
            "target", "Bench Press", "--history", str(tmp_path / "missing.jsonl"),
        ])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_expand_drop_set_json(self):
        """3 x 50 kg, then drops at 35 and 24.5 kg for max(6, 10 - 2) = 8 reps."""
        result = runner.invoke(app, [
            "expand", "drop_set",
            "--weight", "50", "--reps", "10", "--sets", "3",
            "--set", "drops=2", "--set", "drop_percentage=30",
            "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["total_sets"] == 5
        assert [v["weight"] for v in data["virtual_sets"]] == [50, 50, 50, 35, 24.5]
        assert [v["label"] for v in data["virtual_sets"]][-2:] == ["DROP", "DROP"]
        assert data["technique"]["config"] == {"drops": 2, "drop_percentage": 30}

    def test_expand_unsupported_falls_back(self):
        result = runner.invoke(app, [
            "expand", "superset", "--weight", "40", "--reps", "12", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["is_supported"] is False
        assert data["total_sets"] == 3

    def test_expand_bad_config(self):
        result = runner.invoke(app, [
            "expand", "drop_set", "--weight", "50", "--reps", "10", "--set", "drops=lots",
        ])
        assert result.exit_code == 1

    def test_expand_unknown_technique(self):
        result = runner.invoke(app, ["expand", "21s", "--weight", "20", "--reps", "7"])
        assert result.exit_code == 1
        assert "Unknown technique" in result.output

    def test_plateau_json(self, history_path):
        result = runner.invoke(app, [
            "plateau", "bench press", "--history", str(history_path), "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["state"] == "progressing"
        assert data["sessions_analyzed"] == 3

    def test_plateau_flat_history(self, flat_history_path):
        """5 flat sessions: 4 without improvement -> plateaued."""
        result = runner.invoke(app, [
            "plateau", "Squat", "--history", str(flat_history_path), "--has-technique", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["state"] == "plateaued"
        assert data["suggestion"]["suggested_action"] == "rotate_exercise"

    def test_stagnation_json(self, flat_history_path):
        result = runner.invoke(app, [
            "stagnation", "--history", str(flat_history_path),
            "--exercise", "Squat", "--now", "2026-03-01T12:00:00", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data == [{
            "name": "Squat", "weeks_used": 5, "is_plateaued": True, "avg_weight_change": 0.0,
        }]

    def test_stagnation_bad_now(self, flat_history_path):
        result = runner.invoke(app, [
            "stagnation", "--history", str(flat_history_path), "--now", "soon",
        ])
        assert result.exit_code == 1

    def test_deload_json(self, flat_history_path):
        """Both exercises plateaued and chest over MRV: two triggers."""
        result = runner.invoke(app, [
            "deload", "--history", str(flat_history_path), "--actual", "chest=22", "--json",
        ])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["recommended"] is True
        assert data["triggers"] == ["stalled_exercises", "over_mrv"]
        assert len(data["exercises"]) == 2

    def test_verbose_flag(self, history_path):
        result = runner.invoke(app, [
            "--verbose", "target", "Bench Press", "--history", str(history_path),
        ])
        assert result.exit_code == 0
        assert "82.5" in result.output
