"""
Adaptation rules: plateau detection, stagnation scan, and deload triggers.

Works over the same set history as the progression engine.  Nothing here
acts on its findings: a plateaued exercise yields a suggestion for the
exercise-selection step, and deload triggers yield a recommendation.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from .config import (
    DEFAULT_DELOAD_CONFIG,
    DEFAULT_PLATEAU_CONFIG,
    DEFAULT_STAGNATION_CONFIG,
    DeloadConfig,
    PlateauConfig,
    StagnationConfig,
)
from .metrics import as_utc, best_set_score, mean, percent_change, round_to_tenth
from .models import (
    DeloadRecommendation,
    ExerciseStagnation,
    PlateauAssessment,
    PlateauSuggestion,
    SessionPerformance,
    SetRecord,
    VolumeStatus,
)
from .progression import effective_weight

logger = logging.getLogger(__name__)


def session_performances(sets: Iterable[SetRecord]) -> list[SessionPerformance]:
    """
    Best set of each training day, oldest first.

    Sets are grouped by the calendar day of completed_at; warmups,
    skipped sets and sets without a timestamp are ignored.

    Args:
        sets: Sets for a single exercise

    Returns:
        One SessionPerformance per day
    """
    by_day: dict[date, list[SetRecord]] = defaultdict(list)
    for s in sets:
        if s.is_working and s.completed_at is not None:
            by_day[as_utc(s.completed_at).date()].append(s)

    performances = []
    for day in sorted(by_day):
        best: SessionPerformance | None = None
        for s in by_day[day]:
            weight = effective_weight(s.weight)
            reps = max(0, int(s.reps or 0))
            score = best_set_score(weight, reps)
            if best is None or score > best.score:
                best = SessionPerformance(
                    session_date=day.isoformat(),
                    best_weight=weight,
                    best_reps=reps,
                    score=score,
                )
        performances.append(best)
    return performances


def detect_plateau(
    exercise_name: str,
    sets: Sequence[SetRecord],
    config: PlateauConfig = DEFAULT_PLATEAU_CONFIG,
    has_technique: bool = False,
) -> PlateauAssessment:
    """
    Run the progressing/stalled/plateaued state machine over an exercise.

    A session improves when its best-set score is strictly above every
    earlier session.  After ``stall_sessions`` consecutive non-improving
    sessions the exercise is stalled; after ``plateau_sessions`` more it
    is plateaued.  Any improvement resets to progressing.

    Args:
        exercise_name: Exercise to analyze (matched case-insensitively)
        sets: Set history; other exercises' sets are ignored
        config: Session thresholds
        has_technique: Whether an advanced technique is already applied

    Returns:
        PlateauAssessment, with a suggestion when plateaued
    """
    name = exercise_name.strip().lower()
    mine = [s for s in sets if s.exercise_name.strip().lower() == name]
    sessions = session_performances(mine)

    state = "progressing"
    best_score = 0.0
    non_improving = 0
    plateau_after = config.stall_sessions + config.plateau_sessions

    for index, session in enumerate(sessions):
        if index == 0 or session.score > best_score:
            best_score = session.score
            non_improving = 0
            state = "progressing"
            continue
        non_improving += 1
        if non_improving >= plateau_after:
            state = "plateaued"
        elif non_improving >= config.stall_sessions:
            state = "stalled"

    suggestion = None
    if state == "plateaued":
        action = "rotate_exercise" if has_technique else "escalate_technique"
        suggestion = PlateauSuggestion(exercise_name=exercise_name, suggested_action=action)
        logger.debug(
            "%s plateaued after %d non-improving sessions -> %s",
            exercise_name, non_improving, action,
        )

    return PlateauAssessment(
        exercise_name=exercise_name,
        state=state,
        sessions_analyzed=len(sessions),
        non_improving_sessions=non_improving,
        best_score=best_score,
        last_score=sessions[-1].score if sessions else 0.0,
        suggestion=suggestion,
    )


def _week_start(moment: datetime) -> date:
    """Sunday that starts the week containing ``moment``."""
    day = moment.date()
    return day - timedelta(days=(day.weekday() + 1) % 7)


def analyze_stagnation(
    exercise_names: Sequence[str],
    sets: Iterable[SetRecord],
    now: datetime,
    config: StagnationConfig = DEFAULT_STAGNATION_CONFIG,
) -> list[ExerciseStagnation]:
    """
    Week-bucketed stagnation scan over recent working sets.

    Sets from the last ``window_weeks`` weeks are bucketed into
    Sunday-start weeks (naive timestamps count as UTC).  avg_weight_change
    compares the mean weight of the first and last week in percent; an
    exercise used for at least ``min_weeks`` weeks whose change stays
    under the threshold is plateaued.

    Args:
        exercise_names: Exercises to report on (matched case-insensitively)
        sets: Set history
        now: End of the window
        config: Window and thresholds

    Returns:
        One entry per requested exercise that has data, in order of first use
    """
    if not exercise_names:
        return []

    wanted = {n.lower(): n for n in exercise_names}
    end = as_utc(now)
    cutoff = end - timedelta(weeks=config.window_weeks)

    recent = sorted(
        (
            s for s in sets
            if s.is_working
            and s.completed_at is not None
            and s.weight is not None
            and cutoff <= as_utc(s.completed_at) <= end
        ),
        key=lambda s: as_utc(s.completed_at),
    )

    weights_by_week: dict[str, dict[date, list[float]]] = {}
    for s in recent:
        name = wanted.get(s.exercise_name.lower())
        if name is None:
            continue
        weeks = weights_by_week.setdefault(name, defaultdict(list))
        weeks[_week_start(as_utc(s.completed_at))].append(effective_weight(s.weight))

    results = []
    for name, weeks in weights_by_week.items():
        ordered = [weeks[w] for w in sorted(weeks)]
        change = 0.0
        if len(ordered) >= 2:
            first_avg = mean(ordered[0])
            if first_avg > 0:
                change = percent_change(mean(ordered[-1]), first_avg)

        results.append(
            ExerciseStagnation(
                name=name,
                weeks_used=len(ordered),
                is_plateaued=(
                    len(ordered) >= config.min_weeks
                    and abs(change) < config.change_threshold_pct
                ),
                avg_weight_change=round_to_tenth(change),
            )
        )

    logger.debug(
        "stagnation: %d exercises analyzed, %d plateaued",
        len(results), sum(r.is_plateaued for r in results),
    )
    return results


def should_deload(
    assessments: Sequence[PlateauAssessment],
    volume_statuses: Sequence[VolumeStatus],
    config: DeloadConfig = DEFAULT_DELOAD_CONFIG,
    plateau_config: PlateauConfig = DEFAULT_PLATEAU_CONFIG,
) -> DeloadRecommendation:
    """
    Decide whether a deload week is warranted.

    Triggers:
    - stalled_exercises: at least ``stalled_share`` of the assessed
      exercises are stalled or plateaued
    - over_mrv: any muscle is at or above its MRV
    - performance_regression: some exercise's last session scored at
      least ``regression_threshold`` below its best

    A deload is recommended when ``min_triggers`` of them fire.
    """
    triggers = []

    if assessments:
        stuck = sum(a.state != "progressing" for a in assessments)
        if stuck / len(assessments) >= config.stalled_share:
            triggers.append("stalled_exercises")

    if any(v.status == "over_mrv" for v in volume_statuses):
        triggers.append("over_mrv")

    if any(
        a.drop_from_best > 0 and a.drop_from_best >= plateau_config.regression_threshold
        for a in assessments
    ):
        triggers.append("performance_regression")

    return DeloadRecommendation(
        recommended=len(triggers) >= config.min_triggers,
        triggers=triggers,
        min_triggers=config.min_triggers,
    )
