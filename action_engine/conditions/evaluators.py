"""
Condition Evaluators — one pure matching function per condition kind.

Each evaluator takes (entity, config, adapter) and returns an
EvaluationResult whose context holds the merge-field values a rule's
templates may reference.

Behavioral Contract:
- Missing data (no phase timestamp, no date, no threshold) is a non-match,
  never an error
- Configuration is validated against the kind's model; a structurally
  invalid config raises pydantic.ValidationError for the pipeline to contain
- Evaluators read entities only through the adapter
"""

import math
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import BaseModel

from action_engine.adapters.base import EntityAdapter
from action_engine.adapters.timestamps import MS_PER_DAY, to_datetime, to_epoch_ms
from action_engine.models.action_item import EvaluationResult
from action_engine.models.conditions import (
    DateExpiringConfig,
    LastNoteStaleConfig,
    PhaseTimeConfig,
    SprintDeadlineConfig,
    TaskIncompleteConfig,
    TaskStaleConfig,
    TimeSinceCreationConfig,
)
from action_engine.models.rule import ConditionType

# phase_time sentinel: any phase not listed in exclude_phases
ANY_ACTIVE_PHASE = "_any_active"

DEFAULT_DAYS_WARNING = 30
DEFAULT_SPRINT_WARNING_DAY = 3
DEFAULT_SPRINT_EXPIRED_DAY = 7

Config = Union[Mapping[str, Any], BaseModel]
Evaluator = Callable[[Any, Config, EntityAdapter], EvaluationResult]


def _phase_mismatch(current_phase: str, target_phase: Optional[str]) -> bool:
    return bool(target_phase) and current_phase != target_phase


def _format_short_date(epoch_ms: float) -> str:
    """e.g. 'Mar 5'"""
    dt = to_datetime(epoch_ms)
    return f"{dt:%b} {dt.day}"


def evaluate_phase_time(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    """Entity has sat in a phase (or any active phase) for at least min_days."""
    cfg = PhaseTimeConfig.model_validate(config)
    phase = adapter.phase(entity)

    if cfg.phase == ANY_ACTIVE_PHASE:
        if phase in cfg.exclude_phases:
            return EvaluationResult.no_match()
    elif _phase_mismatch(phase, cfg.phase):
        return EvaluationResult.no_match()

    days_in_phase = adapter.days_in_phase(entity)
    if days_in_phase < (cfg.min_days or 0):
        return EvaluationResult.no_match()

    return EvaluationResult(
        matches=True,
        context={"days_in_phase": days_in_phase, "phase_name": phase},
    )


def evaluate_task_incomplete(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    """
    A task is still open after min_days.

    With a phase filter the clock is time in that phase (stagnation within a
    stage); without one it is time since creation (total neglect).
    """
    cfg = TaskIncompleteConfig.model_validate(config)
    phase = adapter.phase(entity)
    if _phase_mismatch(phase, cfg.phase):
        return EvaluationResult.no_match()

    if adapter.is_task_done(entity, cfg.task_id):
        return EvaluationResult.no_match()

    days_in_phase = adapter.days_in_phase(entity)
    days_since_created = adapter.days_since_creation(entity)
    relevant_days = days_in_phase if cfg.phase else days_since_created
    if relevant_days < (cfg.min_days or 0):
        return EvaluationResult.no_match()

    return EvaluationResult(
        matches=True,
        context={
            "days_in_phase": days_in_phase,
            "days_since_created": days_since_created,
            "phase_name": phase,
            "task_name": cfg.task_id,
        },
    )


def evaluate_task_stale(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    """One task is done but its follow-up is still pending after min_days."""
    cfg = TaskStaleConfig.model_validate(config)
    phase = adapter.phase(entity)
    if _phase_mismatch(phase, cfg.phase):
        return EvaluationResult.no_match()

    if not adapter.is_task_done(entity, cfg.done_task_id):
        return EvaluationResult.no_match()
    if adapter.is_task_done(entity, cfg.pending_task_id):
        return EvaluationResult.no_match()

    # Never alarm without a measurable start.
    phase_start = adapter.phase_timestamp(entity, cfg.phase)
    if not phase_start:
        return EvaluationResult.no_match()

    days_since = math.floor((adapter.now_ms() - phase_start) / MS_PER_DAY)
    if days_since < (cfg.min_days or 0):
        return EvaluationResult.no_match()

    return EvaluationResult(
        matches=True,
        context={"days_in_phase": days_since, "phase_name": phase},
    )


def evaluate_date_expiring(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    """
    A dated attribute has expired, or expires within the warning window.

    `days_exclude_under` carves out the near end of the window so a tighter
    rule covering it is not duplicated by this one.
    """
    cfg = DateExpiringConfig.model_validate(config)
    expires_ms = to_epoch_ms(adapter.date_field(entity, cfg.field))
    if expires_ms is None:
        return EvaluationResult.no_match()

    days_until = math.ceil((expires_ms - adapter.now_ms()) / MS_PER_DAY)

    if cfg.days_until is not None and cfg.days_until < 0:
        if days_until >= 0:
            return EvaluationResult.no_match()
        return EvaluationResult(
            matches=True,
            context={
                "days_until_expiry": abs(days_until),
                "expiry_date": _format_short_date(expires_ms),
            },
        )

    days_warning = cfg.days_warning or DEFAULT_DAYS_WARNING
    exclude_under = cfg.days_exclude_under or 0

    if days_until < 0 or days_until > days_warning:
        return EvaluationResult.no_match()
    if exclude_under > 0 and days_until <= exclude_under:
        return EvaluationResult.no_match()

    return EvaluationResult(
        matches=True,
        context={
            "days_until_expiry": days_until,
            "expiry_date": _format_short_date(expires_ms),
        },
    )


def evaluate_time_since_creation(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    """Record is older than min_minutes (or min_days); minutes win if both are set."""
    cfg = TimeSinceCreationConfig.model_validate(config)
    phase = adapter.phase(entity)
    if _phase_mismatch(phase, cfg.phase):
        return EvaluationResult.no_match()

    if cfg.task_not_done and adapter.is_task_done(entity, cfg.task_not_done):
        return EvaluationResult.no_match()

    if cfg.min_minutes:
        minutes_since = adapter.minutes_since_creation(entity)
        if minutes_since < cfg.min_minutes:
            return EvaluationResult.no_match()
        return EvaluationResult(
            matches=True,
            context={
                "minutes_since_created": round(minutes_since),
                "days_since_created": adapter.days_since_creation(entity),
                "phase_name": phase,
            },
        )

    if cfg.min_days:
        days_since = adapter.days_since_creation(entity)
        if days_since < cfg.min_days:
            return EvaluationResult.no_match()
        return EvaluationResult(
            matches=True,
            context={"days_since_created": days_since, "phase_name": phase},
        )

    return EvaluationResult.no_match()


def evaluate_last_note_stale(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    cfg = LastNoteStaleConfig.model_validate(config)
    phase = adapter.phase(entity)
    if _phase_mismatch(phase, cfg.phase):
        return EvaluationResult.no_match()

    last_note = adapter.last_note_date(entity)
    if last_note:
        days_since_last_note = math.floor((adapter.now_ms() - last_note) / MS_PER_DAY)
    else:
        # No notes yet: measure from creation.
        days_since_last_note = adapter.days_since_creation(entity)

    if days_since_last_note < (cfg.min_days or 0):
        return EvaluationResult.no_match()

    return EvaluationResult(
        matches=True,
        context={"days_since_last_note": days_since_last_note, "phase_name": phase},
    )


def evaluate_sprint_deadline(entity: Any, config: Config, adapter: EntityAdapter) -> EvaluationResult:
    """Phase-relative countdown; matches from warning_day onwards."""
    cfg = SprintDeadlineConfig.model_validate(config)
    phase = adapter.phase(entity)
    if _phase_mismatch(phase, cfg.phase):
        return EvaluationResult.no_match()

    sprint_start = adapter.phase_timestamp(entity, cfg.phase)
    if not sprint_start:
        return EvaluationResult.no_match()

    sprint_day = math.floor((adapter.now_ms() - sprint_start) / MS_PER_DAY)
    if sprint_day < (cfg.warning_day or DEFAULT_SPRINT_WARNING_DAY):
        return EvaluationResult.no_match()

    expired_day = cfg.expired_day or DEFAULT_SPRINT_EXPIRED_DAY
    return EvaluationResult(
        matches=True,
        context={
            "sprint_day": sprint_day,
            "sprint_remaining": max(0, expired_day - sprint_day),
            "days_in_phase": sprint_day,
            "phase_name": phase,
        },
    )


# Registry — one evaluator per condition kind
EVALUATORS: Dict[ConditionType, Evaluator] = {
    ConditionType.PHASE_TIME: evaluate_phase_time,
    ConditionType.TASK_INCOMPLETE: evaluate_task_incomplete,
    ConditionType.TASK_STALE: evaluate_task_stale,
    ConditionType.DATE_EXPIRING: evaluate_date_expiring,
    ConditionType.TIME_SINCE_CREATION: evaluate_time_since_creation,
    ConditionType.LAST_NOTE_STALE: evaluate_last_note_stale,
    ConditionType.SPRINT_DEADLINE: evaluate_sprint_deadline,
}


def parse_condition_type(condition_type: Any) -> Optional[ConditionType]:
    """Map a stored condition-kind tag onto the closed set, or None."""
    try:
        return ConditionType(condition_type)
    except ValueError:
        return None


def get_evaluator(condition_type: Any) -> Optional[Evaluator]:
    """Look up the evaluator for a condition kind; unknown kinds yield None."""
    kind = parse_condition_type(condition_type)
    if kind is None:
        return None
    return EVALUATORS[kind]
