"""Condition configurations — one shape per condition kind."""

from typing import Dict, List, Optional, Type, Union

from pydantic import BaseModel

from action_engine.models.rule import ConditionType

# Day and day-count thresholds; fractional values compare as-is.
Threshold = Union[int, float]


class PhaseTimeConfig(BaseModel):
    phase: Optional[str] = None             # or the "any active phase" sentinel
    min_days: Optional[Threshold] = None
    exclude_phases: List[str] = []


class TaskIncompleteConfig(BaseModel):
    task_id: Optional[str] = None
    phase: Optional[str] = None
    min_days: Optional[Threshold] = None


class TaskStaleConfig(BaseModel):
    done_task_id: Optional[str] = None
    pending_task_id: Optional[str] = None
    phase: Optional[str] = None
    min_days: Optional[Threshold] = None


class DateExpiringConfig(BaseModel):
    """
    Two modes: a negative `days_until` selects "already expired", anything
    else means "expiring within `days_warning` days".
    """
    field: Optional[str] = None
    days_until: Optional[Threshold] = None
    days_warning: Optional[Threshold] = None
    days_exclude_under: Optional[Threshold] = None


class TimeSinceCreationConfig(BaseModel):
    min_minutes: Optional[float] = None
    min_days: Optional[Threshold] = None
    phase: Optional[str] = None
    task_not_done: Optional[str] = None


class LastNoteStaleConfig(BaseModel):
    min_days: Optional[Threshold] = None
    phase: Optional[str] = None


class SprintDeadlineConfig(BaseModel):
    phase: Optional[str] = None
    warning_day: Optional[Threshold] = None
    critical_day: Optional[Threshold] = None      # informational; urgency comes from escalation
    expired_day: Optional[Threshold] = None


CONDITION_CONFIG_MODELS: Dict[ConditionType, Type[BaseModel]] = {
    ConditionType.PHASE_TIME: PhaseTimeConfig,
    ConditionType.TASK_INCOMPLETE: TaskIncompleteConfig,
    ConditionType.TASK_STALE: TaskStaleConfig,
    ConditionType.DATE_EXPIRING: DateExpiringConfig,
    ConditionType.TIME_SINCE_CREATION: TimeSinceCreationConfig,
    ConditionType.LAST_NOTE_STALE: LastNoteStaleConfig,
    ConditionType.SPRINT_DEADLINE: SprintDeadlineConfig,
}
