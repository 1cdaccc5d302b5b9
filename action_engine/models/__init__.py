"""Action engine data models."""

from action_engine.models.action_item import ActionItem, EvaluateOptions, EvaluationResult
from action_engine.models.conditions import (
    CONDITION_CONFIG_MODELS,
    DateExpiringConfig,
    LastNoteStaleConfig,
    PhaseTimeConfig,
    SprintDeadlineConfig,
    TaskIncompleteConfig,
    TaskStaleConfig,
    TimeSinceCreationConfig,
)
from action_engine.models.config import EngineConfig
from action_engine.models.entity import Applicant, Lead, Note, TaskCompletion
from action_engine.models.rule import (
    URGENCY_ORDER,
    ConditionType,
    EntityType,
    Rule,
    Urgency,
    UrgencyEscalation,
)

__all__ = [
    "ActionItem",
    "Applicant",
    "CONDITION_CONFIG_MODELS",
    "ConditionType",
    "DateExpiringConfig",
    "EngineConfig",
    "EntityType",
    "EvaluateOptions",
    "EvaluationResult",
    "LastNoteStaleConfig",
    "Lead",
    "Note",
    "PhaseTimeConfig",
    "Rule",
    "SprintDeadlineConfig",
    "TaskCompletion",
    "TaskIncompleteConfig",
    "TaskStaleConfig",
    "TimeSinceCreationConfig",
    "URGENCY_ORDER",
    "Urgency",
    "UrgencyEscalation",
]
