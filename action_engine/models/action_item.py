"""Evaluation results and the action items the pipeline produces."""

from typing import Optional

from pydantic import BaseModel, Field

from action_engine.models.rule import EntityType, Urgency


class EvaluationResult(BaseModel):
    """Outcome of a single condition evaluation."""

    matches: bool
    context: dict = {}                      # merge-field values for templates

    @classmethod
    def no_match(cls) -> "EvaluationResult":
        return cls(matches=False, context={})


class ActionItem(BaseModel):
    """One resolved alert produced by a matching (entity, rule) pair."""

    entity_id: str
    entity_type: EntityType
    name: str
    urgency: Urgency
    icon: str
    title: str
    detail: str
    action: str
    rule_id: str
    phase: Optional[str] = None


class EvaluateOptions(BaseModel):
    """Caller-side filters applied after evaluation."""

    urgency: Optional[Urgency] = None
    limit: Optional[int] = Field(default=None, ge=0)
    entity_id: Optional[str] = None
