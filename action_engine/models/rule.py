"""Action Item Rule — externally authored alerting rule."""

from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field


class Urgency(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


# Lower rank sorts first.
URGENCY_ORDER: Dict[Urgency, int] = {
    Urgency.CRITICAL: 0,
    Urgency.WARNING: 1,
    Urgency.INFO: 2,
}


class EntityType(str, Enum):
    APPLICANT = "applicant"
    LEAD = "lead"


class ConditionType(str, Enum):
    """The closed set of condition kinds the engine knows how to evaluate."""
    PHASE_TIME = "phase_time"
    TASK_INCOMPLETE = "task_incomplete"
    TASK_STALE = "task_stale"
    DATE_EXPIRING = "date_expiring"
    TIME_SINCE_CREATION = "time_since_creation"
    LAST_NOTE_STALE = "last_note_stale"
    SPRINT_DEADLINE = "sprint_deadline"


class UrgencyEscalation(BaseModel):
    """Raise urgency once an entity has been waiting at least `min_days`."""

    min_days: Optional[Union[int, float]] = None
    urgency: Optional[Urgency] = None


class Rule(BaseModel):
    """
    A single action item rule.

    `condition_type` stays a plain string so that rules written by a newer
    authoring surface (or by hand) load cleanly; kinds the engine does not
    recognise are skipped at evaluation time.
    """

    id: str
    name: str = ""
    entity_type: EntityType
    condition_type: str
    condition_config: dict = {}
    urgency: Urgency = Urgency.INFO
    urgency_escalation: Optional[UrgencyEscalation] = None
    icon: str = ""                          # empty: the engine default icon
    title_template: str = ""
    detail_template: str = ""
    action_template: str = ""
    enabled: bool = True
    sort_order: int = Field(default=0)
