"""Pipeline records — the two entity kinds the engine can scan."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict

# Epoch milliseconds, an ISO-8601 string, or a datetime.
Timestamp = Union[int, float, str, datetime]


class TaskCompletion(BaseModel):
    """Enriched task state; equivalent to a plain `True` when completed."""

    completed: bool = False
    completed_at: Optional[Timestamp] = None
    completed_by: Optional[str] = None


class Note(BaseModel):
    text: str = ""
    timestamp: Optional[Timestamp] = None
    date: Optional[Timestamp] = None        # older notes carry `date` only
    author: Optional[str] = None


class Applicant(BaseModel):
    """
    A job applicant moving through the hiring pipeline.

    `calculated_phase` is derived upstream from task progress; an explicit
    `phase_override` wins over it. Extra attributes (certification
    expirations and similar) are kept and readable as date fields.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    first_name: str = ""
    last_name: str = ""
    phase_override: Optional[str] = None
    calculated_phase: Optional[str] = None
    phase_timestamps: Dict[str, int] = {}   # phase -> epoch ms entered
    tasks: Dict[str, Any] = {}              # task id -> bool | TaskCompletion-shaped
    notes: List[Note] = []
    application_date: Optional[Timestamp] = None
    archived: bool = False


class Lead(BaseModel):
    """A sales lead; `won` and `lost` are terminal phases."""

    model_config = ConfigDict(extra="allow")

    id: str
    first_name: str = ""
    last_name: str = ""
    phase: Optional[str] = None
    phase_timestamps: Dict[str, int] = {}
    tasks: Dict[str, Any] = {}
    notes: List[Note] = []
    created_at: Optional[Timestamp] = None
    archived: bool = False
