"""
Entity Adapter — normalizes a record kind into the primitives the engine needs.

Behavioral Contract:
- Evaluators never read entity fields directly; they go through an adapter
- No adapter operation raises; missing data yields a deterministic default
- Time is read from the adapter's clock, so pinning the clock pins the batch
"""

import copy
import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Type

from pydantic import BaseModel

from action_engine.adapters.timestamps import (
    MS_PER_DAY,
    MS_PER_MINUTE,
    floor_days_between,
    to_epoch_ms,
)
from action_engine.models.config import EngineConfig
from action_engine.models.rule import EntityType


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_task_done(task_value: Any) -> bool:
    """A task is done when stored as `True` or as an object marked completed."""
    if isinstance(task_value, bool):
        return task_value
    if isinstance(task_value, dict):
        return bool(task_value.get("completed"))
    completed = getattr(task_value, "completed", None)
    if completed is not None:
        return bool(completed)
    return False


class EntityAdapter(ABC):
    """Capability interface implemented once per record kind."""

    entity_type: EntityType
    model: Type[BaseModel]               # record model raw mappings are read into

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or EngineConfig()
        self._clock = clock or _utc_now

    def at(self, current_time: datetime) -> "EntityAdapter":
        """Return a copy of this adapter whose clock is fixed at `current_time`."""
        pinned = copy.copy(self)
        pinned._clock = lambda: current_time
        return pinned

    def now(self) -> datetime:
        return self._clock()

    def now_ms(self) -> float:
        return to_epoch_ms(self._clock())

    # --- Record-kind specifics ---

    @abstractmethod
    def entity_id(self, entity: Any) -> str:
        ...

    @abstractmethod
    def phase(self, entity: Any) -> str:
        """Resolved current phase."""

    @abstractmethod
    def creation_timestamp(self, entity: Any) -> Any:
        """Raw creation timestamp, or None."""

    # --- Shared derivations ---

    def name(self, entity: Any) -> str:
        first = getattr(entity, "first_name", None) or ""
        last = getattr(entity, "last_name", None) or ""
        return f"{first} {last}".strip() or "Unnamed"

    def phase_timestamp(self, entity: Any, phase: Optional[str]) -> Optional[float]:
        if not phase:
            return None
        timestamps = getattr(entity, "phase_timestamps", None) or {}
        ts = to_epoch_ms(timestamps.get(phase))
        return ts if ts else None

    def days_in_phase(self, entity: Any) -> int:
        started = self.phase_timestamp(entity, self.phase(entity))
        if started is None:
            return 0
        return floor_days_between(started, self.now_ms())

    def minutes_since_creation(self, entity: Any) -> float:
        created = to_epoch_ms(self.creation_timestamp(entity))
        if not created:
            return 0
        return (self.now_ms() - created) / MS_PER_MINUTE

    def days_since_creation(self, entity: Any) -> int:
        created = to_epoch_ms(self.creation_timestamp(entity))
        if not created:
            return 0
        return math.floor((self.now_ms() - created) / MS_PER_DAY)

    def is_task_done(self, entity: Any, task_id: Optional[str]) -> bool:
        if not task_id:
            return False
        tasks = getattr(entity, "tasks", None) or {}
        return is_task_done(tasks.get(task_id))

    def date_field(self, entity: Any, field: Optional[str]) -> Any:
        if not field:
            return None
        return getattr(entity, field, None) or None

    def last_note_date(self, entity: Any) -> Optional[float]:
        """Latest note time in epoch ms; None when no note carries a time."""
        latest = None
        for note in getattr(entity, "notes", None) or []:
            ts = to_epoch_ms(
                getattr(note, "timestamp", None) or getattr(note, "date", None)
            )
            if ts and (latest is None or ts > latest):
                latest = ts
        return latest

    def is_terminal_phase(self, entity: Any) -> bool:
        return False
