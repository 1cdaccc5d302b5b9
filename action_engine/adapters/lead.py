"""Adapter for sales leads."""

from typing import Any

from action_engine.adapters.base import EntityAdapter
from action_engine.models.entity import Lead
from action_engine.models.rule import EntityType

DEFAULT_LEAD_PHASE = "new_lead"


class LeadAdapter(EntityAdapter):
    entity_type = EntityType.LEAD
    model = Lead

    def entity_id(self, entity: Any) -> str:
        return str(getattr(entity, "id", ""))

    def phase(self, entity: Any) -> str:
        return getattr(entity, "phase", None) or DEFAULT_LEAD_PHASE

    def creation_timestamp(self, entity: Any) -> Any:
        return getattr(entity, "created_at", None)

    def is_terminal_phase(self, entity: Any) -> bool:
        """Won and lost deals never alert again."""
        return self.phase(entity) in self.config.terminal_lead_phases
