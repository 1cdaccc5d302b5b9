"""Adapter lookup by record kind."""

from typing import Dict, Optional, Type

from action_engine.adapters.applicant import ApplicantAdapter
from action_engine.adapters.base import EntityAdapter
from action_engine.adapters.lead import LeadAdapter
from action_engine.models.config import EngineConfig
from action_engine.models.rule import EntityType

ADAPTERS: Dict[EntityType, Type[EntityAdapter]] = {
    EntityType.APPLICANT: ApplicantAdapter,
    EntityType.LEAD: LeadAdapter,
}


def get_adapter(
    entity_type: EntityType,
    config: Optional[EngineConfig] = None,
) -> EntityAdapter:
    """Instantiate the adapter registered for a record kind."""
    return ADAPTERS[EntityType(entity_type)](config=config)
