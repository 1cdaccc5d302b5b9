"""Adapter for job applicants."""

from typing import Any

from action_engine.adapters.base import EntityAdapter
from action_engine.models.entity import Applicant
from action_engine.models.rule import EntityType

DEFAULT_APPLICANT_PHASE = "intake"


class ApplicantAdapter(EntityAdapter):
    """Applicants never reach a terminal phase; archiving is the only stop."""

    entity_type = EntityType.APPLICANT
    model = Applicant

    def entity_id(self, entity: Any) -> str:
        return str(getattr(entity, "id", ""))

    def phase(self, entity: Any) -> str:
        return (
            getattr(entity, "phase_override", None)
            or getattr(entity, "calculated_phase", None)
            or DEFAULT_APPLICANT_PHASE
        )

    def creation_timestamp(self, entity: Any) -> Any:
        return getattr(entity, "application_date", None)
