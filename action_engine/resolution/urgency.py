"""Urgency Resolver — applies a rule's optional escalation clause."""

from typing import Any

from action_engine.adapters.base import EntityAdapter
from action_engine.models.rule import Rule, Urgency


def resolve_urgency(rule: Rule, entity: Any, adapter: EntityAdapter) -> Urgency:
    """
    Start from the rule's base urgency; once the entity has waited at least
    the escalation's min_days (the longer of time in phase and time since
    creation), use the escalation's urgency instead.

    The escalation is a plain override: it is not checked to be more severe.
    """
    urgency = rule.urgency
    escalation = rule.urgency_escalation
    if escalation is None:
        return urgency

    relevant_days = max(
        adapter.days_in_phase(entity),
        adapter.days_since_creation(entity),
    )
    if escalation.min_days and escalation.urgency and relevant_days >= escalation.min_days:
        urgency = escalation.urgency
    return urgency
