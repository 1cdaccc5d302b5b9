"""Template Resolver — fills `{{field}}` merge tokens from an evaluation context."""

import re
from typing import Dict, List, Mapping, Optional

from action_engine.models.rule import Rule

_TOKEN = re.compile(r"\{\{(\w+)\}\}")

# Merge fields the evaluators (and the pipeline, for `name`) can supply.
MERGE_FIELDS: Dict[str, str] = {
    "name": "Name",
    "days_in_phase": "Days in Phase",
    "days_since_created": "Days Since Created",
    "days_until_expiry": "Days Until Expiry",
    "expiry_date": "Expiry Date",
    "phase_name": "Phase Name",
    "sprint_day": "Sprint Day",
    "sprint_remaining": "Sprint Remaining",
    "task_name": "Task Name",
    "minutes_since_created": "Minutes Since Created",
    "days_since_last_note": "Days Since Last Note",
}


def _stringify(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def resolve_template(template: Optional[str], context: Mapping[str, object]) -> str:
    """
    Replace every `{{key}}` with `context[key]`; unknown keys stay verbatim.

    Substitution is single-pass: values that themselves contain tokens are
    not expanded again.
    """
    if not template:
        return ""

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in context:
            return _stringify(context[key])
        return match.group(0)

    return _TOKEN.sub(_replace, template)


def referenced_fields(template: Optional[str]) -> List[str]:
    """Merge fields a template uses, in order of first appearance."""
    if not template:
        return []
    seen: List[str] = []
    for key in _TOKEN.findall(template):
        if key not in seen:
            seen.append(key)
    return seen


def unknown_fields(rule: Rule) -> List[str]:
    """Tokens in a rule's templates that no evaluator ever supplies."""
    unknown: List[str] = []
    for template in (rule.title_template, rule.detail_template, rule.action_template):
        for key in referenced_fields(template):
            if key not in MERGE_FIELDS and key not in unknown:
                unknown.append(key)
    return unknown
