"""Digest — a compact, human-readable summary of a list of action items."""

from typing import Dict, List, Optional

from pydantic import BaseModel

from action_engine.models.action_item import ActionItem
from action_engine.models.rule import Urgency

URGENCY_MARKERS: Dict[Urgency, str] = {
    Urgency.CRITICAL: "🔴",
    Urgency.WARNING: "🟡",
    Urgency.INFO: "🔵",
}

EMPTY_DIGEST_LINE = "No action items found, everything looks good!"


class ActionItemDigest(BaseModel):
    total_items: int
    showing: int
    by_urgency: Dict[str, int]
    lines: List[str]


def format_item(item: ActionItem) -> str:
    marker = URGENCY_MARKERS.get(item.urgency, "📋")
    return (
        f"{marker} {item.icon} **{item.name}** [{item.entity_type.value}]: {item.title}\n"
        f"   {item.detail}\n"
        f"   → {item.action}"
    )


def summarize(items: List[ActionItem], limit: Optional[int] = None) -> ActionItemDigest:
    """
    Counts cover every item; formatted lines cover at most `limit` of them,
    in the order given (the pipeline's ranking).
    """
    shown = items if limit is None else items[:limit]
    by_urgency = {u.value: 0 for u in Urgency}
    for item in items:
        by_urgency[item.urgency.value] += 1

    lines = [format_item(i) for i in shown]
    return ActionItemDigest(
        total_items=len(items),
        showing=len(shown),
        by_urgency=by_urgency,
        lines=lines or [EMPTY_DIGEST_LINE],
    )
