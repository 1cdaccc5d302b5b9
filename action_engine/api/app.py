"""
Action Engine API — FastAPI endpoints.

Exposes the engine to the surrounding product for:
- Rule management (list, upsert, enable/disable, delete)
- Explicit rule cache refresh
- On-demand evaluation of supplied applicants and leads

Cadence and delivery of results (dashboards, digests) stay with the caller.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from action_engine.digest.formatter import summarize
from action_engine.engine.pipeline import ActionItemEngine
from action_engine.models.action_item import EvaluateOptions
from action_engine.models.config import EngineConfig
from action_engine.models.entity import Applicant, Lead
from action_engine.models.rule import EntityType, Rule, Urgency
from action_engine.resolution.templates import MERGE_FIELDS
from action_engine.rules.cache import RuleCache
from action_engine.rules.store import RuleStore


# --- Request/Response Models ---

class RuleUpsertRequest(BaseModel):
    name: str = ""
    entity_type: EntityType
    condition_type: str
    condition_config: dict = {}
    urgency: Urgency = Urgency.INFO
    urgency_escalation: Optional[dict] = None
    icon: str = ""
    title_template: str = ""
    detail_template: str = ""
    action_template: str = ""
    enabled: bool = True
    sort_order: int = 0


class EvaluateRequest(BaseModel):
    applicants: List[Applicant] = []
    leads: List[Lead] = []
    urgency: Optional[Urgency] = None
    limit: Optional[int] = Field(default=None, ge=0)
    entity_id: Optional[str] = None
    current_time: Optional[datetime] = None


# --- Application Factory ---

def create_app(
    rule_store: Optional[RuleStore] = None,
    engine: Optional[ActionItemEngine] = None,
    config: Optional[EngineConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Action Engine API",
        description="Configurable action item rules for recruiting and sales pipelines",
        version="0.1.0",
    )

    # Initialize components
    cfg = config or (engine.config if engine else EngineConfig())
    store = rule_store or RuleStore()
    eng = engine or ActionItemEngine(cfg)
    cache = RuleCache(store)

    # Store components on app state for access in endpoints
    app.state.rule_store = store
    app.state.rule_cache = cache
    app.state.engine = eng

    # === RULES ===

    @app.get("/rules")
    def list_rules(entity_type: Optional[EntityType] = None, include_disabled: bool = False):
        """Stored rules, ordered by sort order."""
        rules = store.list_rules(entity_type=entity_type, include_disabled=include_disabled)
        return [r.model_dump(mode="json") for r in rules]

    @app.get("/rules/merge-fields")
    def list_merge_fields():
        """Merge fields available to rule templates."""
        return [{"key": k, "label": v} for k, v in MERGE_FIELDS.items()]

    @app.post("/rules/refresh")
    def refresh_rules():
        """Reload the enabled-rule snapshot used for evaluation."""
        rules = cache.refresh()
        return {"status": "refreshed", "enabled_rules": len(rules)}

    @app.get("/rules/{rule_id}")
    def get_rule(rule_id: str):
        rule = store.get(rule_id)
        if not rule:
            raise HTTPException(404, "Rule not found")
        return rule.model_dump(mode="json")

    @app.put("/rules/{rule_id}")
    def upsert_rule(rule_id: str, req: RuleUpsertRequest):
        """Create or replace a rule. Takes effect after a refresh."""
        try:
            rule = Rule(id=rule_id, **req.model_dump())
            store.upsert(rule)
        except ValueError as exc:
            raise HTTPException(422, str(exc))
        return rule.model_dump(mode="json")

    @app.post("/rules/{rule_id}/enable")
    def enable_rule(rule_id: str):
        rule = store.set_enabled(rule_id, True)
        if not rule:
            raise HTTPException(404, "Rule not found")
        return rule.model_dump(mode="json")

    @app.post("/rules/{rule_id}/disable")
    def disable_rule(rule_id: str):
        rule = store.set_enabled(rule_id, False)
        if not rule:
            raise HTTPException(404, "Rule not found")
        return rule.model_dump(mode="json")

    @app.delete("/rules/{rule_id}")
    def delete_rule(rule_id: str):
        if not store.delete(rule_id):
            raise HTTPException(404, "Rule not found")
        return {"status": "deleted", "rule_id": rule_id}

    # === EVALUATION ===

    @app.post("/action-items/evaluate")
    def evaluate_action_items(req: EvaluateRequest):
        """Evaluate the cached rules against the supplied records."""
        limit = min(req.limit or cfg.default_limit, cfg.max_limit)
        options = EvaluateOptions(urgency=req.urgency, entity_id=req.entity_id)

        items = eng.evaluate_batches(
            {EntityType.APPLICANT: req.applicants, EntityType.LEAD: req.leads},
            cache.rules(),
            options=options,
            current_time=req.current_time,
        )
        digest = summarize(items, limit=limit)
        return {
            "total_items": digest.total_items,
            "showing": digest.showing,
            "by_urgency": digest.by_urgency,
            "items": [i.model_dump(mode="json") for i in items[:limit]],
            "lines": digest.lines,
        }

    return app


# Default application instance
app = create_app()
