"""
Rule Store — persistent home of the externally authored action item rules.

Behavioral Contract:
- One row per rule; condition config and escalation are JSON columns
- Writes are validated: unknown condition kinds and configs that do not
  fit the kind's shape are rejected with ValueError
- Reads are tolerant: a stored row that no longer validates is logged and
  skipped rather than failing the whole listing
- The store never evaluates rules; the engine consumes what it returns
"""

import json
import logging
import sqlite3
from typing import List, Optional

from pydantic import ValidationError

from action_engine.conditions.evaluators import parse_condition_type
from action_engine.models.conditions import CONDITION_CONFIG_MODELS
from action_engine.models.rule import EntityType, Rule
from action_engine.resolution.templates import unknown_fields
from action_engine.rules.defaults import default_rules

logger = logging.getLogger(__name__)


def validate_rule(rule: Rule) -> Rule:
    """Check a rule's condition kind and config before it is stored."""
    kind = parse_condition_type(rule.condition_type)
    if kind is None:
        raise ValueError(f"Unknown condition type '{rule.condition_type}'")
    try:
        CONDITION_CONFIG_MODELS[kind].model_validate(rule.condition_config)
    except ValidationError as exc:
        raise ValueError(
            f"Invalid condition_config for {kind.value}: {exc.errors()}"
        ) from exc

    unknown = unknown_fields(rule)
    if unknown:
        logger.warning(
            "Rule %s references merge fields no condition provides: %s",
            rule.id, ", ".join(unknown),
        )
    return rule


class RuleStore:
    """
    SQLite-backed rule store.
    Prototype: SQLite. Production: the product's shared database.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the rules table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS action_item_rules (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL DEFAULT '',
                entity_type TEXT NOT NULL,
                condition_type TEXT NOT NULL,
                condition_config TEXT NOT NULL DEFAULT '{}',
                urgency TEXT NOT NULL DEFAULT 'info',
                urgency_escalation TEXT,
                icon TEXT NOT NULL DEFAULT '',
                title_template TEXT NOT NULL DEFAULT '',
                detail_template TEXT NOT NULL DEFAULT '',
                action_template TEXT NOT NULL DEFAULT '',
                enabled INTEGER NOT NULL DEFAULT 1,
                sort_order INTEGER NOT NULL DEFAULT 0,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_rules_entity_type
            ON action_item_rules(entity_type, enabled)
        """)
        self._conn.commit()

    def upsert(self, rule: Rule) -> Rule:
        """Insert or replace a rule after validating it."""
        validate_rule(rule)
        escalation = (
            json.dumps(rule.urgency_escalation.model_dump(mode="json"))
            if rule.urgency_escalation else None
        )
        self._conn.execute(
            """
            INSERT OR REPLACE INTO action_item_rules (
                id, name, entity_type, condition_type, condition_config,
                urgency, urgency_escalation, icon, title_template,
                detail_template, action_template, enabled, sort_order,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, datetime('now'))
            """,
            (
                rule.id,
                rule.name,
                rule.entity_type.value,
                rule.condition_type,
                json.dumps(rule.condition_config),
                rule.urgency.value,
                escalation,
                rule.icon,
                rule.title_template,
                rule.detail_template,
                rule.action_template,
                int(rule.enabled),
                rule.sort_order,
            ),
        )
        self._conn.commit()
        return rule

    def _deserialize(self, row: sqlite3.Row) -> Optional[Rule]:
        """Row -> Rule; None (with a warning) when the row is unreadable."""
        try:
            escalation = row["urgency_escalation"]
            return Rule(
                id=row["id"],
                name=row["name"],
                entity_type=row["entity_type"],
                condition_type=row["condition_type"],
                condition_config=json.loads(row["condition_config"] or "{}"),
                urgency=row["urgency"],
                urgency_escalation=json.loads(escalation) if escalation else None,
                icon=row["icon"],
                title_template=row["title_template"],
                detail_template=row["detail_template"],
                action_template=row["action_template"],
                enabled=bool(row["enabled"]),
                sort_order=row["sort_order"],
            )
        except (ValidationError, ValueError) as exc:
            logger.warning("Skipping unreadable rule row %s: %s", row["id"], exc)
            return None

    def get(self, rule_id: str) -> Optional[Rule]:
        """Get a specific rule by ID."""
        row = self._conn.execute(
            "SELECT * FROM action_item_rules WHERE id = ?", (rule_id,)
        ).fetchone()
        return self._deserialize(row) if row else None

    def list_rules(
        self,
        entity_type: Optional[EntityType] = None,
        include_disabled: bool = False,
    ) -> List[Rule]:
        """Rules ordered by sort_order, then id."""
        clauses = []
        params: list = []
        if entity_type is not None:
            clauses.append("entity_type = ?")
            params.append(EntityType(entity_type).value)
        if not include_disabled:
            clauses.append("enabled = 1")

        query = "SELECT * FROM action_item_rules"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY sort_order, id"

        rows = self._conn.execute(query, params).fetchall()
        rules = [self._deserialize(r) for r in rows]
        return [r for r in rules if r is not None]

    def set_enabled(self, rule_id: str, enabled: bool) -> Optional[Rule]:
        """Toggle a rule; returns the updated rule or None if unknown."""
        cursor = self._conn.execute(
            "UPDATE action_item_rules SET enabled = ?, updated_at = datetime('now') "
            "WHERE id = ?",
            (int(enabled), rule_id),
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            return None
        return self.get(rule_id)

    def delete(self, rule_id: str) -> bool:
        """Remove a rule. Returns False if it did not exist."""
        cursor = self._conn.execute(
            "DELETE FROM action_item_rules WHERE id = ?", (rule_id,)
        )
        self._conn.commit()
        return cursor.rowcount > 0

    def count(self) -> int:
        """Total number of stored rules, enabled or not."""
        row = self._conn.execute(
            "SELECT COUNT(*) as cnt FROM action_item_rules"
        ).fetchone()
        return row["cnt"]

    def seed_defaults(self) -> int:
        """Load the built-in rule set into an empty store. Returns rules added."""
        if self.count() > 0:
            return 0
        rules = default_rules()
        for rule in rules:
            self.upsert(rule)
        return len(rules)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
