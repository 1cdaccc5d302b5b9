"""Rule Cache — an explicitly owned snapshot of the enabled rules."""

import logging
import sqlite3
from typing import List, Optional

from action_engine.models.rule import EntityType, Rule
from action_engine.rules.store import RuleStore

logger = logging.getLogger(__name__)


class RuleCache:
    """
    Holds the enabled rules loaded from a RuleStore.

    Nothing is reloaded implicitly: writes to the store become visible only
    after `refresh()`. Owners inject the cache where rules are needed instead
    of sharing module-level state.
    """

    def __init__(self, store: RuleStore):
        self._store = store
        self._rules: Optional[List[Rule]] = None

    @property
    def loaded(self) -> bool:
        return self._rules is not None

    def refresh(self) -> List[Rule]:
        """
        Reload enabled rules from the store. If the store cannot be read,
        the previous snapshot is kept.
        """
        try:
            self._rules = self._store.list_rules()
        except sqlite3.Error:
            logger.warning(
                "Failed to load action item rules; keeping previous snapshot",
                exc_info=True,
            )
        return list(self._rules or [])

    def rules(self, entity_type: Optional[EntityType] = None) -> List[Rule]:
        """Cached enabled rules (loading on first use), optionally for one kind."""
        if self._rules is None:
            self.refresh()
        rules = self._rules or []
        if entity_type is None:
            return list(rules)
        return [r for r in rules if r.entity_type == EntityType(entity_type)]

    def clear(self) -> None:
        self._rules = None
