"""
Evaluation Pipeline — turns entities + rules into a ranked list of action items.

Behavioral Contract:
- Accepts already-loaded entities and rules; performs no I/O
- Raw record mappings are read into the adapter's model; invalid ones are
  logged and skipped, like invalid rule records
- Archived entities and terminal-phase entities never yield items
- Unknown condition kinds are skipped; a faulting rule is logged with its id
  and treated as a non-match, so one bad rule never aborts the batch
- Output is stable-sorted by urgency severity, then by name
- Identical inputs at the same instant yield identical output
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from action_engine.adapters.base import EntityAdapter
from action_engine.adapters.registry import get_adapter
from action_engine.conditions.evaluators import get_evaluator
from action_engine.models.action_item import ActionItem, EvaluateOptions
from action_engine.models.config import EngineConfig
from action_engine.models.rule import URGENCY_ORDER, EntityType, Rule
from action_engine.resolution.templates import resolve_template
from action_engine.resolution.urgency import resolve_urgency

logger = logging.getLogger(__name__)

Options = Union[EvaluateOptions, Mapping[str, Any], None]


def _coerce_options(options: Options) -> EvaluateOptions:
    if options is None:
        return EvaluateOptions()
    if isinstance(options, EvaluateOptions):
        return options
    try:
        return EvaluateOptions.model_validate(dict(options))
    except (ValidationError, TypeError, ValueError):
        logger.warning("Ignoring invalid evaluation options: %r", options)
        return EvaluateOptions()


def _sort_key(item: ActionItem):
    return (URGENCY_ORDER[item.urgency], item.name)


def _coerce_rules(rules: Iterable[Any]) -> List[Rule]:
    """Accept Rule models or raw rule records; invalid records are skipped."""
    coerced: List[Rule] = []
    for raw in rules or []:
        if isinstance(raw, Rule):
            coerced.append(raw)
            continue
        try:
            coerced.append(Rule.model_validate(raw))
        except ValidationError:
            rule_id = raw.get("id") if isinstance(raw, Mapping) else None
            logger.warning("Skipping invalid rule record %s", rule_id, exc_info=True)
    return coerced


def _coerce_entities(entities: Iterable[Any], adapter: EntityAdapter) -> List[Any]:
    """Read raw record mappings into the adapter's model; invalid records are skipped."""
    coerced: List[Any] = []
    for raw in entities or []:
        if not isinstance(raw, Mapping):
            coerced.append(raw)
            continue
        try:
            coerced.append(adapter.model.model_validate(raw))
        except ValidationError:
            logger.warning(
                "Skipping invalid %s record %s",
                adapter.entity_type.value, raw.get("id"), exc_info=True,
            )
    return coerced


def _rules_for(rules: Iterable[Any], entity_type: EntityType) -> List[Rule]:
    return [r for r in _coerce_rules(rules) if r.enabled and r.entity_type == entity_type]


class ActionItemEngine:
    """
    The action item engine — evaluates rules against pipeline records.

    Stateless between calls: every invocation is a snapshot evaluation.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def evaluate(
        self,
        entities: Iterable[Any],
        rules: Iterable[Rule],
        adapter: EntityAdapter,
        options: Options = None,
        current_time: Optional[datetime] = None,
    ) -> List[ActionItem]:
        """
        Evaluate all enabled rules for the adapter's record kind against
        every entity. Returns items sorted by urgency then name.
        """
        opts = _coerce_options(options)
        pinned = adapter.at(current_time or datetime.now(timezone.utc))

        # 1. Only rules for this record kind are considered.
        relevant = _rules_for(rules, pinned.entity_type)

        items: List[ActionItem] = []
        if relevant:
            for entity in _coerce_entities(entities, pinned):
                if opts.entity_id is not None and pinned.entity_id(entity) != opts.entity_id:
                    continue
                items.extend(self._evaluate_entity(entity, relevant, pinned))

        return self._finalize(items, opts)

    def evaluate_entity(
        self,
        entity: Any,
        rules: Iterable[Rule],
        adapter: EntityAdapter,
        current_time: Optional[datetime] = None,
    ) -> List[ActionItem]:
        """Items for a single entity, in rule order (unsorted, unfiltered)."""
        pinned = adapter.at(current_time or datetime.now(timezone.utc))
        records = _coerce_entities([entity], pinned)
        if not records:
            return []
        return self._evaluate_entity(records[0], _rules_for(rules, pinned.entity_type), pinned)

    def evaluate_batches(
        self,
        batches: Mapping[EntityType, Iterable[Any]],
        rules: Iterable[Rule],
        options: Options = None,
        current_time: Optional[datetime] = None,
    ) -> List[ActionItem]:
        """
        Evaluate several record kinds in one pass with their registered
        adapters; items are merged before sorting, filtering and truncation.
        """
        opts = _coerce_options(options)
        now = current_time or datetime.now(timezone.utc)
        rule_list = _coerce_rules(rules)

        items: List[ActionItem] = []
        unlimited = opts.model_copy(update={"limit": None})
        for entity_type, entities in batches.items():
            try:
                adapter = get_adapter(entity_type, self.config)
            except (KeyError, ValueError):
                logger.warning("No adapter registered for entity type %r", entity_type)
                continue
            items.extend(self.evaluate(entities, rule_list, adapter, unlimited, now))

        return self._finalize(items, opts)

    # --- internals ---

    def _evaluate_entity(
        self,
        entity: Any,
        rules: List[Rule],
        adapter: EntityAdapter,
    ) -> List[ActionItem]:
        # 2-3. Archived and terminal records are silent.
        if getattr(entity, "archived", False):
            return []
        if adapter.is_terminal_phase(entity):
            return []

        items = []
        for rule in rules:
            item = self._evaluate_rule(entity, rule, adapter)
            if item is not None:
                items.append(item)
        return items

    def _evaluate_rule(
        self,
        entity: Any,
        rule: Rule,
        adapter: EntityAdapter,
    ) -> Optional[ActionItem]:
        # 4. Dispatch by condition kind.
        evaluator = get_evaluator(rule.condition_type)
        if evaluator is None:
            logger.debug(
                "Skipping rule %s: unknown condition type %r",
                rule.id, rule.condition_type,
            )
            return None

        # 5. A faulting rule is a non-match.
        try:
            result = evaluator(entity, rule.condition_config or {}, adapter)
            if not result.matches:
                return None

            # 6. Urgency, context, templates.
            urgency = resolve_urgency(rule, entity, adapter)
            name = adapter.name(entity)
            context = {**result.context, "name": name}

            return ActionItem(
                entity_id=adapter.entity_id(entity),
                entity_type=adapter.entity_type,
                name=name,
                urgency=urgency,
                icon=rule.icon or self.config.default_icon,
                title=resolve_template(rule.title_template, context),
                detail=resolve_template(rule.detail_template, context),
                action=resolve_template(rule.action_template, context),
                rule_id=rule.id,
                phase=adapter.phase(entity),
            )
        except Exception:
            if self.config.log_rule_errors:
                logger.warning(
                    "Action item rule error [%s] for entity %s",
                    rule.id, adapter.entity_id(entity), exc_info=True,
                )
            return None

    def _finalize(self, items: List[ActionItem], opts: EvaluateOptions) -> List[ActionItem]:
        # 6 (filter). Caller-supplied urgency filter.
        if opts.urgency is not None:
            items = [i for i in items if i.urgency == opts.urgency]

        # 7. Stable sort: severity, then name.
        items = sorted(items, key=_sort_key)

        # 8. Optional truncation.
        if opts.limit is not None:
            items = items[:opts.limit]
        return items


_default_engine = ActionItemEngine()


def evaluate(
    entities: Iterable[Any],
    rules: Iterable[Rule],
    adapter: EntityAdapter,
    options: Options = None,
    current_time: Optional[datetime] = None,
) -> List[ActionItem]:
    """Evaluate rules against entities with the default engine configuration."""
    return _default_engine.evaluate(entities, rules, adapter, options, current_time)
