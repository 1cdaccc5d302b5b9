"""Tests for the rule store, rule cache and built-in rules."""

import sqlite3

import pytest

from action_engine.conditions.evaluators import parse_condition_type
from action_engine.models.conditions import CONDITION_CONFIG_MODELS
from action_engine.models.rule import EntityType, Rule, Urgency, UrgencyEscalation
from action_engine.resolution.templates import unknown_fields
from action_engine.rules.cache import RuleCache
from action_engine.rules.defaults import default_rules
from action_engine.rules.store import RuleStore, validate_rule


def _make_rule(rule_id="r1", entity_type=EntityType.APPLICANT, sort_order=0, **kwargs) -> Rule:
    fields = dict(
        id=rule_id,
        name="Verification stall",
        entity_type=entity_type,
        condition_type="phase_time",
        condition_config={"phase": "verification", "min_days": 3},
        urgency=Urgency.WARNING,
        urgency_escalation=UrgencyEscalation(min_days=5, urgency=Urgency.CRITICAL),
        title_template="Day {{days_in_phase}}",
        sort_order=sort_order,
    )
    fields.update(kwargs)
    return Rule(**fields)


class TestRuleStore:
    def setup_method(self):
        self.store = RuleStore(db_path=":memory:")

    def teardown_method(self):
        self.store.close()

    def test_round_trip(self):
        rule = _make_rule()
        self.store.upsert(rule)
        assert self.store.get("r1") == rule

    def test_get_missing(self):
        assert self.store.get("nope") is None

    def test_upsert_replaces(self):
        self.store.upsert(_make_rule())
        self.store.upsert(_make_rule(title_template="Changed"))
        assert self.store.count() == 1
        assert self.store.get("r1").title_template == "Changed"

    def test_list_orders_by_sort_order(self):
        self.store.upsert(_make_rule("b", sort_order=20))
        self.store.upsert(_make_rule("a", sort_order=30))
        self.store.upsert(_make_rule("c", sort_order=10))
        assert [r.id for r in self.store.list_rules()] == ["c", "b", "a"]

    def test_list_filters(self):
        self.store.upsert(_make_rule("app"))
        self.store.upsert(_make_rule("lead", entity_type=EntityType.LEAD))
        self.store.upsert(_make_rule("off", enabled=False))

        assert [r.id for r in self.store.list_rules(entity_type=EntityType.LEAD)] == ["lead"]
        assert {r.id for r in self.store.list_rules()} == {"app", "lead"}
        assert {r.id for r in self.store.list_rules(include_disabled=True)} == {"app", "lead", "off"}

    def test_set_enabled(self):
        self.store.upsert(_make_rule())
        assert self.store.set_enabled("r1", False).enabled is False
        assert self.store.list_rules() == []
        assert self.store.set_enabled("missing", True) is None

    def test_delete(self):
        self.store.upsert(_make_rule())
        assert self.store.delete("r1") is True
        assert self.store.delete("r1") is False

    def test_rejects_unknown_condition_type(self):
        with pytest.raises(ValueError):
            self.store.upsert(_make_rule(condition_type="moon_phase"))

    def test_rejects_malformed_config(self):
        with pytest.raises(ValueError):
            self.store.upsert(_make_rule(condition_config={"min_days": "three"}))

    def test_accepts_fractional_thresholds(self):
        self.store.upsert(_make_rule(condition_config={"phase": "verification", "min_days": 2.5}))
        assert self.store.get("r1").condition_config["min_days"] == 2.5

    def test_unreadable_rows_skipped(self):
        self.store.upsert(_make_rule("good"))
        self.store._conn.execute(
            "INSERT INTO action_item_rules (id, entity_type, condition_type, condition_config, urgency) "
            "VALUES ('bad', 'applicant', 'phase_time', '{not json', 'warning')"
        )
        self.store._conn.commit()
        assert [r.id for r in self.store.list_rules()] == ["good"]

    def test_seed_defaults_only_when_empty(self):
        added = self.store.seed_defaults()
        assert added == len(default_rules())
        assert self.store.seed_defaults() == 0


class TestValidateRule:
    def test_warns_on_unknown_merge_fields(self, caplog):
        validate_rule(_make_rule(detail_template="{{balance_due}}"))
        assert "balance_due" in caplog.text


class TestRuleCache:
    def setup_method(self):
        self.store = RuleStore(db_path=":memory:")
        self.cache = RuleCache(self.store)

    def test_lazy_first_load(self):
        self.store.upsert(_make_rule())
        assert self.cache.loaded is False
        assert [r.id for r in self.cache.rules()] == ["r1"]
        assert self.cache.loaded is True

    def test_writes_invisible_until_refresh(self):
        self.store.upsert(_make_rule("r1"))
        self.cache.refresh()
        self.store.upsert(_make_rule("r2"))
        assert [r.id for r in self.cache.rules()] == ["r1"]
        self.cache.refresh()
        assert [r.id for r in self.cache.rules()] == ["r1", "r2"]

    def test_filter_by_entity_type(self):
        self.store.upsert(_make_rule("app"))
        self.store.upsert(_make_rule("lead", entity_type=EntityType.LEAD))
        assert [r.id for r in self.cache.rules(EntityType.LEAD)] == ["lead"]

    def test_clear(self):
        self.store.upsert(_make_rule())
        self.cache.refresh()
        self.cache.clear()
        assert self.cache.loaded is False

    def test_failed_refresh_keeps_snapshot(self):
        self.store.upsert(_make_rule())
        self.cache.refresh()
        self.store.close()
        assert [r.id for r in self.cache.refresh()] == ["r1"]

    def test_failed_first_load_is_empty(self):
        self.store.close()
        assert self.cache.rules() == []


class TestDefaultRules:
    def test_all_defaults_are_valid(self):
        for rule in default_rules():
            kind = parse_condition_type(rule.condition_type)
            assert kind is not None, rule.id
            CONDITION_CONFIG_MODELS[kind].model_validate(rule.condition_config)
            assert unknown_fields(rule) == [], rule.id

    def test_unique_ids_and_increasing_order(self):
        rules = default_rules()
        assert len({r.id for r in rules}) == len(rules)
        orders = [r.sort_order for r in rules]
        assert orders == sorted(orders)

    def test_cover_both_kinds(self):
        kinds = {r.entity_type for r in default_rules()}
        assert kinds == {EntityType.APPLICANT, EntityType.LEAD}

    def test_fresh_copies(self):
        first = default_rules()
        first[0].title_template = "mutated"
        assert default_rules()[0].title_template != "mutated"
