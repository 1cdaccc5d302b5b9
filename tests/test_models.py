"""Tests for core data models."""

import pytest

from action_engine.models import (
    CONDITION_CONFIG_MODELS,
    URGENCY_ORDER,
    ActionItem,
    Applicant,
    ConditionType,
    EngineConfig,
    EntityType,
    EvaluateOptions,
    EvaluationResult,
    Lead,
    PhaseTimeConfig,
    Rule,
    Urgency,
)


class TestRule:
    def test_defaults(self):
        rule = Rule(id="r1", entity_type="applicant", condition_type="phase_time")
        assert rule.urgency == Urgency.INFO
        assert rule.enabled is True
        assert rule.icon == ""
        assert rule.urgency_escalation is None
        assert rule.condition_config == {}

    def test_unknown_condition_type_is_representable(self):
        rule = Rule(id="r1", entity_type="lead", condition_type="moon_phase")
        assert rule.condition_type == "moon_phase"

    def test_invalid_urgency_rejected(self):
        with pytest.raises(Exception):
            Rule(id="r1", entity_type="lead", condition_type="phase_time", urgency="panic")

    def test_escalation_parsed_from_dict(self):
        rule = Rule(
            id="r1",
            entity_type="applicant",
            condition_type="phase_time",
            urgency_escalation={"min_days": 2, "urgency": "critical"},
        )
        assert rule.urgency_escalation.min_days == 2
        assert rule.urgency_escalation.urgency == Urgency.CRITICAL


class TestEnums:
    def test_urgency_order(self):
        assert URGENCY_ORDER[Urgency.CRITICAL] < URGENCY_ORDER[Urgency.WARNING]
        assert URGENCY_ORDER[Urgency.WARNING] < URGENCY_ORDER[Urgency.INFO]

    def test_every_condition_has_a_config_model(self):
        assert set(CONDITION_CONFIG_MODELS) == set(ConditionType)


class TestConditionConfig:
    def test_phase_time_config_defaults(self):
        cfg = PhaseTimeConfig.model_validate({"phase": "verification"})
        assert cfg.min_days is None
        assert cfg.exclude_phases == []

    def test_malformed_config_rejected(self):
        with pytest.raises(Exception):
            PhaseTimeConfig.model_validate({"min_days": "three"})


class TestEntities:
    def test_applicant_keeps_extra_date_fields(self):
        applicant = Applicant(id="a1", hca_expiration="2026-05-01")
        assert applicant.hca_expiration == "2026-05-01"

    def test_lead_defaults(self):
        lead = Lead(id="l1")
        assert lead.phase is None
        assert lead.archived is False
        assert lead.notes == []

    def test_task_values_accept_both_shapes(self):
        lead = Lead(id="l1", tasks={"a": True, "b": {"completed": True, "completed_by": "sam"}})
        assert lead.tasks["a"] is True
        assert lead.tasks["b"]["completed"] is True


class TestResults:
    def test_no_match(self):
        result = EvaluationResult.no_match()
        assert result.matches is False
        assert result.context == {}

    def test_action_item_serializes_enums(self):
        item = ActionItem(
            entity_id="a1",
            entity_type=EntityType.APPLICANT,
            name="Jane Doe",
            urgency=Urgency.WARNING,
            icon="📋",
            title="t",
            detail="d",
            action="a",
            rule_id="r1",
        )
        data = item.model_dump(mode="json")
        assert data["urgency"] == "warning"
        assert data["entity_type"] == "applicant"

    def test_options_limit_non_negative(self):
        with pytest.raises(Exception):
            EvaluateOptions(limit=-1)

    def test_engine_config_defaults(self):
        config = EngineConfig()
        assert config.terminal_lead_phases == ["won", "lost"]
        assert config.default_limit == 25
        assert config.max_limit == 50
