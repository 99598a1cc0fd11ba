"""Tests for rule table loading and validation."""

import pytest

from monitor_coverage_scoring.config import (
    _build_rule_table,
    _parse_tiers,
    load_default_rule_table,
    load_rule_table,
)
from monitor_coverage_scoring.rules import RuleTable, Tier

FIXTURES_DIR = "tests/fixtures"


class TestLoadRuleTable:
    def test_load_custom_rule_table(self):
        table = load_rule_table(f"{FIXTURES_DIR}/test_rules.yaml")
        assert table.version == "test-1"
        assert table.standardization.base_points == 10
        assert table.standardization.tiers == (Tier(1.0, 0.0), Tier(0.5, 4.0))
        assert table.documentation.bonus_per_item == 2
        assert table.documentation.cap == 4
        assert table.ops_leads.configured_score == 3

    def test_custom_table_keeps_defaults_for_missing_rules(self):
        table = load_rule_table(f"{FIXTURES_DIR}/test_rules.yaml")
        defaults = RuleTable()
        assert table.response == defaults.response
        assert table.integrity_package == defaults.integrity_package
        assert table.ops_leads.missing_score == 0

    def test_load_default_rule_table(self):
        table = load_default_rule_table()
        assert table.version == "v1"
        assert table.integrity_package.base_points == 45
        assert table.response.deduct_per_item == 2.5
        assert table.discovery_rate.levels["medium"] == 0.90
        assert table.accuracy.levels["medium"] == 0.92

    def test_default_document_matches_builtin_defaults(self):
        table = load_default_rule_table()
        defaults = RuleTable()
        for rule_id in ("integrity_package", "infrastructure_coverage", "standardization",
                        "documentation", "ops_leads", "data_alert_recipients",
                        "response", "rectification"):
            assert table.rule(rule_id) == defaults.rule(rule_id), rule_id
        assert table.accuracy.tiers == defaults.accuracy.tiers
        assert table.discovery_rate.tiers == defaults.discovery_rate.tiers

    def test_partial_levels_merge_over_defaults(self):
        table = _build_rule_table({
            "version": "t",
            "rules": {
                "accuracy": {"levels": {"perfect": 0.999}},
                "discovery_rate": {"levels": {"low": 0.5}},
            },
        })
        assert table.accuracy.levels == {"perfect": 0.999, "high": 0.96, "medium": 0.92, "low": 0.89}
        assert table.accuracy.level_rate("high") == 0.96
        assert table.discovery_rate.levels["medium"] == 0.90
        assert table.discovery_rate.levels["low"] == 0.5

    def test_empty_rules_block(self):
        table = _build_rule_table({"version": "bare"})
        assert table == RuleTable(version="bare")


class TestParseTiers:
    def test_sorted_highest_first(self):
        tiers = _parse_tiers("standardization", [
            {"deduct": 10},
            {"min": 0.5, "deduct": 5},
            {"min": 1.0, "deduct": 0},
        ])
        assert [t.threshold for t in tiers] == [1.0, 0.5, None]

    def test_point_tiers(self):
        tiers = _parse_tiers("accuracy", [{"min": 0.9, "points": 10}, {"points": 0}])
        assert tiers[0].value == 10

    def test_level_label(self):
        tiers = _parse_tiers("integrity_package", [{"min": 1.0, "deduct": 0, "level": "full"}])
        assert tiers[0].level == "full"

    def test_missing_value_raises(self):
        with pytest.raises(ValueError, match="tier missing 'deduct'"):
            _parse_tiers("standardization", [{"min": 0.5}])

    def test_points_rule_requires_points(self):
        with pytest.raises(ValueError, match="tier missing 'points'"):
            _parse_tiers("accuracy", [{"min": 0.5, "deduct": 3}])

    def test_duplicate_threshold_raises(self):
        with pytest.raises(ValueError, match="duplicate tier threshold"):
            _parse_tiers("standardization", [{"min": 0.5, "deduct": 5}, {"min": 0.5, "deduct": 6}])

    def test_two_catch_all_tiers_raise(self):
        with pytest.raises(ValueError, match="only one tier may omit 'min'"):
            _parse_tiers("standardization", [{"deduct": 5}, {"deduct": 6}])

    def test_tiers_not_a_list(self):
        with pytest.raises(ValueError, match="'tiers' must be a list"):
            _parse_tiers("standardization", {"min": 0.5})


class TestValidation:
    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            _build_rule_table(["version", "v1"])

    def test_missing_version(self):
        with pytest.raises(ValueError, match="missing 'version'"):
            _build_rule_table({"rules": {}})

    def test_unknown_rule_id(self):
        with pytest.raises(ValueError, match="Unknown rule id"):
            _build_rule_table({"version": "v", "rules": {"bogus": {}}})

    def test_unknown_rule_key(self):
        with pytest.raises(ValueError, match="unknown key"):
            _build_rule_table({"version": "v", "rules": {"documentation": {"bonus": 3}}})

    def test_negative_number(self):
        with pytest.raises(ValueError, match="non-negative"):
            _build_rule_table({"version": "v", "rules": {"response": {"deduct_per_item": -1}}})

    def test_non_numeric(self):
        with pytest.raises(ValueError, match="must be a number"):
            _build_rule_table({"version": "v", "rules": {"response": {"cap_deduct": "five"}}})

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ValueError, match="must be a number"):
            _build_rule_table({"version": "v", "rules": {"ops_leads": {"configured_score": True}}})

    def test_level_rate_above_one(self):
        with pytest.raises(ValueError, match="must be <= 1"):
            _build_rule_table({"version": "v", "rules": {"accuracy": {"levels": {"high": 96}}}})
