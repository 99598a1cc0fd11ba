"""Tests for typed rules and tier lookups."""

import pytest

from monitor_coverage_scoring.rules import (
    CountDeductionRule,
    DataAlertRule,
    DetectionRule,
    DocumentationRule,
    InfraCoverageRule,
    IntegrityPackageRule,
    RuleTable,
    StandardizationRule,
    Tier,
    match_tier,
    sort_tiers,
)


class TestMatchTier:
    TIERS = (Tier(1.0, 0.0), Tier(0.7, 3.0), Tier(None, 10.0))

    def test_first_match_wins(self):
        assert match_tier(self.TIERS, 1.0).value == 0.0
        assert match_tier(self.TIERS, 0.7).value == 3.0
        assert match_tier(self.TIERS, 0.69).value == 10.0

    def test_no_match_returns_none(self):
        assert match_tier((Tier(0.5, 1.0),), 0.2) is None

    def test_empty(self):
        assert match_tier((), 1.0) is None

    def test_sort_tiers(self):
        tiers = sort_tiers([Tier(None, 10.0), Tier(0.3, 7.0), Tier(0.9, 1.0)])
        assert [t.threshold for t in tiers] == [0.9, 0.3, None]


class TestIntegrityPackageRule:
    @pytest.mark.parametrize("pct,deduct,level", [
        (1.0, 0, "full"),
        (0.8, 3, "basic"),
        (0.6, 7, "partial"),
        (0.4, 10, "low"),
        (0.0, 10, "low"),
    ])
    def test_default_tiers(self, pct, deduct, level):
        assert IntegrityPackageRule().deduction(pct) == (deduct, level)

    def test_fallback_when_no_tier_matches(self):
        rule = IntegrityPackageRule(tiers=(Tier(1.0, 0.0, "full"),))
        assert rule.deduction(0.8) == (10.0, "low")


class TestInfraCoverageRule:
    @pytest.mark.parametrize("covered,total,deduct", [
        (95, 100, 0),
        (94, 100, 3),
        (70, 100, 3),
        (50, 100, 7),
        (49, 100, 10),
        (0, 0, 10),
    ])
    def test_default_tiers(self, covered, total, deduct):
        assert InfraCoverageRule().deduction(covered, total) == deduct

    def test_zero_total_uses_fallback_without_catch_all(self):
        rule = InfraCoverageRule(tiers=(Tier(0.95, 0.0), Tier(0.5, 4.0)))
        assert rule.deduction(0, 0) == 10.0
        assert rule.deduction(1, 10) == 10.0


class TestStandardizationRule:
    @pytest.mark.parametrize("fraction,score", [
        (1.0, 10),
        (0.75, 7),
        (0.5, 5),
        (0.3, 3),
        (0.29, 0),
        (0.0, 0),
    ])
    def test_default_pair_scores(self, fraction, score):
        assert StandardizationRule().pair_score(fraction) == score

    def test_no_matching_tier_deducts_ten(self):
        rule = StandardizationRule(tiers=(Tier(1.0, 0.0),))
        assert rule.pair_score(0.9) == 0.0

    def test_pair_score_floored_at_zero(self):
        rule = StandardizationRule(base_points=5.0)
        assert rule.pair_score(0.0) == 0.0


class TestSimpleRules:
    def test_documentation_bonus_capped(self):
        rule = DocumentationRule()
        assert rule.bonus(0) == 0
        assert rule.bonus(3) == 3
        assert rule.bonus(9) == 5

    def test_detection_points(self):
        rule = DetectionRule()
        assert rule.points(0.95) == 10
        assert rule.points(0.9499) == 7
        assert rule.points(0.70) == 3
        assert rule.points(0.0) == 0

    def test_detection_unknown_level(self):
        assert DetectionRule().level_rate("excellent") == 0.0

    def test_data_alert_states(self):
        rule = DataAlertRule()
        assert rule.score("full", 0) == 5
        assert rule.score("missing", 2) == 3
        assert rule.score("full", 9) == 0
        assert rule.score("na", 9) == 0

    def test_count_deduction(self):
        response = CountDeductionRule(deduct_per_item=2.5)
        assert response.score(0) == 5
        assert response.score(1) == 2.5
        assert response.score(3) == 0


class TestRuleTable:
    def test_defaults(self):
        table = RuleTable()
        assert table.response.deduct_per_item == 2.5
        assert table.rectification.deduct_per_item == 1
        assert table.discovery_rate.levels["low"] == 0.80
        assert table.accuracy.levels["low"] == 0.89

    def test_rule_lookup(self):
        table = RuleTable()
        assert table.rule("documentation") is table.documentation

    def test_rule_lookup_unknown(self):
        with pytest.raises(KeyError):
            RuleTable().rule("version")
