"""Core scoring orchestration."""

import math
from pathlib import Path
from typing import Iterable, Self

from .catalog import ToolCatalog
from .config import load_default_rule_table, load_rule_table
from .coverage import aggregate_coverage
from .models import MANDATORY_CAPS, CoverageFacts, ScoreResult, SystemConfiguration
from .rules import DetectionRule, RuleTable

PART1_MAX = 60.0
PART2_MAX = 20.0
PART3_MAX = 10.0
PART4_MAX = 10.0


def round1(value: float) -> float:
    """Round to one decimal place, halves rounding up."""
    return math.floor(value * 10 + 0.5) / 10


def derive_accuracy_rate(system: SystemConfiguration, rule: DetectionRule) -> float:
    """Alert accuracy: explicit rate, else alert counts, else the qualitative level.

    No measured alerts means no accuracy credit.
    """
    if system.accuracy_rate is not None:
        return system.accuracy_rate
    if system.alert_total is not None:
        total = system.alert_total
        if total <= 0:
            return 0.0
        false_alerts = max(0, system.false_alert_total)
        return max(0.0, min(1.0, (total - false_alerts) / total))
    return rule.level_rate(system.accuracy_level)


def derive_discovery_rate(system: SystemConfiguration, rule: DetectionRule) -> float:
    """Fault discovery: explicit rate, else fault counts, else the qualitative level.

    Zero faults means nothing was missed.
    """
    if system.discovery_rate is not None:
        return system.discovery_rate
    if system.fault_total is not None:
        if system.fault_total > 0:
            detected = max(0, system.fault_detected_total)
            return max(0.0, min(1.0, detected / system.fault_total))
        if system.fault_total == 0:
            return 1.0
    return rule.level_rate(system.discovery_level)


def compute_score(
    system: SystemConfiguration,
    catalog: ToolCatalog,
    rule_table: RuleTable,
) -> ScoreResult:
    """Score one system against a tool catalog and a rule table.

    Pure and total: the same inputs always give the same result, and no
    input combination raises.
    """
    facts = aggregate_coverage(system, catalog)

    score1, package_level = _configuration_score(system, facts, rule_table)
    standardization = _standardization_score(facts, rule_table)
    documentation = rule_table.documentation.bonus(system.documented_items)
    part1 = _clamp(round1(score1 + standardization + documentation), 0.0, PART1_MAX)

    accuracy_rate = derive_accuracy_rate(system, rule_table.accuracy)
    discovery_rate = derive_discovery_rate(system, rule_table.discovery_rate)
    accuracy_points = rule_table.accuracy.points(accuracy_rate)
    discovery_points = rule_table.discovery_rate.points(discovery_rate)
    part2 = _clamp(accuracy_points + discovery_points, 0.0, PART2_MAX)

    ops_rule = rule_table.ops_leads
    ops_lead = ops_rule.configured_score if system.ops_lead_configured else ops_rule.missing_score
    data_alert = rule_table.data_alert_recipients.score(
        system.data_monitor_configured, system.missing_monitor_items
    )
    part3 = _clamp(ops_lead + data_alert, 0.0, PART3_MAX)

    response = rule_table.response.score(system.late_response_count)
    rectification = rule_table.rectification.score(system.overdue_count)
    part4 = _clamp(response + rectification, 0.0, PART4_MAX)

    total = max(0.0, round1(part1 + part2 + part3 + part4))

    return ScoreResult(
        part1=part1,
        part2=part2,
        part3=part3,
        part4=part4,
        total=total,
        missing_caps=facts.missing_caps,
        package_level=package_level,
        accuracy_rate_pct=accuracy_rate * 100,
        discovery_rate_pct=discovery_rate * 100,
        accuracy_score=accuracy_points,
        discovery_score=discovery_points,
        standardization_score=standardization,
        documentation_score=documentation,
        participating_pairs=len(facts.pairs),
        rule_version=rule_table.version,
    )


def _configuration_score(
    system: SystemConfiguration,
    facts: CoverageFacts,
    rule_table: RuleTable,
) -> tuple[float, str]:
    """Base points less package, missing-capability and infrastructure deductions."""
    package = rule_table.integrity_package
    infra = rule_table.infrastructure_coverage

    coverage_pct = (len(MANDATORY_CAPS) - len(facts.missing_caps)) / len(MANDATORY_CAPS)
    package_deduct, package_level = package.deduction(coverage_pct)
    missing_deduct = package.per_missing_deduction * len(facts.missing_caps)
    server_deduct = infra.deduction(system.server_covered, system.server_total)
    app_deduct = infra.deduction(system.app_covered, system.app_total)
    bonus = package.self_built_bonus if system.is_self_built else 0.0

    score = package.base_points - package_deduct - missing_deduct - server_deduct - app_deduct + bonus
    return score, package_level


def _standardization_score(facts: CoverageFacts, rule_table: RuleTable) -> float:
    """Mean pair score over pairs that have scenarios; 0 when there are none."""
    if not facts.pairs:
        return 0.0
    rule = rule_table.standardization
    scores = [rule.pair_score(pair.fraction) for pair in facts.pairs]
    return sum(scores) / len(scores)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class SystemScorer:
    """Scores system configurations against a versioned rule table."""

    def __init__(self, rule_table: RuleTable | None = None) -> None:
        self._rule_table = rule_table or load_default_rule_table()

    @classmethod
    def from_config(cls, path: str | Path) -> Self:
        """Create a scorer from a YAML rule table file."""
        return cls(rule_table=load_rule_table(path))

    @property
    def rule_table(self) -> RuleTable:
        return self._rule_table

    @property
    def rule_version(self) -> str:
        return self._rule_table.version

    def score(self, system: SystemConfiguration, catalog: ToolCatalog) -> ScoreResult:
        """Score a single system."""
        return compute_score(system, catalog, self._rule_table)

    def score_many(
        self,
        systems: Iterable[SystemConfiguration],
        catalog: ToolCatalog,
    ) -> list[ScoreResult]:
        """Score a collection of systems against the same catalog."""
        return [self.score(system, catalog) for system in systems]
