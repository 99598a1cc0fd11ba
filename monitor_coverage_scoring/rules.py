"""Typed scoring rules and tier lookup helpers.

A rule table is plain data. Each rule carries the parameters of one scoring
step; every field has a default so that a table missing a rule, or a rule
missing a field, still scores.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Tier:
    """One step of an ordered tier list.

    ``threshold`` is the inclusive lower bound of the fraction the tier applies
    to; ``None`` marks the catch-all tier for everything below the others.
    ``value`` is a deduction or an award depending on the rule.
    """

    threshold: float | None
    value: float
    level: str | None = None


def sort_tiers(tiers) -> tuple[Tier, ...]:
    """Order tiers by threshold, highest first, with the catch-all last."""
    bounded = sorted((t for t in tiers if t.threshold is not None), key=lambda t: t.threshold, reverse=True)
    catch_all = [t for t in tiers if t.threshold is None]
    return tuple(bounded + catch_all)


def match_tier(tiers: tuple[Tier, ...], fraction: float) -> Tier | None:
    """Return the first tier whose threshold is met, or None if nothing applies."""
    for tier in tiers:
        if tier.threshold is None or fraction >= tier.threshold:
            return tier
    return None


@dataclass(frozen=True)
class IntegrityPackageRule:
    """Mandatory-capability package completeness (part 1)."""

    base_points: float = 45.0
    per_missing_deduction: float = 10.0
    self_built_bonus: float = 5.0
    tiers: tuple[Tier, ...] = (
        Tier(1.0, 0.0, "full"),
        Tier(0.7, 3.0, "basic"),
        Tier(0.5, 7.0, "partial"),
        Tier(None, 10.0, "low"),
    )
    fallback_deduction: float = 10.0
    fallback_level: str = "low"

    def deduction(self, coverage_pct: float) -> tuple[float, str]:
        tier = match_tier(self.tiers, coverage_pct)
        if tier is None:
            return self.fallback_deduction, self.fallback_level
        return tier.value, tier.level or self.fallback_level


@dataclass(frozen=True)
class InfraCoverageRule:
    """Server/application coverage penalty, applied per infrastructure class."""

    tiers: tuple[Tier, ...] = (
        Tier(0.95, 0.0),
        Tier(0.7, 3.0),
        Tier(0.5, 7.0),
        Tier(None, 10.0),
    )
    fallback_deduction: float = 10.0

    def deduction(self, covered: int, total: int) -> float:
        if total <= 0:
            return self.lowest_deduction()
        tier = match_tier(self.tiers, covered / total)
        return self.fallback_deduction if tier is None else tier.value

    def lowest_deduction(self) -> float:
        if not self.tiers:
            return self.fallback_deduction
        return self.tiers[-1].value if self.tiers[-1].threshold is None else self.fallback_deduction


@dataclass(frozen=True)
class StandardizationRule:
    """Per (tool, capability) standard-scenario coverage."""

    base_points: float = 10.0
    tiers: tuple[Tier, ...] = (
        Tier(1.0, 0.0),
        Tier(0.7, 3.0),
        Tier(0.5, 5.0),
        Tier(0.3, 7.0),
        Tier(None, 10.0),
    )
    fallback_deduction: float = 10.0

    def pair_score(self, fraction: float) -> float:
        tier = match_tier(self.tiers, fraction)
        deduct = self.fallback_deduction if tier is None else tier.value
        return max(0.0, self.base_points - deduct)


@dataclass(frozen=True)
class DocumentationRule:
    bonus_per_item: float = 1.0
    cap: float = 5.0

    def bonus(self, documented_items: int) -> float:
        return min(self.cap, max(0.0, documented_items * self.bonus_per_item))


@dataclass(frozen=True)
class DetectionRule:
    """Awards points for an alert accuracy or fault discovery rate."""

    tiers: tuple[Tier, ...] = (
        Tier(0.95, 10.0),
        Tier(0.85, 7.0),
        Tier(0.7, 3.0),
        Tier(None, 0.0),
    )
    levels: dict[str, float] = field(default_factory=lambda: {
        "perfect": 0.995, "high": 0.96, "medium": 0.92, "low": 0.89,
    })

    def points(self, rate: float) -> float:
        tier = match_tier(self.tiers, rate)
        return 0.0 if tier is None else tier.value

    def level_rate(self, level: str) -> float:
        return self.levels.get(level, 0.0)


def _discovery_levels() -> dict[str, float]:
    return {"perfect": 0.995, "high": 0.96, "medium": 0.90, "low": 0.80}


@dataclass(frozen=True)
class OpsLeadRule:
    configured_score: float = 5.0
    missing_score: float = 0.0


@dataclass(frozen=True)
class DataAlertRule:
    """Data-monitor alert recipients; ``na`` systems get a flat score."""

    full_score: float = 5.0
    deduct_per_item: float = 1.0
    cap_deduct: float = 5.0
    na_score: float = 0.0

    def score(self, state: str, missing_items: int) -> float:
        if state == "na":
            return self.na_score
        return max(0.0, self.full_score - min(self.cap_deduct, self.deduct_per_item * missing_items))


@dataclass(frozen=True)
class CountDeductionRule:
    """A fixed allowance reduced per counted incident, with a capped deduction."""

    base_points: float = 5.0
    deduct_per_item: float = 1.0
    cap_deduct: float = 5.0

    def score(self, count: int) -> float:
        return max(0.0, self.base_points - min(self.cap_deduct, count * self.deduct_per_item))


RULE_IDS = (
    "integrity_package",
    "infrastructure_coverage",
    "standardization",
    "documentation",
    "accuracy",
    "discovery_rate",
    "ops_leads",
    "data_alert_recipients",
    "response",
    "rectification",
)


@dataclass(frozen=True)
class RuleTable:
    """A versioned set of scoring rules, keyed by rule id."""

    version: str = "default"
    integrity_package: IntegrityPackageRule = field(default_factory=IntegrityPackageRule)
    infrastructure_coverage: InfraCoverageRule = field(default_factory=InfraCoverageRule)
    standardization: StandardizationRule = field(default_factory=StandardizationRule)
    documentation: DocumentationRule = field(default_factory=DocumentationRule)
    accuracy: DetectionRule = field(default_factory=DetectionRule)
    discovery_rate: DetectionRule = field(default_factory=lambda: DetectionRule(levels=_discovery_levels()))
    ops_leads: OpsLeadRule = field(default_factory=OpsLeadRule)
    data_alert_recipients: DataAlertRule = field(default_factory=DataAlertRule)
    response: CountDeductionRule = field(default_factory=lambda: CountDeductionRule(deduct_per_item=2.5))
    rectification: CountDeductionRule = field(default_factory=CountDeductionRule)

    def rule(self, rule_id: str):
        """Look up a rule by id."""
        if rule_id not in RULE_IDS:
            raise KeyError(rule_id)
        return getattr(self, rule_id)
