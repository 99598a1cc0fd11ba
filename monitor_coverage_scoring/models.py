"""Data models for monitor-coverage-scoring."""

from dataclasses import dataclass, field

MONITOR_CATEGORIES = ("host", "process", "network", "db", "trans", "link", "data", "client")
MANDATORY_CAPS = ("host", "process", "network", "db", "trans")

MONITOR_LEVELS = ("red", "orange", "yellow", "gray")
SYSTEM_TIERS = ("A", "B", "C")
QUALITATIVE_LEVELS = ("perfect", "high", "medium", "low")
DATA_MONITOR_STATES = ("full", "missing", "na")


@dataclass(frozen=True)
class Scenario:
    """A standardized metric check belonging to a tool."""

    id: str
    category: str  # one of MONITOR_CATEGORIES
    metric: str
    level: str = "gray"
    threshold: str = ""


@dataclass(frozen=True)
class MonitorTool:
    """A catalog entry: a monitoring product and the checks it defines."""

    id: str
    name: str
    default_capabilities: tuple[str, ...] = ()
    scenarios: tuple[Scenario, ...] = ()


@dataclass(frozen=True)
class SystemConfiguration:
    """The monitored system being scored, as attested by an evaluator.

    Instances are expected to come out of ``sanitize.sanitize_system`` so
    every field is typed and defaulted. ``alert_total``/``fault_total`` and the
    precomputed rates stay ``None`` when the evaluator did not supply them.
    """

    id: str
    name: str = ""
    tier: str = "A"
    is_self_built: bool = False
    server_total: int = 0
    server_covered: int = 0
    app_total: int = 0
    app_covered: int = 0
    selected_tool_ids: tuple[str, ...] = ()
    tool_capabilities: dict[str, tuple[str, ...]] = field(default_factory=dict)
    checked_scenario_ids: frozenset[str] = frozenset()
    documented_items: int = 0
    accuracy_level: str = "high"
    discovery_level: str = "high"
    alert_total: int | None = None
    false_alert_total: int = 0
    fault_total: int | None = None
    fault_detected_total: int = 0
    accuracy_rate: float | None = None
    discovery_rate: float | None = None
    ops_lead_configured: bool = False
    data_monitor_configured: str = "full"
    missing_monitor_items: int = 0
    late_response_count: int = 0
    overdue_count: int = 0
    # Informational, recorded with score inputs but not scored.
    avg_detection_time: float = 0.0
    max_detection_time: float = 0.0
    mismatched_alerts_count: int = 0
    early_detection_count: int = 0
    updated_at: str | None = None


@dataclass(frozen=True)
class PairCoverage:
    """Standardization coverage of one (tool, enabled capability) pair."""

    tool_id: str
    capability: str
    relevant: int
    checked: int

    @property
    def fraction(self) -> float:
        if self.relevant <= 0:
            return 0.0
        return self.checked / self.relevant


@dataclass(frozen=True)
class CoverageFacts:
    """Intermediate result of the coverage aggregator."""

    covered_caps: frozenset[str]
    missing_caps: tuple[str, ...]
    pairs: tuple[PairCoverage, ...] = ()


@dataclass(frozen=True)
class ScoreResult:
    """Complete scoring result for a single system."""

    part1: float
    part2: float
    part3: float
    part4: float
    total: float
    missing_caps: tuple[str, ...] = ()
    package_level: str = "full"
    accuracy_rate_pct: float = 0.0
    discovery_rate_pct: float = 0.0
    accuracy_score: float = 0.0
    discovery_score: float = 0.0
    standardization_score: float = 0.0
    documentation_score: float = 0.0
    participating_pairs: int = 0
    rule_version: str = ""

    def to_dict(self) -> dict:
        return {
            "part1": self.part1,
            "part2": self.part2,
            "part3": self.part3,
            "part4": self.part4,
            "total": self.total,
            "missing_caps": list(self.missing_caps),
            "package_level": self.package_level,
            "accuracy_rate_pct": self.accuracy_rate_pct,
            "discovery_rate_pct": self.discovery_rate_pct,
            "accuracy_score": self.accuracy_score,
            "discovery_score": self.discovery_score,
            "standardization_score": self.standardization_score,
            "documentation_score": self.documentation_score,
            "participating_pairs": self.participating_pairs,
            "rule_version": self.rule_version,
        }


@dataclass(frozen=True)
class ScoreRecord:
    """An immutable, timestamped score for one system in one evaluation round."""

    system_id: str
    round_id: str
    rule_version: str
    result: ScoreResult
    inputs: dict = field(default_factory=dict)
    created_at: str = ""


@dataclass
class SummaryStats:
    """Aggregate statistics over a collection of scored systems."""

    total_systems: int
    mean_total: float
    median_total: float
    min_total: float
    max_total: float
    fully_covered_systems: int = 0
    total_histogram: dict[str, int] = field(default_factory=dict)
