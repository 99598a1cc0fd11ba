"""monitor-coverage-scoring: Score how well systems are covered by operational monitoring."""

from .catalog import ToolCatalog
from .config import load_default_rule_table, load_rule_table
from .models import MonitorTool, Scenario, ScoreResult, SummaryStats, SystemConfiguration
from .rules import RuleTable
from .sanitize import sanitize_system, sanitize_tool
from .scorer import SystemScorer, compute_score
from .stats import summarize

__all__ = [
    "SystemScorer",
    "compute_score",
    "RuleTable",
    "load_rule_table",
    "load_default_rule_table",
    "ToolCatalog",
    "MonitorTool",
    "Scenario",
    "SystemConfiguration",
    "ScoreResult",
    "SummaryStats",
    "sanitize_system",
    "sanitize_tool",
    "summarize",
]
