"""YAML rule table loading and validation."""

import dataclasses
import importlib.resources
import logging
import math
from pathlib import Path
from typing import Any

import yaml

from .rules import RULE_IDS, RuleTable, Tier, sort_tiers

logger = logging.getLogger(__name__)

DEFAULT_RULE_TABLE = "score_rules_v1.yaml"

# Award tiers use "points"; every other rule's tiers are deductions.
POINT_TIER_RULES = frozenset({"accuracy", "discovery_rate"})
TEXT_FIELDS = frozenset({"fallback_level"})


def load_rule_table(path: str | Path) -> RuleTable:
    """Load a rule table from a YAML file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    table = _build_rule_table(data)
    logger.info("Loaded rule table %s from %s", table.version, path)
    return table


def load_default_rule_table() -> RuleTable:
    """Load the bundled default rule table."""
    pkg = importlib.resources.files("monitor_coverage_scoring") / "rule_tables" / DEFAULT_RULE_TABLE
    text = pkg.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return _build_rule_table(data)


def _build_rule_table(data: Any) -> RuleTable:
    """Build a RuleTable from parsed YAML data.

    Rules absent from the document keep their built-in defaults.
    """
    if not isinstance(data, dict):
        raise ValueError("Rule table document must be a mapping")

    version = data.get("version")
    if version is None or not str(version).strip():
        raise ValueError("Rule table missing 'version'")

    rules_data = data.get("rules") or {}
    if not isinstance(rules_data, dict):
        raise ValueError("'rules' must be a mapping of rule id to parameters")

    defaults = RuleTable()
    overrides = {}
    for rule_id, rule_data in rules_data.items():
        if rule_id not in RULE_IDS:
            raise ValueError(
                f"Unknown rule id {rule_id!r}. Must be one of: {', '.join(RULE_IDS)}"
            )
        overrides[rule_id] = _parse_rule(rule_id, rule_data or {}, getattr(defaults, rule_id))

    return dataclasses.replace(defaults, version=str(version), **overrides)


def _parse_rule(rule_id: str, data: Any, default: Any) -> Any:
    """Parse one rule block on top of its default.

    Keys left out keep the default value; a partial ``levels`` mapping is
    merged over the default levels.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Rule {rule_id!r} must be a mapping")

    allowed = {f.name for f in dataclasses.fields(default)}
    changes = {}
    for key, value in data.items():
        if key not in allowed:
            raise ValueError(
                f"Rule {rule_id!r} has unknown key {key!r}. Must be one of: {sorted(allowed)}"
            )
        if key == "tiers":
            changes[key] = _parse_tiers(rule_id, value)
        elif key == "levels":
            changes[key] = {**default.levels, **_parse_levels(rule_id, value)}
        elif key in TEXT_FIELDS:
            changes[key] = str(value)
        else:
            changes[key] = _number(rule_id, key, value)
    return dataclasses.replace(default, **changes)


def _parse_tiers(rule_id: str, data: Any) -> tuple[Tier, ...]:
    """Parse an ordered tier list; returns tiers sorted highest threshold first."""
    if not isinstance(data, list):
        raise ValueError(f"Rule {rule_id!r}: 'tiers' must be a list")

    value_key = "points" if rule_id in POINT_TIER_RULES else "deduct"
    tiers = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError(f"Rule {rule_id!r}: tier entries must be mappings")
        if value_key not in entry:
            raise ValueError(f"Rule {rule_id!r}: tier missing {value_key!r}: {entry}")
        threshold = entry.get("min")
        tiers.append(Tier(
            threshold=None if threshold is None else _number(rule_id, "min", threshold),
            value=_number(rule_id, value_key, entry[value_key]),
            level=str(entry["level"]) if entry.get("level") is not None else None,
        ))

    _validate_tiers(rule_id, tiers)
    return sort_tiers(tiers)


def _parse_levels(rule_id: str, data: Any) -> dict[str, float]:
    """Parse a qualitative level -> rate mapping."""
    if not isinstance(data, dict):
        raise ValueError(f"Rule {rule_id!r}: 'levels' must be a mapping")
    levels = {}
    for level, rate in data.items():
        rate = _number(rule_id, f"levels.{level}", rate)
        if rate > 1:
            raise ValueError(f"Rule {rule_id!r}: level rate {level!r} must be <= 1")
        levels[str(level)] = rate
    return levels


def _validate_tiers(rule_id: str, tiers: list[Tier]) -> None:
    """Reject duplicate thresholds and more than one catch-all tier."""
    seen = set()
    catch_all = 0
    for tier in tiers:
        if tier.threshold is None:
            catch_all += 1
            continue
        if tier.threshold in seen:
            raise ValueError(f"Rule {rule_id!r}: duplicate tier threshold {tier.threshold}")
        seen.add(tier.threshold)
    if catch_all > 1:
        raise ValueError(f"Rule {rule_id!r}: only one tier may omit 'min'")


def _number(rule_id: str, key: str, value: Any) -> float:
    """Coerce a rule parameter to a finite, non-negative float."""
    if isinstance(value, bool):
        raise ValueError(f"Rule {rule_id!r}: {key!r} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Rule {rule_id!r}: {key!r} must be a number, got {value!r}") from None
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"Rule {rule_id!r}: {key!r} must be a finite non-negative number")
    return number
