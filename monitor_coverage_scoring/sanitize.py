"""Boundary sanitization of loosely typed system and tool records.

Everything that reaches the scorer passes through here first. Malformed
values are replaced by safe defaults instead of raising, so a partially
filled record can always be scored.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any

from .models import (
    DATA_MONITOR_STATES,
    MONITOR_LEVELS,
    QUALITATIVE_LEVELS,
    SYSTEM_TIERS,
    MonitorTool,
    Scenario,
    SystemConfiguration,
)

# Accepted spellings for each capability, including the evaluation UI labels.
CAPABILITY_ALIASES: dict[str, str] = {
    "host": "host", "主机": "host", "主机性能": "host",
    "process": "process", "进程": "process", "进程监控": "process", "进程状态": "process",
    "network": "network", "网络": "network", "网络监控": "network", "网络负载": "network",
    "db": "db", "database": "db", "数据库": "db", "数据库监控": "db",
    "trans": "trans", "transaction": "trans", "交易": "trans", "交易监控": "trans",
    "link": "link", "链路": "link", "链路监控": "link", "全链路": "link",
    "data": "data", "数据": "data", "数据监控": "data", "数据核对": "data",
    "client": "client", "客户端": "client", "客户端监控": "client",
}

TRUE_STRINGS = frozenset({"true", "full", "yes", "1"})


def normalize_capabilities(caps: Any) -> tuple[str, ...]:
    """Map capability names to canonical categories, dropping unknown ones.

    Order of first appearance is kept and duplicates removed.
    """
    if isinstance(caps, str) or not isinstance(caps, Iterable):
        return ()
    normalized = []
    for cap in caps:
        key = "".join(str(cap or "").lower().split())
        canonical = CAPABILITY_ALIASES.get(key)
        if canonical is not None and canonical not in normalized:
            normalized.append(canonical)
    return tuple(normalized)


def sanitize_tool(raw: Mapping[str, Any]) -> MonitorTool:
    """Build a MonitorTool from a raw catalog record."""
    if not isinstance(raw, Mapping):
        raise TypeError(f"Tool record must be a mapping, got {type(raw).__name__}")

    tool_id = _text(raw.get("id"))
    scenarios = []
    raw_scenarios = raw.get("scenarios")
    if isinstance(raw_scenarios, list):
        for idx, s in enumerate(raw_scenarios):
            if not isinstance(s, Mapping):
                continue
            category = normalize_capabilities([s.get("category")])
            scenarios.append(Scenario(
                id=_text(s.get("id")) or f"{tool_id}_{idx}",
                category=category[0] if category else "host",
                metric=_text(s.get("metric")),
                level=_choice(s.get("level"), MONITOR_LEVELS, "gray"),
                threshold=_text(s.get("threshold")),
            ))

    return MonitorTool(
        id=tool_id,
        name=_text(raw.get("name")) or tool_id,
        default_capabilities=normalize_capabilities(
            _pick(raw, "default_capabilities", "defaultCapabilities")
        ),
        scenarios=tuple(scenarios),
    )


def sanitize_tools(raw_tools: Any) -> list[MonitorTool]:
    """Sanitize a list of raw tool records; tools without an id are skipped."""
    if not isinstance(raw_tools, list):
        return []
    tools = []
    for raw in raw_tools:
        if isinstance(raw, Mapping) and _text(raw.get("id")):
            tools.append(sanitize_tool(raw))
    return tools


def sanitize_system(raw: Mapping[str, Any]) -> SystemConfiguration:
    """Build a fully typed SystemConfiguration from a raw record.

    Accepts snake_case keys as well as the camelCase keys of older exports.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"System record must be a mapping, got {type(raw).__name__}")

    selected = _pick(raw, "selected_tool_ids", "selectedToolIds")
    selected_ids = tuple(dict.fromkeys(
        str(tid) for tid in selected if isinstance(tid, str) and tid
    )) if isinstance(selected, list) else ()

    raw_caps = _pick(raw, "tool_capabilities", "toolCapabilities")
    tool_caps = {}
    if isinstance(raw_caps, Mapping):
        for tid, caps in raw_caps.items():
            tool_caps[str(tid)] = normalize_capabilities(caps)

    checked = _pick(raw, "checked_scenario_ids", "checkedScenarioIds")
    checked_ids = frozenset(
        str(sid) for sid in checked if isinstance(sid, str)
    ) if isinstance(checked, list) else frozenset()

    return SystemConfiguration(
        id=_text(raw.get("id")),
        name=_text(raw.get("name")),
        tier=_choice(raw.get("tier"), SYSTEM_TIERS, "A"),
        is_self_built=_flag(_pick(raw, "is_self_built", "isSelfBuilt")),
        server_total=_count(_pick(raw, "server_total", "serverTotal")),
        server_covered=_count(_pick(raw, "server_covered", "serverCovered")),
        app_total=_count(_pick(raw, "app_total", "appTotal")),
        app_covered=_count(_pick(raw, "app_covered", "appCovered")),
        selected_tool_ids=selected_ids,
        tool_capabilities=tool_caps,
        checked_scenario_ids=checked_ids,
        documented_items=_count(_pick(raw, "documented_items", "documentedItems")),
        accuracy_level=_choice(_pick(raw, "accuracy_level", "accuracy"), QUALITATIVE_LEVELS, "high"),
        discovery_level=_choice(
            _pick(raw, "discovery_level", "discoveryRate"), QUALITATIVE_LEVELS, "high"
        ),
        alert_total=_optional_count(_pick(raw, "alert_total", "alertTotal")),
        false_alert_total=_count(_pick(raw, "false_alert_total", "falseAlertTotal")),
        fault_total=_optional_count(_pick(raw, "fault_total", "faultTotal")),
        fault_detected_total=_count(_pick(raw, "fault_detected_total", "faultDetectedTotal")),
        accuracy_rate=_rate(_pick(raw, "accuracy_rate", "accuracyRate")),
        discovery_rate=_rate(_pick(raw, "discovery_rate", "discoveryRatePct")),
        ops_lead_configured=_flag(_pick(raw, "ops_lead_configured", "opsLeadConfigured")),
        data_monitor_configured=_choice(
            _pick(raw, "data_monitor_configured", "dataMonitorConfigured"), DATA_MONITOR_STATES, "full"
        ),
        missing_monitor_items=_count(_pick(raw, "missing_monitor_items", "missingMonitorItems")),
        late_response_count=_count(_pick(raw, "late_response_count", "lateResponseCount")),
        overdue_count=_count(_pick(raw, "overdue_count", "overdueCount")),
        avg_detection_time=_measure(_pick(raw, "avg_detection_time", "avgDetectionTime")),
        max_detection_time=_measure(_pick(raw, "max_detection_time", "maxDetectionTime")),
        mismatched_alerts_count=_count(_pick(raw, "mismatched_alerts_count", "mismatchedAlertsCount")),
        early_detection_count=_count(_pick(raw, "early_detection_count", "earlyDetectionCount")),
        updated_at=_text(_pick(raw, "updated_at", "updatedAt")) or None,
    )


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the value of the first key present."""
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    return value if value in allowed else default


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return False


def _finite(value: Any) -> float | None:
    """Return value as a finite float, or None for anything else."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _count(value: Any) -> int:
    """A non-negative count; missing or malformed values become 0."""
    number = _finite(value)
    if number is None or number < 0:
        return 0
    return int(number)


def _optional_count(value: Any) -> int | None:
    """A non-negative count that stays None when absent or malformed."""
    number = _finite(value)
    if number is None or number < 0:
        return None
    return int(number)


def _rate(value: Any) -> float | None:
    number = _finite(value)
    if number is None:
        return None
    return max(0.0, min(1.0, number))


def _measure(value: Any) -> float:
    number = _finite(value)
    if number is None or number < 0:
        return 0.0
    return number
