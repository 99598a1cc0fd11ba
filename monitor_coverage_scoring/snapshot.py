"""JSON snapshot import and export of systems and the tool catalog."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .catalog import ToolCatalog
from .models import MonitorTool, SystemConfiguration
from .sanitize import sanitize_system, sanitize_tools


@dataclass
class Snapshot:
    """Everything needed to rescore: systems, catalog and the rule version used."""

    systems: list[SystemConfiguration] = field(default_factory=list)
    catalog: ToolCatalog = field(default_factory=ToolCatalog)
    rule_version: str = "unknown"


def tool_to_dict(tool: MonitorTool) -> dict:
    return {
        "id": tool.id,
        "name": tool.name,
        "default_capabilities": list(tool.default_capabilities),
        "scenarios": [
            {
                "id": s.id,
                "category": s.category,
                "metric": s.metric,
                "level": s.level,
                "threshold": s.threshold,
            }
            for s in tool.scenarios
        ],
    }


def system_to_dict(system: SystemConfiguration) -> dict:
    return {
        "id": system.id,
        "name": system.name,
        "tier": system.tier,
        "is_self_built": system.is_self_built,
        "server_total": system.server_total,
        "server_covered": system.server_covered,
        "app_total": system.app_total,
        "app_covered": system.app_covered,
        "selected_tool_ids": list(system.selected_tool_ids),
        "tool_capabilities": {tid: list(caps) for tid, caps in system.tool_capabilities.items()},
        # Sorted so exports of the same system are byte-identical.
        "checked_scenario_ids": sorted(system.checked_scenario_ids),
        "documented_items": system.documented_items,
        "accuracy_level": system.accuracy_level,
        "discovery_level": system.discovery_level,
        "alert_total": system.alert_total,
        "false_alert_total": system.false_alert_total,
        "fault_total": system.fault_total,
        "fault_detected_total": system.fault_detected_total,
        "accuracy_rate": system.accuracy_rate,
        "discovery_rate": system.discovery_rate,
        "ops_lead_configured": system.ops_lead_configured,
        "data_monitor_configured": system.data_monitor_configured,
        "missing_monitor_items": system.missing_monitor_items,
        "late_response_count": system.late_response_count,
        "overdue_count": system.overdue_count,
        "avg_detection_time": system.avg_detection_time,
        "max_detection_time": system.max_detection_time,
        "mismatched_alerts_count": system.mismatched_alerts_count,
        "early_detection_count": system.early_detection_count,
        "updated_at": system.updated_at,
    }


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    return {
        "rule_version": snapshot.rule_version,
        "systems": [system_to_dict(s) for s in snapshot.systems],
        "tools": [tool_to_dict(t) for t in snapshot.catalog],
    }


def snapshot_from_dict(data: Any) -> Snapshot:
    """Build a Snapshot from a parsed document, sanitizing every record."""
    if not isinstance(data, dict):
        raise ValueError("Snapshot document must be a JSON object")
    systems = data.get("systems")
    tools = data.get("tools")
    if not isinstance(systems, list) or not isinstance(tools, list):
        raise ValueError("Snapshot document requires 'systems' and 'tools' lists")

    version = data.get("rule_version", data.get("ruleVersion"))
    return Snapshot(
        systems=[sanitize_system(s) for s in systems if isinstance(s, dict)],
        catalog=ToolCatalog(sanitize_tools(tools)),
        rule_version=str(version) if version else "unknown",
    )


def dump_snapshot(snapshot: Snapshot, path: str | Path) -> None:
    """Write a snapshot to a JSON file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot_to_dict(snapshot), f, indent=2, ensure_ascii=False)


def load_snapshot(path: str | Path) -> Snapshot:
    """Read a snapshot from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return snapshot_from_dict(data)
