"""In-memory persistence boundary around the scoring engine.

Implements the storage contracts the engine relies on: optimistic-concurrency
saves, cascading tool deletion, immutable score records and the mapping of
client-generated temporary ids to durable ids.
"""

import dataclasses
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable

from .catalog import ToolCatalog, retract_tool
from .models import MonitorTool, ScoreRecord, ScoreResult, SystemConfiguration

logger = logging.getLogger(__name__)


class ConflictError(Exception):
    """A write was rejected because the stored state moved on."""


class UnknownSystemError(KeyError):
    """The referenced system does not exist in the store."""


def is_durable_id(value: str) -> bool:
    """Durable ids are UUIDs; anything else is a client-side temporary id."""
    try:
        uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        return False
    return True


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EvaluationStore:
    """Thread-safe in-memory store of tools, systems and score history."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utc_now
        self._lock = threading.Lock()
        self._tools: dict[str, MonitorTool] = {}
        self._systems: dict[str, SystemConfiguration] = {}
        self._scores: dict[str, list[ScoreRecord]] = {}
        self._id_map: dict[str, str] = {}

    # -- catalog --

    def catalog(self) -> ToolCatalog:
        with self._lock:
            return ToolCatalog(self._tools.values())

    def put_tool(self, tool: MonitorTool) -> MonitorTool:
        """Insert or replace a tool, assigning a durable id to temporary ones."""
        with self._lock:
            tool_id = self._durable(tool.id)
            if tool_id != tool.id:
                tool = dataclasses.replace(tool, id=tool_id)
            self._tools[tool.id] = tool
            return tool

    def delete_tool(self, tool_id: str) -> list[str]:
        """Delete a tool and retract it from every stored system.

        Returns the ids of the systems that referenced the tool.
        """
        with self._lock:
            tool_id = self._id_map.get(tool_id, tool_id)
            tool = self._tools.pop(tool_id, None)
            if tool is None:
                return []
            remaining = ToolCatalog(self._tools.values())
            affected = []
            for system_id, system in self._systems.items():
                retracted = retract_tool(system, tool, remaining)
                if retracted is not system:
                    self._systems[system_id] = dataclasses.replace(
                        retracted, updated_at=self._timestamp()
                    )
                    affected.append(system_id)
            logger.info("Deleted tool %s; retracted from %d system(s)", tool_id, len(affected))
            return affected

    def delete_tools_by_name(self, name: str) -> list[str]:
        """Delete every tool with the given display name."""
        ids = [t.id for t in self.catalog().find_by_name(name)]
        affected: list[str] = []
        for tool_id in ids:
            for system_id in self.delete_tool(tool_id):
                if system_id not in affected:
                    affected.append(system_id)
        return affected

    # -- systems --

    def get_system(self, system_id: str) -> SystemConfiguration | None:
        with self._lock:
            return self._systems.get(self._id_map.get(system_id, system_id))

    def systems(self) -> list[SystemConfiguration]:
        with self._lock:
            return list(self._systems.values())

    def save_system(
        self,
        system: SystemConfiguration,
        expected_updated_at: str | None,
    ) -> SystemConfiguration:
        """Save a system if nobody else saved it since ``expected_updated_at``.

        A new system is saved with ``expected_updated_at=None``. Raises
        ConflictError when the stored timestamp differs.
        """
        with self._lock:
            system_id = self._durable(system.id)
            current = self._systems.get(system_id)
            current_stamp = current.updated_at if current is not None else None
            if current_stamp != expected_updated_at:
                logger.warning(
                    "Rejected save of system %s: expected %s, stored %s",
                    system_id, expected_updated_at, current_stamp,
                )
                raise ConflictError(
                    f"System {system_id} was modified at {current_stamp}; "
                    f"expected {expected_updated_at}"
                )

            saved = dataclasses.replace(
                system,
                id=system_id,
                selected_tool_ids=tuple(self._id_map.get(t, t) for t in system.selected_tool_ids),
                tool_capabilities={
                    self._id_map.get(t, t): caps for t, caps in system.tool_capabilities.items()
                },
                updated_at=self._timestamp(),
            )
            self._systems[system_id] = saved
            return saved

    def delete_system(self, system_id: str) -> None:
        """Delete a system together with its score history."""
        with self._lock:
            system_id = self._id_map.get(system_id, system_id)
            if self._systems.pop(system_id, None) is None:
                raise UnknownSystemError(system_id)
            self._scores.pop(system_id, None)

    # -- scores --

    def record_score(
        self,
        system_id: str,
        round_id: str,
        result: ScoreResult,
        inputs: dict | None = None,
    ) -> ScoreRecord:
        """Store the score of one evaluation round; each round is recorded once."""
        with self._lock:
            system_id = self._id_map.get(system_id, system_id)
            if system_id not in self._systems:
                raise UnknownSystemError(system_id)
            history = self._scores.setdefault(system_id, [])
            if any(r.round_id == round_id for r in history):
                raise ConflictError(f"Round {round_id} already scored for system {system_id}")
            record = ScoreRecord(
                system_id=system_id,
                round_id=round_id,
                rule_version=result.rule_version,
                result=result,
                inputs=dict(inputs or {}),
                created_at=self._timestamp(),
            )
            history.append(record)
            return record

    def score_history(self, system_id: str) -> list[ScoreRecord]:
        with self._lock:
            return list(self._scores.get(self._id_map.get(system_id, system_id), []))

    # -- ids --

    def durable_id(self, client_id: str) -> str | None:
        """Return the durable id assigned to a temporary client id."""
        with self._lock:
            return self._id_map.get(client_id)

    def _durable(self, client_id: str) -> str:
        if is_durable_id(client_id):
            return client_id
        if client_id not in self._id_map:
            self._id_map[client_id] = str(uuid.uuid4())
        return self._id_map[client_id]

    def _timestamp(self) -> str:
        return self._clock().isoformat()


def score_inputs(system: SystemConfiguration) -> dict:
    """The raw operational inputs recorded next to a score."""
    return {
        "alert_total": system.alert_total,
        "false_alert_total": system.false_alert_total,
        "fault_total": system.fault_total,
        "fault_detected_total": system.fault_detected_total,
        "accuracy_rate": system.accuracy_rate,
        "discovery_rate": system.discovery_rate,
        "accuracy_level": system.accuracy_level,
        "discovery_level": system.discovery_level,
        "ops_lead_configured": system.ops_lead_configured,
        "data_monitor_configured": system.data_monitor_configured,
        "missing_monitor_items": system.missing_monitor_items,
        "late_response_count": system.late_response_count,
        "overdue_count": system.overdue_count,
        "avg_detection_time": system.avg_detection_time,
        "max_detection_time": system.max_detection_time,
        "mismatched_alerts_count": system.mismatched_alerts_count,
        "early_detection_count": system.early_detection_count,
    }
