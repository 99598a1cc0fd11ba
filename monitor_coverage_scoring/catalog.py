"""Tool catalog lookups and the cascading-delete contract."""

import dataclasses
from typing import Iterable, Iterator

from .models import MonitorTool, Scenario, SystemConfiguration


class ToolCatalog:
    """Read-only, id-indexed view over monitoring tools.

    Iteration preserves insertion order. A later tool with an id already seen
    replaces the earlier one.
    """

    def __init__(self, tools: Iterable[MonitorTool] = ()) -> None:
        self._tools: dict[str, MonitorTool] = {}
        for tool in tools:
            self._tools[tool.id] = tool
        self._scenario_owners: dict[str, list[str]] = {}
        for tool in self._tools.values():
            for scenario in tool.scenarios:
                owners = self._scenario_owners.setdefault(scenario.id, [])
                if tool.id not in owners:
                    owners.append(tool.id)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools

    def __iter__(self) -> Iterator[MonitorTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ToolCatalog):
            return NotImplemented
        return list(self._tools.values()) == list(other._tools.values())

    def get(self, tool_id: str) -> MonitorTool | None:
        return self._tools.get(tool_id)

    def find_by_name(self, name: str) -> list[MonitorTool]:
        """Return every tool whose display name matches exactly."""
        return [t for t in self._tools.values() if t.name == name]

    def scenario_owners(self, scenario_id: str) -> tuple[str, ...]:
        """Return the ids of the tools defining a scenario, in catalog order."""
        return tuple(self._scenario_owners.get(scenario_id, ()))

    def scenarios_for(self, tool_id: str, capability: str) -> list[Scenario]:
        tool = self._tools.get(tool_id)
        if tool is None:
            return []
        return [s for s in tool.scenarios if s.category == capability]

    def with_tool(self, tool: MonitorTool) -> "ToolCatalog":
        """Return a catalog with ``tool`` added or replaced."""
        return ToolCatalog([*self._tools.values(), tool])

    def without_tool(self, tool_id: str) -> "ToolCatalog":
        """Return a catalog with ``tool_id`` removed."""
        return ToolCatalog(t for t in self._tools.values() if t.id != tool_id)


def retract_tool(
    system: SystemConfiguration,
    tool: MonitorTool,
    catalog: ToolCatalog | None = None,
) -> SystemConfiguration:
    """Remove every reference to ``tool`` from a system configuration.

    Drops the tool from the selection, its capability grants and the checked
    marks on its scenarios. When ``catalog`` is given, a checked scenario id
    that another tool in it also defines is kept. Returns the system
    unchanged when it holds no reference to the tool.
    """
    scenario_ids = {s.id for s in tool.scenarios}
    if catalog is not None:
        scenario_ids = {
            sid for sid in scenario_ids
            if not any(owner != tool.id for owner in catalog.scenario_owners(sid))
        }
    if (
        tool.id not in system.selected_tool_ids
        and tool.id not in system.tool_capabilities
        and not scenario_ids & system.checked_scenario_ids
    ):
        return system

    return dataclasses.replace(
        system,
        selected_tool_ids=tuple(tid for tid in system.selected_tool_ids if tid != tool.id),
        tool_capabilities={
            tid: caps for tid, caps in system.tool_capabilities.items() if tid != tool.id
        },
        checked_scenario_ids=system.checked_scenario_ids - scenario_ids,
    )
