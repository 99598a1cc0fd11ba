"""Coverage aggregation over a system's tool and capability selections."""

import logging

from .catalog import ToolCatalog
from .models import MANDATORY_CAPS, CoverageFacts, PairCoverage, SystemConfiguration

logger = logging.getLogger(__name__)


def enabled_tools(system: SystemConfiguration, catalog: ToolCatalog) -> list[tuple[str, tuple[str, ...]]]:
    """Return (tool id, granted capabilities) for each usable selected tool.

    A tool is usable when it resolves in the catalog and was granted at least
    one capability. Duplicate ids and capabilities are counted once, in the
    order they were first selected.
    """
    seen: set[str] = set()
    enabled = []
    for tool_id in system.selected_tool_ids:
        if tool_id in seen:
            continue
        seen.add(tool_id)
        if tool_id not in catalog:
            logger.debug("System %s selects unknown tool %s; skipped", system.id, tool_id)
            continue
        caps = tuple(dict.fromkeys(system.tool_capabilities.get(tool_id, ())))
        if caps:
            enabled.append((tool_id, caps))
    return enabled


def aggregate_coverage(system: SystemConfiguration, catalog: ToolCatalog) -> CoverageFacts:
    """Compute mandatory-capability coverage and per-pair standardization coverage.

    Pairs whose capability has no scenarios on that tool are left out
    entirely rather than counted as empty or complete.
    """
    covered: set[str] = set()
    pairs = []
    for tool_id, caps in enabled_tools(system, catalog):
        covered.update(caps)
        for cap in caps:
            relevant = catalog.scenarios_for(tool_id, cap)
            if not relevant:
                continue
            checked = sum(1 for s in relevant if s.id in system.checked_scenario_ids)
            pairs.append(PairCoverage(
                tool_id=tool_id,
                capability=cap,
                relevant=len(relevant),
                checked=checked,
            ))

    missing = tuple(c for c in MANDATORY_CAPS if c not in covered)
    return CoverageFacts(
        covered_caps=frozenset(covered),
        missing_caps=missing,
        pairs=tuple(pairs),
    )
