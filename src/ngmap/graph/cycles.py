"""Cycle detection over the dependency graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ngmap.graph.algos import find_cycles
from ngmap.models.graph import Cycle
from ngmap.rules.severity import classify_cycle

if TYPE_CHECKING:
    from ngmap.models.graph import DependencyGraph

logger = logging.getLogger(__name__)


def detect_cycles(graph: DependencyGraph) -> list[Cycle]:
    """Find and classify every dependency cycle in ``graph``."""
    roles = graph.roles()
    cycles: list[Cycle] = []
    for members in find_cycles(graph.adjacency()):
        cycle_type, severity = classify_cycle(roles[member] for member in members)
        cycles.append(Cycle(members=members, severity=severity, type=cycle_type))

    logger.debug("Detected %d cycles", len(cycles))
    return cycles


__all__ = ["detect_cycles"]
