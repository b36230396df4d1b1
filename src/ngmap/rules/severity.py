"""Cycle severity policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ngmap.models.graph import CycleSeverity, CycleType
    from ngmap.models.records import Role

# Checked in order; the first role present among a cycle's members decides.
CYCLE_SEVERITY_POLICY: tuple[tuple[Role, CycleType, CycleSeverity], ...] = (
    ("module", "module", "error"),
    ("service", "service", "error"),
    ("component", "component", "warning"),
)
DEFAULT_CYCLE_POLICY: tuple[CycleType, CycleSeverity] = ("general", "warning")


def classify_cycle(roles: Iterable[Role]) -> tuple[CycleType, CycleSeverity]:
    """Return ``(type, severity)`` for a cycle whose members have ``roles``."""
    present = set(roles)
    for role, cycle_type, severity in CYCLE_SEVERITY_POLICY:
        if role in present:
            return cycle_type, severity
    return DEFAULT_CYCLE_POLICY


__all__ = ["CYCLE_SEVERITY_POLICY", "DEFAULT_CYCLE_POLICY", "classify_cycle"]
