"""Role classification for extracted source files.

Rules are evaluated top to bottom and the first match wins. Decorator rules
come before filename conventions, which come before the export fallback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ngmap.models.records import Confidence, ExportRef, FileRecord, Role


class RoleDecision(NamedTuple):
    role: Role
    confidence: Confidence
    label: str


# Role-defining decorators in precedence order. A component declared next to
# its NgModule stays a component. Injectable is refined by the filename
# conventions below.
DECORATOR_RULES: tuple[tuple[str, RoleDecision | None], ...] = (
    ("Component", RoleDecision("component", "high", "Angular Component")),
    ("Injectable", None),
    ("NgModule", RoleDecision("module", "high", "Angular Module")),
    ("Pipe", RoleDecision("pipe", "high", "Angular Pipe")),
    ("Directive", RoleDecision("directive", "high", "Angular Directive")),
)

INJECTABLE_FILENAME_RULES: tuple[tuple[str, RoleDecision], ...] = (
    (".service.", RoleDecision("service", "high", "Angular Service")),
    (".guard.", RoleDecision("guard", "high", "Angular Guard")),
    (".interceptor.", RoleDecision("interceptor", "high", "HTTP Interceptor")),
    (".resolver.", RoleDecision("resolver", "high", "Route Resolver")),
)
INJECTABLE_FALLBACK = RoleDecision("service", "medium", "Injectable Service")

FILENAME_RULES: tuple[tuple[str, RoleDecision], ...] = (
    (".model.", RoleDecision("model", "medium", "Model/Interface")),
    (".interface.", RoleDecision("model", "medium", "Model/Interface")),
)

UTILITY = RoleDecision("utility", "low", "Utility/Helper")
UNKNOWN = RoleDecision("unknown", "low", "Unknown")


def _classify_injectable(filename: str) -> RoleDecision:
    for marker, decision in INJECTABLE_FILENAME_RULES:
        if marker in filename:
            return decision
    return INJECTABLE_FALLBACK


def classify_role(
    annotations: Sequence[str],
    filename: str,
    exports: Sequence[ExportRef],
) -> RoleDecision:
    """Decide the architectural role of one file.

    Args:
        annotations: Decorator names found in the file
        filename: Base name of the file; matched case-insensitively
        exports: Exported symbols of the file

    Returns:
        The first matching RoleDecision.
    """
    name = filename.lower()
    present = set(annotations)

    for decorator, decision in DECORATOR_RULES:
        if decorator not in present:
            continue
        if decision is None:
            return _classify_injectable(name)
        return decision

    for marker, decision in FILENAME_RULES:
        if marker in name:
            return decision

    if exports:
        return UTILITY
    return UNKNOWN


def classify_record(record: FileRecord) -> FileRecord:
    """Return a copy of ``record`` with its role fields set."""
    filename = record.relative_path.rsplit("/", 1)[-1]
    decision = classify_role(record.annotations, filename, record.exports)
    return record.model_copy(
        update={
            "role": decision.role,
            "confidence": decision.confidence,
            "role_label": decision.label,
        }
    )


__all__ = [
    "DECORATOR_RULES",
    "FILENAME_RULES",
    "INJECTABLE_FILENAME_RULES",
    "RoleDecision",
    "classify_record",
    "classify_role",
]
