"""Rule definitions for ngmap."""

from ngmap.rules.config import (
    ConfigError,
    NgMapConfig,
    load_config,
    resolve_cache_file,
)
from ngmap.rules.roles import RoleDecision, classify_record, classify_role
from ngmap.rules.severity import CYCLE_SEVERITY_POLICY, classify_cycle

__all__ = [
    "CYCLE_SEVERITY_POLICY",
    "ConfigError",
    "NgMapConfig",
    "RoleDecision",
    "classify_cycle",
    "classify_record",
    "classify_role",
    "load_config",
    "resolve_cache_file",
]
