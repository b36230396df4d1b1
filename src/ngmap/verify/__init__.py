"""Determinism verification."""

from ngmap.verify.verify import DeterminismResult, verify_determinism

__all__ = ["DeterminismResult", "verify_determinism"]
