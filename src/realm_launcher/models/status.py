"""Reachability result models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RealmStatus:
    """Outcome of a reachability check."""
    online: bool
    latency_ms: int = 0  # 0 when offline
