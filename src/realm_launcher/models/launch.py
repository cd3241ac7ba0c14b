"""Launch resolution models."""

from dataclasses import dataclass
from pathlib import Path

from .profile import ServerProfile


@dataclass(frozen=True)
class LaunchPlan:
    """Everything resolved for a launch before the client is started."""
    profile: ServerProfile
    install_path: Path
    executable: Path
    locale: str
