"""Installation orchestration: environment detection, compatibility and the controller."""

from .compatibility import SuitabilityStatus, SuitabilityVerdict, evaluate
from .controller import (
    PHASES,
    InstallationController,
    InstallPhase,
    InstallState,
    PhaseView,
    phase_views,
)
from .environment import Capability, EnvironmentDetector

__all__ = [
    "PHASES",
    "Capability",
    "EnvironmentDetector",
    "InstallPhase",
    "InstallState",
    "InstallationController",
    "PhaseView",
    "SuitabilityStatus",
    "SuitabilityVerdict",
    "evaluate",
    "phase_views",
]
