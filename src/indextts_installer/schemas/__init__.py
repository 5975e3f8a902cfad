"""Pydantic models exchanged between the installer client and the host."""

from .install import (
    MODEL_VARIANTS,
    CommandMessage,
    InstallPath,
    InstallRequest,
    ModelVariant,
    ProgressReport,
)
from .machine import MachineProfile

__all__ = [
    "MODEL_VARIANTS",
    "CommandMessage",
    "InstallPath",
    "InstallRequest",
    "MachineProfile",
    "ModelVariant",
    "ProgressReport",
]
