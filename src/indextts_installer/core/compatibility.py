"""
Compatibility evaluation for the host machine.

A pure function over a MachineProfile. Four independent checks each add one
diagnostic; the number of diagnostics decides the verdict.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from indextts_installer.i18n_manager import t
from indextts_installer.schemas import MachineProfile

GIB = 1024**3

MIN_TOTAL_MEMORY = 8 * GIB
MIN_AVAILABLE_DISK = 10 * GIB

# Diagnostic counts above which the verdict degrades
MAX_WARNING_ISSUES = 2


class SuitabilityStatus(str, Enum):
    """Suitability of the machine for installation."""

    UNKNOWN = "unknown"
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class SuitabilityVerdict:
    """Verdict plus the ordered diagnostics explaining it."""

    status: SuitabilityStatus
    diagnostics: tuple[str, ...] = ()

    @property
    def blocks_install(self) -> bool:
        return self.status is SuitabilityStatus.ERROR

    def summary(self) -> str:
        """One-line, localized description of the verdict."""
        issues = ", ".join(self.diagnostics)
        return t(f"compatibility.summary.{self.status.value}", issues=issues)


UNKNOWN_VERDICT = SuitabilityVerdict(SuitabilityStatus.UNKNOWN)


def collect_diagnostics(profile: MachineProfile) -> list[str]:
    """Run every check against the profile, in order."""
    diagnostics = []

    if profile.total_memory < MIN_TOTAL_MEMORY:
        diagnostics.append(t("compatibility.insufficient_memory"))

    if profile.available_disk_space < MIN_AVAILABLE_DISK:
        diagnostics.append(t("compatibility.insufficient_disk"))

    if not profile.python_version:
        diagnostics.append(t("compatibility.runtime_missing"))

    if not profile.git_version:
        diagnostics.append(t("compatibility.vcs_missing"))

    return diagnostics


def evaluate(profile: MachineProfile | None) -> SuitabilityVerdict:
    """Derive the suitability verdict for a machine profile.

    Returns ``unknown`` with no diagnostics when no profile is available yet.
    """
    if profile is None:
        return UNKNOWN_VERDICT

    diagnostics = collect_diagnostics(profile)

    if not diagnostics:
        status = SuitabilityStatus.GOOD
    elif len(diagnostics) <= MAX_WARNING_ISSUES:
        status = SuitabilityStatus.WARNING
    else:
        status = SuitabilityStatus.ERROR

    return SuitabilityVerdict(status=status, diagnostics=tuple(diagnostics))
