"""
Environment detection.

Decides once per session whether the host command interface is reachable.
The resulting capability is the flag every gated installer action consults.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from indextts_installer.core.compatibility import SuitabilityVerdict, evaluate
from indextts_installer.host.client import HostClient
from indextts_installer.i18n_manager import t
from indextts_installer.schemas import MachineProfile
from indextts_installer.utils.logger import get_logger

logger = get_logger("indextts.core.environment")

FALLBACK_INSTALL_PATH = "/Users/Shared/IndexTTS"


class Capability(str, Enum):
    """Whether installation is possible in the current runtime."""

    UNDETECTED = "undetected"
    PRIVILEGED = "privileged"
    RESTRICTED = "restricted"


class EnvironmentDetector:
    """Probes the host and keeps the detection results for the session.

    Attributes:
        capability (Capability): Result of the one-time host probe
        profile (MachineProfile | None): Latest machine profile, if any
        default_install_path (str): Host-suggested install path or the fallback
        error (str | None): User-visible message for the last detection failure
        detecting (bool): True while a profile fetch is in flight
    """

    def __init__(self, host: HostClient) -> None:
        self.host = host
        self.capability = Capability.UNDETECTED
        self.profile: MachineProfile | None = None
        self.default_install_path = FALLBACK_INSTALL_PATH
        self.error: str | None = None
        self.detecting = False
        self._detect_lock = asyncio.Lock()

    @property
    def privileged(self) -> bool:
        return self.capability is Capability.PRIVILEGED

    @property
    def restricted(self) -> bool:
        return self.capability is Capability.RESTRICTED

    @property
    def verdict(self) -> SuitabilityVerdict:
        return evaluate(self.profile)

    async def detect(self) -> Capability:
        """Probe the host once; later calls return the cached capability.

        Overlapping calls wait for the first one instead of probing again.
        """
        async with self._detect_lock:
            return await self._detect_once()

    async def _detect_once(self) -> Capability:
        if self.capability is not Capability.UNDETECTED:
            logger.debug(f"Environment already detected: {self.capability.value}")
            return self.capability

        try:
            await self.host.probe()
        except Exception as e:
            logger.info(f"Host command interface unavailable: {e}")
            self.capability = Capability.RESTRICTED
            self.error = t("environment.restricted")
            return self.capability

        self.capability = Capability.PRIVILEGED
        logger.info("Host command interface available")

        await self.refresh_profile()
        await self.fetch_default_install_path()
        return self.capability

    async def refresh_profile(self) -> MachineProfile | None:
        """Fetch a fresh machine profile from the host.

        On failure the previous profile (if any) is kept and ``error`` is set.
        """
        if not self.privileged:
            logger.warning("Profile refresh refused: environment is not privileged")
            return None

        self.detecting = True
        self.error = None
        try:
            self.profile = await self.host.get_machine_profile()
            logger.info(
                f"Machine profile: {self.profile.os} {self.profile.os_version}, "
                f"{self.profile.cpu_cores} cores, verdict={self.verdict.status.value}"
            )
        except Exception as e:
            logger.error(f"System detection failed: {e}")
            self.error = t("environment.detection_failed", error=str(e))
        finally:
            self.detecting = False

        return self.profile

    async def fetch_default_install_path(self) -> str:
        """Ask the host for its default install path, keeping the fallback on error.

        A failure is reported through ``error`` unless a detection error is
        already shown.
        """
        try:
            self.default_install_path = await self.host.get_default_install_path()
        except Exception as e:
            logger.error(f"Failed to get default install path: {e}")
            if self.error is None:
                self.error = t(
                    "environment.default_path_failed",
                    error=str(e),
                    path=self.default_install_path,
                )
        return self.default_install_path
