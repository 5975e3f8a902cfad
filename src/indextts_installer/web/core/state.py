"""Host service state: the current installation and its progress."""

from __future__ import annotations

import asyncio

from fastapi import Request

from indextts_installer.config import InstallerSettings
from indextts_installer.i18n_manager import t
from indextts_installer.schemas import InstallRequest, ProgressReport
from indextts_installer.utils.installation import InstallationRunner
from indextts_installer.utils.logger import get_logger

logger = get_logger("indextts.web.state")


class HostState:
    """Global host state.

    Holds the single installation the host runs at a time. The progress
    report is replaced wholesale on every update and read under a lock.
    """

    def __init__(self, settings: InstallerSettings | None = None):
        self.settings = settings or InstallerSettings()
        self._progress = ProgressReport(step="idle", message=t("runner.ready"))
        self._progress_lock = asyncio.Lock()
        self._install_task: asyncio.Task | None = None

    def configure(self, settings: InstallerSettings) -> None:
        self.settings = settings

    @property
    def installing(self) -> bool:
        return self._install_task is not None and not self._install_task.done()

    async def get_progress(self) -> ProgressReport:
        async with self._progress_lock:
            return self._progress

    async def update_progress(self, report: ProgressReport) -> None:
        async with self._progress_lock:
            self._progress = report
        logger.info(f"[{report.step}] {report.progress:.0f}% {report.message}")

    async def start_installation(self, request: InstallRequest) -> None:
        """Spawn the installation runner in the background.

        Raises:
            RuntimeError: If an installation is already running
        """
        if self.installing:
            raise RuntimeError("Installation already in progress")

        await self.update_progress(
            ProgressReport(step="preparing", progress=0, message=t("runner.preparing"))
        )
        runner = InstallationRunner(
            request,
            on_progress=self.update_progress,
            repository_url=self.settings.repository_url,
            python_executable=self.settings.python_executable,
            step_delay=self.settings.step_delay,
        )
        self._install_task = asyncio.create_task(
            runner.run(), name="indextts-installation"
        )

    async def cleanup(self) -> None:
        """Cancel a running installation at shutdown."""
        task = self._install_task
        self._install_task = None
        if task is None or task.done():
            return

        logger.info("Cancelling running installation")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Installation cancelled")


# Global host state instance
host_state = HostState()


def get_host_state(request: Request) -> HostState:
    """FastAPI dependency returning the state bound to the running app."""
    return getattr(request.app.state, "host", host_state)
