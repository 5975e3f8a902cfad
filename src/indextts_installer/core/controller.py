"""
Installation controller.

Drives one installation on the host through the states

    idle -> starting -> running -> completed | failed

with an explicit ``failed -> idle`` reset. While running, the controller owns
a single poll task that fetches a ProgressReport once per interval, strictly
sequentially, until the host reports completion or failure, or the progress
call itself fails. Presentation layers read ``state``, ``progress``, ``error``
and ``notice`` after each step, or register a listener to be told about
changes; they never drive transitions themselves.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from indextts_installer.core.environment import EnvironmentDetector
from indextts_installer.host.client import HostClient
from indextts_installer.i18n_manager import t
from indextts_installer.schemas import InstallRequest, ProgressReport
from indextts_installer.utils.logger import get_logger

logger = get_logger("indextts.core.controller")


class InstallState(str, Enum):
    """Installation state."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallPhase:
    """A named stage shown while an installation runs."""

    key: str

    @property
    def label(self) -> str:
        return t(f"phases.{self.key}")


PHASES: tuple[InstallPhase, ...] = (
    InstallPhase("preparing"),
    InstallPhase("downloading"),
    InstallPhase("models"),
    InstallPhase("dependencies"),
    InstallPhase("configuring"),
)


@dataclass(frozen=True)
class PhaseView:
    """Display status of one phase for a given progress report."""

    phase: InstallPhase
    index: int
    active: bool
    complete: bool


def phase_views(report: ProgressReport) -> list[PhaseView]:
    """Map a progress report onto the fixed phases.

    A phase is active when the report names it, and complete once the overall
    percentage has passed its start. The two are evaluated independently, so a
    phase may be both active and complete when the host's step and percentage
    disagree.
    """
    count = len(PHASES)
    return [
        PhaseView(
            phase=phase,
            index=index,
            active=report.step == phase.key,
            complete=report.progress > (index / count) * 100,
        )
        for index, phase in enumerate(PHASES)
    ]


StateListener = Callable[["InstallationController"], None]


class InstallationController:
    """State machine for a single installation on the host.

    Args:
        host: Host command interface
        environment: Detector holding the session capability and machine profile
        poll_interval: Seconds between progress polls

    Attributes:
        state (InstallState): Current state
        progress (ProgressReport): Latest report, replaced wholesale on each poll
        error (str | None): Reason for the last refused start or failed install
        notice (str | None): Outcome message of the last post-completion action
    """

    POLL_INTERVAL = 1.0

    def __init__(
        self,
        host: HostClient,
        environment: EnvironmentDetector,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.host = host
        self.environment = environment
        self.poll_interval = poll_interval

        self.state = InstallState.IDLE
        self.progress = ProgressReport()
        self.error: str | None = None
        self.notice: str | None = None

        self._draft: InstallRequest | None = None
        self._active_request: InstallRequest | None = None
        self._poll_task: asyncio.Task | None = None
        self._listeners: list[StateListener] = []

    # Request editing

    @property
    def request(self) -> InstallRequest:
        """The request in effect; a copy, so editing it has no effect."""
        if self._active_request is not None:
            return self._active_request.model_copy()
        if self._draft is not None:
            return self._draft.model_copy()
        return InstallRequest(install_path=self.environment.default_install_path)

    def update_request(self, **changes) -> bool:
        """Edit the pending request. Only allowed while idle.

        Raises:
            pydantic.ValidationError: If the edited request is invalid
        """
        if self.state is not InstallState.IDLE:
            logger.warning(f"Request edit refused in state {self.state.value}")
            return False

        self._draft = InstallRequest.model_validate(
            {**self.request.model_dump(), **changes}
        )
        self._notify()
        return True

    # Derived state

    @property
    def installing(self) -> bool:
        return self.state in (InstallState.STARTING, InstallState.RUNNING)

    @property
    def polling(self) -> bool:
        return self._poll_task is not None

    @property
    def phases(self) -> list[PhaseView]:
        return phase_views(self.progress)

    def can_start(self) -> bool:
        """Whether ``start`` would currently be accepted."""
        return (
            self.state is InstallState.IDLE
            and self.environment.privileged
            and self.environment.profile is not None
            and not self.environment.verdict.blocks_install
        )

    # Listeners

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a state-change callback; returns a function removing it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("State listener failed")

    def _set_state(self, state: InstallState) -> None:
        logger.info(f"Installation state: {self.state.value} -> {state.value}")
        self.state = state
        self._notify()

    # Transitions

    async def start(self, request: InstallRequest | None = None) -> bool:
        """Submit an installation request to the host.

        Returns True once the host accepted the request and polling began.
        A refused start (wrong state, restricted environment, blocking
        verdict) returns False without side effects. A start the host
        rejects returns False with ``error`` set to the host's message.
        """
        if not self.can_start():
            logger.warning(
                f"Start refused: state={self.state.value}, "
                f"capability={self.environment.capability.value}, "
                f"verdict={self.environment.verdict.status.value}"
            )
            return False

        active = (request or self.request).model_copy()
        self._draft = active
        self._active_request = active
        self.error = None
        self.notice = None
        self._set_state(InstallState.STARTING)

        logger.info(
            f"Starting installation: path={active.install_path}, "
            f"model={active.model_type}, gpu={active.use_gpu}"
        )
        try:
            acknowledgement = await self.host.start_installation(active)
        except Exception as e:
            logger.error(f"Failed to start installation: {e}")
            self.error = str(e)
            self._active_request = None
            self._set_state(InstallState.IDLE)
            return False

        logger.info(f"Installation started: {acknowledgement}")
        self._set_state(InstallState.RUNNING)
        self._poll_task = asyncio.create_task(
            self._poll_loop(), name="indextts-install-poll"
        )
        return True

    async def _poll_loop(self) -> None:
        while self.state is InstallState.RUNNING:
            await asyncio.sleep(self.poll_interval)

            try:
                report = await self.host.get_installation_progress()
            except Exception as e:
                if self.state is InstallState.RUNNING:
                    logger.error(f"Failed to get installation progress: {e}")
                    self._finish(InstallState.FAILED, error=str(e))
                return

            if self.state is not InstallState.RUNNING:
                logger.debug("Discarding progress report received after polling ended")
                return

            self.progress = report
            logger.debug(
                f"Progress: step={report.step} {report.progress:.0f}% {report.message}"
            )

            if report.has_error:
                logger.error(f"Installation failed: {report.message}")
                self._finish(InstallState.FAILED, error=report.message)
            elif report.is_complete:
                logger.info("Installation completed")
                self._finish(InstallState.COMPLETED)
            else:
                self._notify()

    def _finish(self, state: InstallState, error: str | None = None) -> None:
        # Disarm the poll task before leaving running
        self._poll_task = None
        self.error = error
        self._set_state(state)

    def reset(self) -> bool:
        """Return from ``failed`` to ``idle`` with an empty progress report."""
        if self.state is not InstallState.FAILED:
            logger.warning(f"Reset refused in state {self.state.value}")
            return False

        self.progress = ProgressReport()
        self.error = None
        self.notice = None
        self._active_request = None
        self._set_state(InstallState.IDLE)
        return True

    async def wait(self) -> InstallState:
        """Wait until the current poll loop ends and return the resulting state."""
        task = self._poll_task
        if task is not None:
            await task
        return self.state

    async def cleanup(self) -> None:
        """Cancel an outstanding poll task at shutdown. The state is left as is."""
        task = self._poll_task
        self._poll_task = None
        if task is None or task.done():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Progress polling cancelled at shutdown")

    # Post-completion actions

    async def launch_application(self) -> bool:
        """Ask the host to launch the installed application."""
        if self.state is not InstallState.COMPLETED:
            logger.warning(f"Launch refused in state {self.state.value}")
            return False

        install_path = self.request.install_path
        try:
            self.notice = await self.host.launch_application(install_path)
        except Exception as e:
            logger.error(f"Failed to launch application: {e}")
            self.notice = t("controller.launch_failed", error=str(e))
            self._notify()
            return False

        logger.info(f"Application launched from {install_path}")
        self._notify()
        return True

    async def open_install_directory(self) -> bool:
        """Ask the host to open the install directory in the file manager."""
        if self.state is not InstallState.COMPLETED:
            logger.warning(f"Open directory refused in state {self.state.value}")
            return False

        install_path = self.request.install_path
        try:
            await self.host.open_install_directory(install_path)
        except Exception as e:
            logger.error(f"Failed to open install directory: {e}")
            self.notice = t("controller.open_failed", error=str(e))
            self._notify()
            return False

        self.notice = None
        self._notify()
        return True
