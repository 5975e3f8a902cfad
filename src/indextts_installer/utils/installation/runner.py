"""
Host-side installation runner.

Performs the actual IndexTTS installation in a fixed sequence of steps and
publishes a ProgressReport after each one:

1. Prepare the environment (5%)
2. Clone the IndexTTS repository with git (20% -> 40%)
3. Install Python dependencies with pip (60% -> 80%)
4. Create the models directory (90%)
5. Complete (100%)

A failing step publishes an error report and stops the run.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable

from indextts_installer.exceptions import InstallStepError
from indextts_installer.i18n_manager import t
from indextts_installer.schemas import InstallRequest, ProgressReport
from indextts_installer.utils.logger import get_logger

logger = get_logger("indextts.installer.runner")

ProgressCallback = Callable[[ProgressReport], Awaitable[None]]

MODELS_DIRNAME = "checkpoints"


class InstallationRunner:
    """Runs one installation and reports progress through a callback."""

    def __init__(
        self,
        request: InstallRequest,
        on_progress: ProgressCallback,
        repository_url: str,
        python_executable: str = "python",
        step_delay: float = 1.0,
    ) -> None:
        self.request = request
        self.install_path = Path(request.install_path).expanduser()
        self.on_progress = on_progress
        self.repository_url = repository_url
        self.python_executable = python_executable
        self.step_delay = step_delay

    async def run(self) -> bool:
        """Run all steps. Returns True on success."""
        logger.info(
            f"Installing IndexTTS into {self.install_path} "
            f"(model={self.request.model_type}, gpu={self.request.use_gpu})"
        )
        try:
            await self._report("preparing", 5, t("runner.preparing"))
            await self._pause()

            await self._report("downloading", 20, t("runner.cloning"))
            await self._run_command(
                "downloading",
                ["git", "clone", self.repository_url, str(self.install_path)],
                failure="Git clone failed",
                spawn_failure="Failed to run git clone",
            )
            await self._report("downloading", 40, t("runner.cloned"))
            await self._pause()

            await self._report("dependencies", 60, t("runner.dependencies"))
            await self._run_command(
                "dependencies",
                [self.python_executable, "-m", "pip", "install", "-r", "requirements.txt"],
                failure="Pip install failed",
                spawn_failure="Failed to run pip install",
                cwd=self.install_path,
            )
            await self._report("dependencies", 80, t("runner.deps_installed"))
            await self._pause()

            await self._report("models", 90, t("runner.models"))
            self._create_models_dir()
            await self._pause()

            await self._report("completed", 100, t("runner.completed"), is_complete=True)
            logger.info("IndexTTS installation completed")
            return True

        except InstallStepError as e:
            logger.error(f"Installation step '{e.step}' failed: {e.message}")
            await self._report("error", 0, e.message, has_error=True)
            return False
        except Exception as e:
            logger.error(f"Installation failed: {e}", exc_info=True)
            await self._report("error", 0, str(e), has_error=True)
            return False

    async def _report(
        self,
        step: str,
        progress: float,
        message: str,
        is_complete: bool = False,
        has_error: bool = False,
    ) -> None:
        await self.on_progress(
            ProgressReport(
                step=step,
                progress=progress,
                message=message,
                is_complete=is_complete,
                has_error=has_error,
            )
        )

    async def _pause(self) -> None:
        if self.step_delay > 0:
            await asyncio.sleep(self.step_delay)

    async def _run_command(
        self,
        step: str,
        args: list[str],
        failure: str,
        spawn_failure: str,
        cwd: Path | None = None,
    ) -> None:
        logger.debug(f"Executing: {' '.join(args)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=str(cwd) if cwd else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InstallStepError(step, f"{spawn_failure}: {e}") from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip()
            raise InstallStepError(step, f"{failure}: {detail}")

    def _create_models_dir(self) -> None:
        try:
            (self.install_path / MODELS_DIRNAME).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallStepError(
                "models", f"Failed to create models directory: {e}"
            ) from e
