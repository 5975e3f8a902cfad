"""Installation API endpoints."""

from __future__ import annotations

import os
import platform
import subprocess
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from indextts_installer.schemas import (
    CommandMessage,
    InstallPath,
    InstallRequest,
    ProgressReport,
)
from indextts_installer.utils.logger import get_logger
from indextts_installer.web.core.state import HostState, get_host_state

logger = get_logger("indextts.web.api.install")
router = APIRouter()

ENTRY_SCRIPT = "main.py"


@router.post("/start", response_model=CommandMessage)
async def start_installation(
    request: InstallRequest, state: HostState = Depends(get_host_state)
):
    """Create the install directory and start installing in the background."""
    logger.info(f"Installation requested: {request.install_path}")

    if state.installing:
        raise HTTPException(status_code=409, detail="Installation already in progress")

    install_path = Path(request.install_path).expanduser()
    try:
        install_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise HTTPException(
            status_code=400, detail=f"Failed to create install directory: {e}"
        )

    try:
        await state.start_installation(request)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return CommandMessage(message="Installation started")


@router.get("/progress", response_model=ProgressReport)
async def get_installation_progress(state: HostState = Depends(get_host_state)):
    """Current installation progress."""
    return await state.get_progress()


@router.post("/launch", response_model=CommandMessage)
async def launch_application(
    body: InstallPath, state: HostState = Depends(get_host_state)
):
    """Launch the installed IndexTTS application."""
    app_path = Path(body.install_path).expanduser()

    if not app_path.exists():
        raise HTTPException(status_code=404, detail="Installation path does not exist")

    if not (app_path / ENTRY_SCRIPT).exists():
        raise HTTPException(
            status_code=404,
            detail=f"IndexTTS {ENTRY_SCRIPT} not found in installation directory",
        )

    try:
        _spawn([state.settings.python_executable, ENTRY_SCRIPT], cwd=app_path)
    except OSError as e:
        logger.error(f"Failed to launch IndexTTS: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to launch IndexTTS: {e}")

    logger.info(f"IndexTTS launched from {app_path}")
    return CommandMessage(message="IndexTTS launched successfully")


@router.post("/open-directory", response_model=CommandMessage)
async def open_install_directory(body: InstallPath):
    """Open the install directory in the platform file manager."""
    path = Path(body.install_path).expanduser()

    if not path.exists():
        raise HTTPException(
            status_code=404, detail="Installation directory does not exist"
        )

    try:
        _open_in_file_manager(path)
    except OSError as e:
        logger.error(f"Failed to open directory {path}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to open directory: {e}")

    return CommandMessage(message=str(path))


# ===== Internal helper functions =====


def _spawn(args: list[str], cwd: Path | None = None) -> subprocess.Popen:
    """Start a detached process without waiting for it."""
    logger.debug(f"Spawning: {' '.join(args)}")
    return subprocess.Popen(
        args,
        cwd=str(cwd) if cwd else None,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def _open_in_file_manager(path: Path) -> None:
    system = platform.system()
    if system == "Windows":
        os.startfile(str(path))  # type: ignore[attr-defined]
    elif system == "Darwin":
        _spawn(["open", str(path)])
    else:
        _spawn(["xdg-open", str(path)])
