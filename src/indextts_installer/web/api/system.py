"""System detection API endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException

from indextts_installer.schemas import InstallPath, MachineProfile
from indextts_installer.utils.logger import get_logger
from indextts_installer.utils.system_info import (
    collect_machine_profile,
    default_install_path,
)

logger = get_logger("indextts.web.api.system")
router = APIRouter()


@router.get("/default-install-path", response_model=InstallPath)
async def get_default_install_path():
    """Suggested install location on this machine."""
    return InstallPath(install_path=default_install_path())


@router.get("/profile", response_model=MachineProfile)
async def get_machine_profile():
    """Take a fresh snapshot of the machine's capabilities."""
    try:
        return await asyncio.to_thread(collect_machine_profile)
    except Exception as e:
        logger.error(f"Failed to collect machine profile: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to collect system info: {e}")
