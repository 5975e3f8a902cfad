"""
Machine profile collection for the host service.

Gathers OS, CPU, memory, disk, GPU and tool information into a
MachineProfile. Every probe degrades to a neutral value when the underlying
command or file is unavailable.
"""

from __future__ import annotations

import os
import platform
import shutil
import subprocess
from pathlib import Path

import psutil

from indextts_installer.schemas import MachineProfile
from indextts_installer.utils.logger import get_logger

logger = get_logger("indextts.system_info")

UNKNOWN = "Unknown"
UNKNOWN_GPU = "Unknown GPU"
FALLBACK_INSTALL_PATH = "/Users/Shared/IndexTTS"


def default_install_path() -> str:
    """Default install location: ~/Documents/IndexTTS, or a shared fallback."""
    home = os.environ.get("HOME")
    if not home:
        return FALLBACK_INSTALL_PATH
    return str(Path(home) / "Documents" / "IndexTTS")


def _run(args: list[str], timeout: int = 10) -> subprocess.CompletedProcess | None:
    try:
        logger.debug(f"Executing: {' '.join(args)}")
        return subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
        logger.debug(f"{args[0]} failed: {type(e).__name__}: {e}")
        return None


def get_command_version(command: str, *args: str) -> str | None:
    """Return the trimmed version output of a command, or None if unavailable."""
    result = _run([command, *args])
    if result is None or result.returncode != 0:
        return None
    output = (result.stdout or result.stderr).strip()
    return output or None


def get_python_version() -> str | None:
    return get_command_version("python3", "--version") or get_command_version(
        "python", "--version"
    )


def get_git_version() -> str | None:
    return get_command_version("git", "--version")


def check_cuda_availability() -> bool:
    result = _run(["nvidia-smi"])
    return result is not None and result.returncode == 0


def get_os_info() -> tuple[str, str]:
    system = platform.system() or UNKNOWN
    if system == "Darwin":
        version = platform.mac_ver()[0]
    else:
        version = platform.release()
    return system, version or UNKNOWN


def get_cpu_name() -> str:
    system = platform.system()

    if system == "Linux":
        try:
            with open("/proc/cpuinfo", "r") as f:
                for line in f:
                    if line.startswith("model name"):
                        return line.split(":", 1)[1].strip()
        except OSError as e:
            logger.debug(f"Cannot read /proc/cpuinfo: {e}")
    elif system == "Darwin":
        result = _run(["sysctl", "-n", "machdep.cpu.brand_string"], timeout=5)
        if result is not None and result.stdout.strip():
            return result.stdout.strip()

    return platform.processor() or UNKNOWN


def get_gpu_info() -> list[str]:
    """List graphics adapter names; never empty."""
    gpus: list[str] = []

    if platform.system() == "Darwin":
        result = _run(["system_profiler", "SPDisplaysDataType"])
        if result is not None:
            for line in result.stdout.splitlines():
                line = line.strip()
                if line.startswith("Chipset Model:"):
                    gpus.append(line.split(":", 1)[1].strip())
    else:
        result = _run(["nvidia-smi", "--query-gpu=name", "--format=csv,noheader"])
        if result is not None and result.returncode == 0:
            gpus.extend(line.strip() for line in result.stdout.splitlines() if line.strip())

    return gpus or [UNKNOWN_GPU]


def get_disk_space() -> tuple[int, int]:
    """Total and available bytes summed over all mounted physical disks."""
    total = available = 0
    seen_devices = set()

    for partition in psutil.disk_partitions(all=False):
        if partition.device in seen_devices:
            continue
        try:
            usage = shutil.disk_usage(partition.mountpoint)
        except OSError as e:
            logger.debug(f"Skipping {partition.mountpoint}: {e}")
            continue
        seen_devices.add(partition.device)
        total += usage.total
        available += usage.free

    return total, available


def collect_machine_profile() -> MachineProfile:
    """Take a fresh snapshot of the machine."""
    logger.info("Collecting machine profile")

    os_name, os_version = get_os_info()
    memory = psutil.virtual_memory()
    total_disk, available_disk = get_disk_space()

    return MachineProfile(
        os=os_name,
        os_version=os_version,
        cpu_name=get_cpu_name(),
        cpu_cores=psutil.cpu_count(logical=True) or os.cpu_count() or 0,
        total_memory=memory.total,
        available_memory=memory.available,
        total_disk_space=total_disk,
        available_disk_space=available_disk,
        gpu_info=get_gpu_info(),
        python_version=get_python_version(),
        git_version=get_git_version(),
        cuda_available=check_cuda_availability(),
    )
