"""Machine capability snapshot reported by the host."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MachineProfile(BaseModel):
    """Immutable snapshot of the host machine.

    Memory and disk figures are in bytes. A missing ``python_version`` or
    ``git_version`` means the tool was not found on the host.
    """

    os: str
    os_version: str
    cpu_name: str
    cpu_cores: int = Field(ge=0)
    total_memory: int = Field(ge=0)
    available_memory: int = Field(ge=0)
    total_disk_space: int = Field(ge=0)
    available_disk_space: int = Field(ge=0)
    gpu_info: list[str] = Field(default_factory=list)
    python_version: str | None = None
    git_version: str | None = None
    cuda_available: bool = False

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "os": "Darwin",
                "os_version": "14.5",
                "cpu_name": "Apple M2",
                "cpu_cores": 8,
                "total_memory": 17179869184,
                "available_memory": 6442450944,
                "total_disk_space": 494384795648,
                "available_disk_space": 120259084288,
                "gpu_info": ["Apple M2"],
                "python_version": "Python 3.11.9",
                "git_version": "git version 2.39.3",
                "cuda_available": False,
            }
        }
