"""Installation request and progress models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

ModelVariant = Literal["standard", "large", "small"]
MODEL_VARIANTS: tuple[str, ...] = ("standard", "large", "small")


class InstallRequest(BaseModel):
    """Request to install IndexTTS on the host."""

    install_path: str = Field(min_length=1)
    model_type: ModelVariant = "standard"
    use_gpu: bool = False

    class Config:
        validate_assignment = True
        json_schema_extra = {
            "example": {
                "install_path": "/Users/Shared/IndexTTS",
                "model_type": "standard",
                "use_gpu": False,
            }
        }


class ProgressReport(BaseModel):
    """Installation progress as reported by the host.

    Both flags false means the installation is still running.
    """

    step: str = "idle"
    progress: float = Field(0, ge=0, le=100)
    message: str = ""
    is_complete: bool = False
    has_error: bool = False

    @model_validator(mode="after")
    def _check_flags(self) -> "ProgressReport":
        if self.is_complete and self.has_error:
            raise ValueError("is_complete and has_error cannot both be set")
        return self

    @property
    def finished(self) -> bool:
        return self.is_complete or self.has_error


class InstallPath(BaseModel):
    """An install path, as sent to and returned by host commands."""

    install_path: str = Field(min_length=1)


class CommandMessage(BaseModel):
    """Plain acknowledgement returned by host commands."""

    message: str
