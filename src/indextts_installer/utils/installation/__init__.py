"""Installation utilities run by the host service."""

from .runner import InstallationRunner

__all__ = ["InstallationRunner"]
