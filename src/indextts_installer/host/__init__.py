"""Client side of the host command interface."""

from .client import HostClient, HttpHostClient

__all__ = ["HostClient", "HttpHostClient"]
