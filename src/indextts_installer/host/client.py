"""
Host command interface.

The installer never performs installation work itself. Every privileged
operation is a request/response command against the host process, reached
through a HostClient. All failures surface as HostCommandError carrying the
host's message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from indextts_installer.exceptions import HostCommandError
from indextts_installer.schemas import (
    CommandMessage,
    InstallPath,
    InstallRequest,
    MachineProfile,
    ProgressReport,
)
from indextts_installer.utils.logger import get_logger

logger = get_logger("indextts.host.client")

ModelT = TypeVar("ModelT", bound=BaseModel)


class HostClient(ABC):
    """Asynchronous command interface to the host process."""

    @abstractmethod
    async def probe(self) -> None:
        """No-op command used to find out whether the host is reachable."""

    @abstractmethod
    async def get_default_install_path(self) -> str: ...

    @abstractmethod
    async def get_machine_profile(self) -> MachineProfile: ...

    @abstractmethod
    async def start_installation(self, request: InstallRequest) -> str:
        """Submit an installation request; returns the host acknowledgement."""

    @abstractmethod
    async def get_installation_progress(self) -> ProgressReport: ...

    @abstractmethod
    async def launch_application(self, install_path: str) -> str:
        """Launch the installed application; returns the host's message."""

    @abstractmethod
    async def open_install_directory(self, install_path: str) -> None: ...

    async def aclose(self) -> None:
        """Release any resources held by the client."""


class HttpHostClient(HostClient):
    """HostClient talking to the host service over HTTP.

    Args:
        base_url: Root URL of the host service, e.g. "http://127.0.0.1:6658"
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (used to plug in test transports)
    """

    API_PREFIX = "/api/v1"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "HttpHostClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def probe(self) -> None:
        await self._invoke("GET", "/health")

    async def get_default_install_path(self) -> str:
        data = await self._invoke("GET", f"{self.API_PREFIX}/system/default-install-path")
        return self._parse(InstallPath, data).install_path

    async def get_machine_profile(self) -> MachineProfile:
        data = await self._invoke("GET", f"{self.API_PREFIX}/system/profile")
        return self._parse(MachineProfile, data)

    async def start_installation(self, request: InstallRequest) -> str:
        data = await self._invoke(
            "POST",
            f"{self.API_PREFIX}/install/start",
            json=request.model_dump(mode="json"),
        )
        return self._parse(CommandMessage, data).message

    async def get_installation_progress(self) -> ProgressReport:
        data = await self._invoke("GET", f"{self.API_PREFIX}/install/progress")
        return self._parse(ProgressReport, data)

    async def launch_application(self, install_path: str) -> str:
        body = InstallPath(install_path=install_path)
        data = await self._invoke(
            "POST", f"{self.API_PREFIX}/install/launch", json=body.model_dump()
        )
        return self._parse(CommandMessage, data).message

    async def open_install_directory(self, install_path: str) -> None:
        body = InstallPath(install_path=install_path)
        await self._invoke(
            "POST", f"{self.API_PREFIX}/install/open-directory", json=body.model_dump()
        )

    async def _invoke(self, method: str, path: str, json: Any = None) -> Any:
        """Send one command and return the decoded JSON body."""
        logger.debug(f"{method} {path}")
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.debug(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise HostCommandError(str(e) or type(e).__name__) from e

        if response.is_error:
            raise HostCommandError(
                self._error_detail(response), status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise HostCommandError(f"Invalid response from host: {e}") from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            detail = None
        if isinstance(detail, str) and detail:
            return detail
        return response.text or f"Host returned HTTP {response.status_code}"

    @staticmethod
    def _parse(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise HostCommandError(f"Invalid response from host: {e}") from e
