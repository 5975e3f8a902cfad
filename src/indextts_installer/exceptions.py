"""
Installer Exception Definitions

Each layer raises its own error types; all of them derive from InstallerError.
"""


class InstallerError(Exception):
    """Base exception for all installer operations."""

    pass


class ConfigError(InstallerError):
    """
    Raised when the installer configuration file is unreadable or invalid.

    @context: Settings loading
    """

    pass


class HostCommandError(InstallerError):
    """
    Raised when a host command fails or the host cannot be reached.

    The message is the host-supplied error text and is surfaced verbatim.

    @context: Host command interface
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class InstallStepError(InstallerError):
    """
    Raised by the host-side runner when an installation step fails.

    @context: Installation runner
    """

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step
        self.message = message
