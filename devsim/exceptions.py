"""
devsim Exceptions

Custom exceptions for the devsim library.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SimctlResult


class DevsimError(Exception):
    """Base exception for all devsim errors."""
    pass


class CommandError(DevsimError):
    """
    A user-facing error with a stable code.

    Attributes:
        code: Machine-readable error code (e.g. "APP_NOT_INSTALLED")
        message: Human-readable message
    """

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or code
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class SimctlError(CommandError):
    """Raised when an `xcrun simctl` invocation fails."""

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        result: Optional["SimctlResult"] = None,
    ):
        self.result = result
        super().__init__(code, message)

    @property
    def status(self) -> Optional[int]:
        """Return code of the failed call, if it ran at all."""
        return self.result.returncode if self.result else None

    @property
    def stderr(self) -> str:
        return self.result.stderr if self.result else ""


class DeviceNotFoundError(CommandError):
    """Raised when no simulator matches the requested udid or name."""

    def __init__(self, query: Optional[str] = None):
        self.query = query
        if query:
            msg = f"No iOS simulator found matching '{query}'"
        else:
            msg = "No booted iOS simulator found. Start one with `xcrun simctl boot <udid>`."
        super().__init__("NO_DEVICE", msg)


class PbxprojParseError(DevsimError, ValueError):
    """Raised when a project.pbxproj file cannot be parsed."""
    pass
