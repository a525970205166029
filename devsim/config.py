"""
devsim Configuration

Environment variable handling for the simulator tooling.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


# Environment variable names
ENV_XCRUN = "DEVSIM_XCRUN"
ENV_DEFAULT_DEVICE = "DEVSIM_DEFAULT_DEVICE"
ENV_SIMCTL_TIMEOUT = "DEVSIM_SIMCTL_TIMEOUT"

# The launcher client app that opens project URLs
LAUNCHER_APP_ID = "host.exp.Exponent"
LAUNCHER_APP_NAME = "Expo Go"
LAUNCHER_SCHEMES = ("exp", "exps")

DEFAULT_SIMCTL_TIMEOUT = 60.0
DEFAULT_RUN_COMMAND = "npx expo run:ios"


@dataclass
class DevsimConfig:
    """
    Global configuration for devsim.

    Attributes:
        xcrun: Path or name of the xcrun executable (from DEVSIM_XCRUN)
        default_device: udid or name picked when no device is given
        simctl_timeout: Seconds to wait for a single simctl call
        launcher_app_id: Bundle identifier of the launcher app
        launcher_app_name: Display name of the launcher app
        launcher_schemes: URL schemes routed to the launcher app
        run_command: Command suggested when an app is not installed
    """
    xcrun: str = "xcrun"
    default_device: Optional[str] = None
    simctl_timeout: float = DEFAULT_SIMCTL_TIMEOUT
    launcher_app_id: str = LAUNCHER_APP_ID
    launcher_app_name: str = LAUNCHER_APP_NAME
    launcher_schemes: Tuple[str, ...] = field(default=LAUNCHER_SCHEMES)
    run_command: str = DEFAULT_RUN_COMMAND

    @classmethod
    def from_environment(cls) -> "DevsimConfig":
        """
        Load configuration from environment variables.

        Environment Variables:
            DEVSIM_XCRUN: xcrun executable
            DEVSIM_DEFAULT_DEVICE: Default simulator udid or name
            DEVSIM_SIMCTL_TIMEOUT: Timeout in seconds for simctl calls
        """
        config = cls()

        if xcrun := os.environ.get(ENV_XCRUN):
            config.xcrun = os.path.expanduser(xcrun)

        config.default_device = os.environ.get(ENV_DEFAULT_DEVICE) or None

        if timeout := os.environ.get(ENV_SIMCTL_TIMEOUT):
            try:
                config.simctl_timeout = float(timeout)
            except ValueError:
                raise ValueError(
                    f"{ENV_SIMCTL_TIMEOUT} must be a number of seconds, got {timeout!r}"
                )
            if not config.simctl_timeout > 0:
                raise ValueError(
                    f"{ENV_SIMCTL_TIMEOUT} must be a positive number of seconds, got {timeout!r}"
                )

        return config

    def is_launcher_scheme(self, scheme: str) -> bool:
        return scheme.lower() in self.launcher_schemes


# Global singleton
_config: Optional[DevsimConfig] = None


def get_config() -> DevsimConfig:
    """
    Get the global configuration singleton.

    Returns:
        DevsimConfig instance loaded from environment
    """
    global _config
    if _config is None:
        _config = DevsimConfig.from_environment()
    return _config


def reset_config() -> None:
    """
    Reset the global configuration singleton.

    Useful for testing or when environment variables change.
    """
    global _config
    _config = None


def set_config(config: DevsimConfig) -> None:
    """
    Set the global configuration singleton.

    Args:
        config: Configuration to use
    """
    global _config
    _config = config
