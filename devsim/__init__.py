"""
devsim - iOS Simulator Tooling for App Development

A library for driving apps on iOS simulators through `xcrun simctl`.

Key Features:
    - Launch installed apps and open URLs on a simulator
    - Version lookup of the installed launcher app
    - Bundle identifier resolution from Xcode projects, Info.plist or app.json
    - Developer menu settings stored in the simulator's user defaults

Basic Usage:
    from devsim import AppleDeviceManager, resolve_app_id

    manager = AppleDeviceManager.resolve("iPhone 13")
    manager.launch_application_id(resolve_app_id("./my-project"))
    manager.open_url("exp://127.0.0.1:8081")

Environment Variables:
    DEVSIM_XCRUN           - xcrun executable (default: xcrun)
    DEVSIM_DEFAULT_DEVICE  - Simulator udid or name used when none is given
    DEVSIM_SIMCTL_TIMEOUT  - Seconds to wait for each simctl call
"""

__version__ = "0.1.0"

# Core models
from .models import Device, DeviceState, SimctlResult, DevMenuSettings

# Configuration
from .config import (
    DevsimConfig,
    get_config,
    set_config,
    reset_config,
    ENV_XCRUN,
    ENV_DEFAULT_DEVICE,
    ENV_SIMCTL_TIMEOUT,
)

# Exceptions
from .exceptions import (
    DevsimError,
    CommandError,
    SimctlError,
    DeviceNotFoundError,
    PbxprojParseError,
)

# Bundle identifier resolution
from .pbxproj import XcodeProject, find_xcode_project
from .resolve_app_id import resolve_app_id

# Device management
from .device_manager import AppleDeviceManager
from .devmenu import DevMenuController

__all__ = [
    # Version
    "__version__",

    # Core models
    "Device",
    "DeviceState",
    "SimctlResult",
    "DevMenuSettings",

    # Configuration
    "DevsimConfig",
    "get_config",
    "set_config",
    "reset_config",
    "ENV_XCRUN",
    "ENV_DEFAULT_DEVICE",
    "ENV_SIMCTL_TIMEOUT",

    # Exceptions
    "DevsimError",
    "CommandError",
    "SimctlError",
    "DeviceNotFoundError",
    "PbxprojParseError",

    # Bundle identifier resolution
    "XcodeProject",
    "find_xcode_project",
    "resolve_app_id",

    # Device management
    "AppleDeviceManager",
    "DevMenuController",
]
