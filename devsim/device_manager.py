"""
devsim Apple Device Manager

Main interface for driving apps on an iOS simulator.
"""

import logging
import re
from dataclasses import replace
from typing import Optional

from . import simctl
from .config import get_config, DevsimConfig
from .exceptions import CommandError, DeviceNotFoundError, SimctlError
from .models import Device, DeviceState
from .utils import activate_simulator_window, get_url_scheme


logger = logging.getLogger(__name__)

# Installed launcher bundles are named like "Exponent-2.23.2.tar.app"
_LAUNCHER_VERSION_RE = re.compile(r"Exponent-([0-9.]+).*\.app$")


class AppleDeviceManager:
    """
    Drives apps on one iOS simulator through `xcrun simctl`.

    The device handle is fixed for the lifetime of the manager. Every
    operation is a blocking call to simctl; failures surface as
    CommandError with a stable `code`.

    Example:
        manager = AppleDeviceManager.resolve("iPhone 13")
        manager.launch_application_id("com.example.app")
        manager.open_url("exp://127.0.0.1:8081")

    Environment Variables:
        DEVSIM_DEFAULT_DEVICE: Simulator picked by resolve() when none is given
    """

    def __init__(self, device: Device, config: Optional[DevsimConfig] = None):
        """
        Initialize the manager.

        Args:
            device: Simulator to drive
            config: Configuration (uses the global config if not provided)
        """
        self._device = device
        self._config = config or get_config()

    @classmethod
    def resolve(
        cls,
        device: Optional[str] = None,
        boot: bool = True,
        config: Optional[DevsimConfig] = None,
    ) -> "AppleDeviceManager":
        """
        Pick a simulator and return a manager for it.

        Args:
            device: udid or name; falls back to DEVSIM_DEFAULT_DEVICE,
                    then to the first booted simulator
            boot: Boot the chosen simulator if it is shut down
            config: Configuration (uses the global config if not provided)

        Raises:
            DeviceNotFoundError: If nothing matches
        """
        config = config or get_config()
        query = device or config.default_device
        devices = simctl.list_devices()

        if query:
            available = [d for d in devices if d.is_available]
            matches = [d for d in available if d.udid == query]
            if not matches:
                matches = [d for d in available if d.name == query]
            if not matches:
                raise DeviceNotFoundError(query)
            chosen = next((d for d in matches if d.is_booted), matches[0])
        else:
            booted = [d for d in devices if d.is_booted]
            if not booted:
                raise DeviceNotFoundError()
            chosen = booted[0]

        if boot and not chosen.is_booted:
            simctl.boot_device(chosen)
            chosen = replace(chosen, state=DeviceState.BOOTED)

        return cls(chosen, config=config)

    @property
    def device(self) -> Device:
        return self._device

    @property
    def name(self) -> str:
        return self._device.name

    @property
    def udid(self) -> str:
        return self._device.udid

    def get_app_version(self, app_id: str) -> Optional[str]:
        """
        Version of the installed launcher app.

        Only the launcher app is supported: its version is encoded in the
        name of its installed bundle.

        Args:
            app_id: Bundle identifier; must be the launcher app's

        Returns:
            Version string (e.g. "2.23.2"), or None if the app is not installed

        Raises:
            CommandError: UNSUPPORTED_APP for any other bundle identifier
        """
        if app_id != self._config.launcher_app_id:
            raise CommandError(
                "UNSUPPORTED_APP",
                f"Only {self._config.launcher_app_name} ({self._config.launcher_app_id}) "
                f"is supported for version lookups, got \"{app_id}\"",
            )

        local_path = simctl.get_container_path(self._device, app_id)
        if not local_path:
            return None

        match = _LAUNCHER_VERSION_RE.search(local_path.rstrip("/"))
        if not match:
            logger.debug("No version in container path %s", local_path)
            return None
        return match.group(1).rstrip(".")

    def is_app_installed(self, app_id: str) -> bool:
        return simctl.get_container_path(self._device, app_id) is not None

    def launch_application_id(self, app_id: str) -> None:
        """
        Launch an installed app and bring the Simulator window forward.

        Raises:
            CommandError: APP_NOT_INSTALLED with a hint to build the app,
                          APP_OPEN_FAILED for any other failure
        """
        error_message = f"Couldn't open iOS app with ID \"{app_id}\" on device \"{self.name}\"."

        try:
            result = simctl.open_app_id(self._device, app_id)
        except CommandError as e:
            if e.code == "APP_NOT_INSTALLED":
                raise CommandError(
                    "APP_NOT_INSTALLED",
                    f"{error_message}\nThe app might not be installed, try installing it with: "
                    f"{self._config.run_command} -d {self.udid}",
                ) from e
            raise CommandError("APP_OPEN_FAILED", f"{error_message}\n{e.message}") from e
        except Exception as e:
            raise CommandError("APP_OPEN_FAILED", f"{error_message}\n{e}") from e

        if not result.ok():
            detail = result.stderr.strip()
            raise CommandError(
                "APP_OPEN_FAILED",
                f"{error_message}\n{detail}" if detail else error_message,
            )

        logger.info("Opened %s on %s", app_id, self._device)
        self.activate_window()

    def open_url(self, url: str) -> None:
        """
        Open a URL on the simulator.

        Strings without a `scheme:` prefix are treated as bundle identifiers
        and launched instead.

        Raises:
            CommandError: APP_NOT_INSTALLED if the launcher app is missing,
                          NO_URL_HANDLER if no app can open the URL
        """
        scheme = get_url_scheme(url)
        if scheme is None:
            return self.launch_application_id(url)

        if self._config.is_launcher_scheme(scheme):
            return self._open_launcher_url(url)

        try:
            simctl.open_url(self._device, url)
        except SimctlError as e:
            if e.status == simctl.STATUS_NO_URL_HANDLER:
                raise CommandError(
                    "NO_URL_HANDLER",
                    f"No app installed on \"{self.name}\" can open \"{url}\"",
                ) from e
            raise

    def _open_launcher_url(self, url: str) -> None:
        try:
            simctl.open_url(self._device, url)
        except SimctlError as e:
            if e.status == simctl.STATUS_NO_URL_HANDLER:
                raise CommandError(
                    "APP_NOT_INSTALLED",
                    f"{self._config.launcher_app_name} is not installed on \"{self.name}\", "
                    f"install it before opening \"{url}\"",
                ) from e
            raise
        logger.info("Opened %s in %s on %s", url, self._config.launcher_app_name, self._device)

    def activate_window(self) -> None:
        """Bring the Simulator app to the foreground. Failures are only logged."""
        activate_simulator_window()

    def install_app(self, app_path: str) -> None:
        simctl.install_app(self._device, app_path)
        logger.info("Installed %s on %s", app_path, self._device)

    def uninstall_app(self, app_id: str) -> None:
        simctl.uninstall_app(self._device, app_id)
        logger.info("Uninstalled %s from %s", app_id, self._device)

    def __repr__(self) -> str:
        return f"AppleDeviceManager({self._device})"
