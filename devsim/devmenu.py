"""
devsim Developer Menu

Reads and writes the developer-menu settings of an app running on a
simulator. Settings live in the app's user-defaults domain.
"""

import logging
from typing import Any, Dict, Optional

from . import simctl
from .exceptions import CommandError, SimctlError
from .models import Device, DevMenuSettings


logger = logging.getLogger(__name__)

ERR_SETTINGS = "ERR_DEVMENU_SETTINGS_FAILED"

# serialized key -> user-defaults key
DEFAULTS_KEYS = {
    "motionGestureEnabled": "EXDevMenuMotionGestureEnabled",
    "touchGestureEnabled": "EXDevMenuTouchGestureEnabled",
    "keyCommandsEnabled": "EXDevMenuKeyCommandsEnabled",
    "showsAtLaunch": "EXDevMenuShowsAtLaunch",
    "isOnboardingFinished": "EXDevMenuIsOnboardingFinished",
}


class DevMenuController:
    """
    Dev-menu settings of one app on one simulator.

    Example:
        menu = DevMenuController(device, "com.example.app")
        menu.set_settings({"showsAtLaunch": True})
        menu.get_settings().serialize()
    """

    def __init__(self, device: Optional[Device], app_id: str):
        self.device = device
        self.app_id = app_id

    def constants(self) -> Dict[str, Any]:
        # Simulators always have a hardware keyboard available
        return {"doesDeviceSupportKeyCommands": True}

    def get_settings(self) -> DevMenuSettings:
        """
        Current settings; keys the app never stored keep their defaults.

        Raises:
            CommandError: ERR_DEVMENU_SETTINGS_FAILED if the defaults cannot be read
        """
        try:
            stored = simctl.read_defaults(self.device, self.app_id)
        except SimctlError as e:
            raise CommandError(
                ERR_SETTINGS,
                f"Could not read dev menu settings of {self.app_id}: {e.message}",
            ) from e

        settings = DevMenuSettings()
        settings.update({
            key: stored[defaults_key]
            for key, defaults_key in DEFAULTS_KEYS.items()
            if defaults_key in stored
        })
        return settings

    def set_settings(self, values: Dict[str, Any]) -> DevMenuSettings:
        """
        Apply boolean settings; other keys and non-bool values are ignored.

        Only changed keys are written back.

        Returns:
            The settings after the update
        """
        settings = self.get_settings()
        changed = settings.update(values)
        for key in changed:
            try:
                simctl.write_default(
                    self.device, self.app_id, DEFAULTS_KEYS[key], settings.serialize()[key]
                )
            except SimctlError as e:
                raise CommandError(
                    ERR_SETTINGS,
                    f"Could not write dev menu setting {key} of {self.app_id}: {e.message}",
                ) from e
        if changed:
            logger.info("Updated dev menu settings of %s: %s", self.app_id, ", ".join(changed))
        return settings

    def set_onboarding_finished(self, finished: bool) -> DevMenuSettings:
        return self.set_settings({"isOnboardingFinished": bool(finished)})
