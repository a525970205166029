"""
devsim Data Models

Core data models for the devsim library.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class DeviceState(Enum):
    """Boot state reported by simctl."""
    BOOTED = "Booted"
    SHUTDOWN = "Shutdown"
    BOOTING = "Booting"
    SHUTTING_DOWN = "Shutting Down"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DeviceState":
        for state in cls:
            if state.value == value:
                return state
        return cls.UNKNOWN


@dataclass(frozen=True)
class Device:
    """
    An iOS simulator as listed by `xcrun simctl list devices --json`.

    Attributes:
        name: Display name (e.g. "iPhone 13")
        udid: Unique device identifier
        state: Current boot state
        runtime: Runtime identifier (e.g. "com.apple.CoreSimulator.SimRuntime.iOS-15-0")
        is_available: Whether simctl considers the device usable
    """
    name: str
    udid: str
    state: DeviceState = DeviceState.UNKNOWN
    runtime: Optional[str] = None
    is_available: bool = True

    @property
    def is_booted(self) -> bool:
        return self.state is DeviceState.BOOTED

    @property
    def os_version(self) -> Optional[str]:
        """OS version parsed from the runtime id ("iOS-15-0" -> "15.0")."""
        if not self.runtime:
            return None
        tail = self.runtime.rsplit(".", 1)[-1]
        parts = tail.split("-")
        if len(parts) < 2:
            return None
        return ".".join(parts[1:])

    @classmethod
    def from_simctl(cls, d: Dict[str, Any], runtime: Optional[str] = None) -> "Device":
        """Build a Device from one entry of simctl's JSON device list."""
        return cls(
            name=d.get("name", "Unknown"),
            udid=d["udid"],
            state=DeviceState.parse(d.get("state")),
            runtime=runtime,
            is_available=bool(d.get("isAvailable", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "udid": self.udid,
            "state": self.state.value,
            "runtime": self.runtime,
            "is_available": self.is_available,
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.udid})"


@dataclass(frozen=True)
class SimctlResult:
    args: List[str]
    stdout: str
    stderr: str
    returncode: int

    @property
    def status(self) -> int:
        return self.returncode

    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class DevMenuSettings:
    """
    Developer menu toggles for an app running on a simulator.

    Attributes:
        motion_gesture_enabled: Shake to open the menu
        touch_gesture_enabled: Three-finger long press to open the menu
        key_commands_enabled: Keyboard shortcuts (Cmd+D) open the menu
        shows_at_launch: Show the menu every time the app launches
        is_onboarding_finished: The onboarding screen was dismissed
    """
    motion_gesture_enabled: bool = True
    touch_gesture_enabled: bool = True
    key_commands_enabled: bool = True
    shows_at_launch: bool = False
    is_onboarding_finished: bool = False

    # serialized key -> attribute
    KEYS = {
        "motionGestureEnabled": "motion_gesture_enabled",
        "touchGestureEnabled": "touch_gesture_enabled",
        "keyCommandsEnabled": "key_commands_enabled",
        "showsAtLaunch": "shows_at_launch",
        "isOnboardingFinished": "is_onboarding_finished",
    }

    def serialize(self) -> Dict[str, bool]:
        return {key: getattr(self, attr) for key, attr in self.KEYS.items()}

    def update(self, values: Dict[str, Any]) -> List[str]:
        """
        Apply the boolean entries of `values`.

        Unknown keys and non-bool values are ignored.

        Returns:
            Serialized keys whose value actually changed
        """
        changed = []
        for key, value in values.items():
            attr = self.KEYS.get(key)
            if attr is None or not isinstance(value, bool):
                continue
            if getattr(self, attr) != value:
                setattr(self, attr, value)
                changed.append(key)
        return changed
