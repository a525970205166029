"""
devsim Simulator Control

Thin wrappers around `xcrun simctl`. Every function takes a Device (or None
for the "booted" alias) and returns plain values, raising SimctlError for
failures the caller cannot recover from.
"""

import json
import logging
import plistlib
import re
import shlex
import subprocess
from typing import Any, Dict, List, Optional, Sequence, Union
from xml.parsers.expat import ExpatError

from .config import get_config
from .exceptions import SimctlError
from .models import Device, SimctlResult


logger = logging.getLogger(__name__)

BOOTED = "booted"

# simctl launch exits with 4 when the bundle id is not installed
STATUS_APP_NOT_INSTALLED = 4
# simctl openurl exits with 194 when no installed app can handle the URL
STATUS_NO_URL_HANDLER = 194

_NOT_FOUND_RE = re.compile(r"No such file or directory")
_SHUTDOWN_RE = re.compile(r"Unable to lookup in current state: Shut")
_ALREADY_BOOTED_RE = re.compile(r"Unable to boot device in current state: Booted")
_NO_DOMAIN_RE = re.compile(r"Domain .* does not exist")

DefaultValue = Union[bool, int, float, str]


def resolve_id(device: Optional[Device]) -> str:
    """The identifier simctl should receive for `device`."""
    return device.udid if device else BOOTED


def simctl(args: Sequence[str], timeout: Optional[float] = None) -> SimctlResult:
    """
    Run `xcrun simctl <args>` and capture its output.

    Non-zero exit codes are returned, not raised; callers decide what a
    given status means.

    Raises:
        SimctlError: If xcrun is missing or the call times out
    """
    config = get_config()
    if timeout is None:
        timeout = config.simctl_timeout
    cmd = [config.xcrun, "simctl", *args]
    logger.debug("Running: %s", shlex.join(cmd))

    try:
        process = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise SimctlError(
            "XCRUN_NOT_FOUND",
            f"{config.xcrun} not found. Install the Xcode Command Line Tools: xcode-select --install",
        )
    except subprocess.TimeoutExpired:
        raise SimctlError(
            "SIMCTL_TIMEOUT",
            f"Timed out after {timeout}s waiting for: {shlex.join(cmd)}",
        )

    result = SimctlResult(
        args=cmd,
        stdout=process.stdout or "",
        stderr=process.stderr or "",
        returncode=process.returncode,
    )
    if not result.ok():
        logger.debug("simctl exited with %s: %s", result.returncode, result.stderr.strip())
    return result


def _check(result: SimctlResult, action: str) -> SimctlResult:
    if result.ok():
        return result
    detail = result.stderr.strip() or result.stdout.strip() or "Unknown error"
    raise SimctlError(
        "SIMCTL_FAILED",
        f"Failed to {action} (status {result.returncode}): {detail}",
        result,
    )


def list_devices() -> List[Device]:
    """
    List every simulator known to simctl.

    Returns:
        Devices in the order simctl reports them, grouped by runtime
    """
    result = _check(simctl(["list", "devices", "--json"]), "list simulators")
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise SimctlError(
            "SIMCTL_FAILED",
            f"Could not parse simctl device list: {e}",
            result,
        )

    devices = []
    for runtime, entries in data.get("devices", {}).items():
        for entry in entries:
            if "udid" not in entry:
                continue
            devices.append(Device.from_simctl(entry, runtime=runtime))
    return devices


def get_booted_devices() -> List[Device]:
    return [d for d in list_devices() if d.is_booted]


def boot_device(device: Device) -> bool:
    """
    Boot a simulator.

    Returns:
        True if the device was booted, False if it was already running
    """
    result = simctl(["boot", device.udid])
    if _ALREADY_BOOTED_RE.search(result.stderr):
        return False
    _check(result, f"boot {device}")
    logger.info("Booted %s", device)
    return True


def get_container_path(device: Optional[Device], app_id: str) -> Optional[str]:
    """
    Path to the installed .app bundle of `app_id`.

    Returns:
        The container path, or None when the app is not installed
    """
    result = simctl(["get_app_container", resolve_id(device), app_id])
    if result.ok():
        return result.stdout.strip() or None
    if _NOT_FOUND_RE.search(result.stderr):
        return None
    _check(result, f"get the app container of {app_id}")
    return None


def open_app_id(device: Optional[Device], app_id: str) -> SimctlResult:
    """
    Launch an installed app by bundle identifier.

    Statuses other than "not installed" are returned for the caller to judge.

    Raises:
        SimctlError: APP_NOT_INSTALLED when simctl exits with status 4
    """
    result = simctl(["launch", resolve_id(device), app_id])
    if result.returncode == STATUS_APP_NOT_INSTALLED:
        raise SimctlError(
            "APP_NOT_INSTALLED",
            result.stderr.strip() or f"{app_id} is not installed",
            result,
        )
    return result


def open_url(device: Optional[Device], url: str, _retried: bool = False) -> SimctlResult:
    """
    Open a URL on the simulator with whichever app handles its scheme.

    If the simulator is caught mid-shutdown it is booted and the call retried
    once.

    Raises:
        SimctlError: If simctl fails; `status` carries the exit code
    """
    result = simctl(["openurl", resolve_id(device), url])
    if result.ok():
        return result

    if device and not _retried and _SHUTDOWN_RE.search(result.stderr):
        logger.info("%s is not booted, booting before opening %s", device, url)
        boot_device(device)
        return open_url(device, url, _retried=True)

    return _check(result, f"open {url}")


def install_app(device: Optional[Device], app_path: str) -> None:
    _check(simctl(["install", resolve_id(device), str(app_path)]), f"install {app_path}")


def uninstall_app(device: Optional[Device], app_id: str) -> None:
    _check(simctl(["uninstall", resolve_id(device), app_id]), f"uninstall {app_id}")


def read_defaults(device: Optional[Device], domain: str) -> Dict[str, Any]:
    """
    Export a user-defaults domain from inside the simulator.

    Returns:
        The domain as a dict; empty when the domain does not exist yet
    """
    result = simctl(["spawn", resolve_id(device), "defaults", "export", domain, "-"])
    if not result.ok():
        if _NO_DOMAIN_RE.search(result.stderr):
            return {}
        _check(result, f"read defaults for {domain}")

    try:
        return plistlib.loads(result.stdout.encode("utf-8"))
    except (ValueError, ExpatError) as e:
        raise SimctlError(
            "SIMCTL_FAILED",
            f"Could not parse defaults for {domain}: {e}",
            result,
        )


def _defaults_type_args(value: DefaultValue) -> List[str]:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return ["-bool", "YES" if value else "NO"]
    if isinstance(value, int):
        return ["-int", str(value)]
    if isinstance(value, float):
        return ["-float", repr(value)]
    return ["-string", str(value)]


def write_default(device: Optional[Device], domain: str, key: str, value: DefaultValue) -> None:
    """Write one typed user-defaults entry inside the simulator."""
    args = ["spawn", resolve_id(device), "defaults", "write", domain, key]
    args.extend(_defaults_type_args(value))
    _check(simctl(args), f"write default {domain} {key}")
