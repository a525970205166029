"""
devsim Utilities

Shared utility functions for the devsim library.
"""

import logging
import re
import subprocess
from typing import Optional


logger = logging.getLogger(__name__)

# RFC 3986 scheme followed by its colon
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):")

SIMULATOR_APP = "Simulator"


def get_url_scheme(url: str) -> Optional[str]:
    """
    Return the scheme of `url` if it parses as an absolute URL.

    Any `scheme:` prefix counts, so "mailto:dev@example.com" and "exp://" are
    URLs. Strings such as "@foobar" or "com.example.app" have no scheme and
    return None.

    Args:
        url: Candidate URL

    Returns:
        Lower-cased scheme, or None if `url` has no scheme
    """
    match = _SCHEME_RE.match(url.strip())
    if not match:
        return None
    return match.group(1).lower()


def activate_simulator_window(timeout: float = 10.0) -> bool:
    """
    Bring the Simulator app to the foreground.

    Launches Simulator.app if needed, then asks System Events to focus it.

    Returns:
        True if both steps succeeded, False otherwise
    """
    commands = [
        ["open", "-a", SIMULATOR_APP],
        [
            "osascript", "-e",
            f'tell application "System Events" to set frontmost of process "{SIMULATOR_APP}" to true',
        ],
    ]
    for cmd in commands:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            logger.warning("Could not activate the Simulator window: %s", e)
            return False
        if result.returncode != 0:
            logger.warning(
                "Could not activate the Simulator window: %s",
                result.stderr.strip() or f"{cmd[0]} exited with {result.returncode}",
            )
            return False
    return True
