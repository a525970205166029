"""
devsim Xcode Project Reader

Reads `project.pbxproj` files (OpenStep property lists) and answers the
few questions devsim asks of them: application targets, their build
settings, bundle identifier and Info.plist location.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import PbxprojParseError


APPLICATION_PRODUCT_TYPE = "com.apple.product-type.application"
PREFERRED_CONFIGURATIONS = ("Release", "Debug")

_UNQUOTED_RE = re.compile(r"[A-Za-z0-9_$/:.\-+]+")
_VARIABLE_RE = re.compile(r"\$[({]([A-Za-z0-9_]+)(?::([A-Za-z0-9_,]+))?[)}]")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "'": "'"}


class _Parser:
    """Recursive-descent parser for the OpenStep plist subset used by Xcode."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str) -> PbxprojParseError:
        line = self.text.count("\n", 0, self.pos) + 1
        return PbxprojParseError(f"{message} at line {line}")

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("Unterminated comment")
                self.pos = end + 2
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            else:
                break

    def expect(self, ch: str) -> None:
        self.skip()
        if not self.text.startswith(ch, self.pos):
            raise self.error(f"Expected '{ch}'")
        self.pos += 1

    def value(self) -> Any:
        self.skip()
        if self.pos >= len(self.text):
            raise self.error("Unexpected end of file")
        ch = self.text[self.pos]
        if ch == "{":
            return self.dictionary()
        if ch == "(":
            return self.array()
        if ch == '"' or ch == "'":
            return self.quoted()
        if ch == "<":
            return self.data()
        match = _UNQUOTED_RE.match(self.text, self.pos)
        if not match:
            raise self.error(f"Unexpected character {ch!r}")
        self.pos = match.end()
        return match.group(0)

    def dictionary(self) -> Dict[str, Any]:
        self.expect("{")
        result: Dict[str, Any] = {}
        while True:
            self.skip()
            if self.text.startswith("}", self.pos):
                self.pos += 1
                return result
            key = self.value()
            if not isinstance(key, str):
                raise self.error("Dictionary keys must be strings")
            self.expect("=")
            result[key] = self.value()
            self.expect(";")

    def array(self) -> List[Any]:
        self.expect("(")
        result: List[Any] = []
        while True:
            self.skip()
            if self.text.startswith(")", self.pos):
                self.pos += 1
                return result
            result.append(self.value())
            self.skip()
            if self.text.startswith(",", self.pos):
                self.pos += 1
            elif not self.text.startswith(")", self.pos):
                raise self.error("Expected ',' or ')'")

    def quoted(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(chars)
            if ch == "\\" and self.pos + 1 < len(self.text):
                nxt = self.text[self.pos + 1]
                chars.append(_ESCAPES.get(nxt, nxt))
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        raise self.error("Unterminated string")

    def data(self) -> bytes:
        end = self.text.find(">", self.pos)
        if end == -1:
            raise self.error("Unterminated data")
        hex_digits = re.sub(r"\s", "", self.text[self.pos + 1:end])
        self.pos = end + 1
        try:
            return bytes.fromhex(hex_digits)
        except ValueError:
            raise self.error("Invalid data literal")


def loads(text: str) -> Dict[str, Any]:
    """
    Parse the contents of a project.pbxproj file.

    Raises:
        PbxprojParseError: If the text is not a valid OpenStep plist
    """
    parser = _Parser(text)
    root = parser.value()
    parser.skip()
    if parser.pos != len(text):
        raise parser.error("Trailing content")
    if not isinstance(root, dict):
        raise PbxprojParseError("Project root must be a dictionary")
    return root


def load(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return loads(f.read())


def _rfc1034(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9.\-]", "-", value)


def expand_build_setting(value: str, settings: Dict[str, Any], _depth: int = 0) -> Optional[str]:
    """
    Substitute $(VAR) and ${VAR} references from `settings`.

    Supports the `rfc1034identifier` modifier used in bundle identifiers.

    Returns:
        The expanded string, or None if a variable cannot be resolved
    """
    if _depth > 16:
        return None
    unresolved = False

    def substitute(match: "re.Match[str]") -> str:
        nonlocal unresolved
        name, modifiers = match.group(1), match.group(2)
        raw = settings.get(name)
        if not isinstance(raw, str):
            unresolved = True
            return match.group(0)
        expanded = expand_build_setting(raw, settings, _depth + 1)
        if expanded is None:
            unresolved = True
            return match.group(0)
        if modifiers and "rfc1034identifier" in modifiers.split(","):
            expanded = _rfc1034(expanded)
        return expanded

    result = _VARIABLE_RE.sub(substitute, value)
    return None if unresolved else result


class XcodeProject:
    """
    A parsed Xcode project.

    Example:
        project = XcodeProject.from_path("ios/MyApp.xcodeproj")
        project.get_bundle_identifier()
    """

    def __init__(self, data: Dict[str, Any], path: Optional[Path] = None):
        self.data = data
        self.path = path

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "XcodeProject":
        """
        Load from an `.xcodeproj` directory or a `project.pbxproj` file.
        """
        path = Path(path)
        if path.suffix == ".xcodeproj":
            path = path / "project.pbxproj"
        return cls(load(path), path=path)

    @property
    def objects(self) -> Dict[str, Dict[str, Any]]:
        return self.data.get("objects", {})

    @property
    def source_root(self) -> Optional[Path]:
        """Directory that holds the .xcodeproj (Xcode's $(SRCROOT))."""
        if self.path is None:
            return None
        return self.path.parent.parent

    def _objects_of(self, isa: str) -> List[Dict[str, Any]]:
        return [obj for obj in self.objects.values() if isinstance(obj, dict) and obj.get("isa") == isa]

    def native_targets(self) -> List[Dict[str, Any]]:
        return self._objects_of("PBXNativeTarget")

    def application_targets(self) -> List[Dict[str, Any]]:
        return [
            target for target in self.native_targets()
            if target.get("productType", "").strip('"') == APPLICATION_PRODUCT_TYPE
        ]

    def build_configurations(self, target: Dict[str, Any]) -> List[Dict[str, Any]]:
        config_list = self.objects.get(target.get("buildConfigurationList", ""), {})
        return [
            self.objects[ref]
            for ref in config_list.get("buildConfigurations", [])
            if ref in self.objects
        ]

    def build_settings(
        self,
        target: Dict[str, Any],
        configuration: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build settings of `target` for a configuration.

        Without an explicit configuration, Release is preferred, then Debug,
        then whichever comes first.
        """
        configs = self.build_configurations(target)
        if not configs:
            return {}

        by_name = {c.get("name"): c for c in configs}
        names = (configuration,) if configuration else PREFERRED_CONFIGURATIONS
        chosen = next((by_name[n] for n in names if n in by_name), None)
        if chosen is None:
            if configuration:
                return {}
            chosen = configs[0]

        settings = dict(chosen.get("buildSettings", {}))
        settings.setdefault("TARGET_NAME", target.get("name", ""))
        settings.setdefault("PRODUCT_NAME", settings["TARGET_NAME"])
        if self.source_root is not None:
            settings.setdefault("SRCROOT", str(self.source_root))
            settings.setdefault("PROJECT_DIR", str(self.source_root))
        return settings

    def _first_app_setting(self, key: str, configuration: Optional[str]) -> Optional[str]:
        for target in self.application_targets():
            settings = self.build_settings(target, configuration)
            raw = settings.get(key)
            if isinstance(raw, str) and raw:
                return expand_build_setting(raw, settings)
        return None

    def get_bundle_identifier(self, configuration: Optional[str] = None) -> Optional[str]:
        """
        PRODUCT_BUNDLE_IDENTIFIER of the first application target.

        Returns:
            The identifier with build variables expanded, or None if it is
            missing or refers to variables the project does not define
        """
        return self._first_app_setting("PRODUCT_BUNDLE_IDENTIFIER", configuration)

    def get_info_plist_path(self, configuration: Optional[str] = None) -> Optional[Path]:
        """Absolute path of the first application target's Info.plist."""
        value = self._first_app_setting("INFOPLIST_FILE", configuration)
        if not value:
            return None
        path = Path(value)
        if not path.is_absolute() and self.source_root is not None:
            path = self.source_root / path
        return path


def find_xcode_project(project_root: Union[str, Path]) -> Optional[Path]:
    """
    Locate the app's .xcodeproj under `<project_root>/ios`.

    CocoaPods' Pods.xcodeproj is never returned.
    """
    ios_dir = Path(project_root) / "ios"
    if not ios_dir.is_dir():
        return None
    candidates = sorted(
        p for p in ios_dir.glob("*.xcodeproj")
        if p.is_dir() and p.name != "Pods.xcodeproj"
    )
    return candidates[0] if candidates else None
