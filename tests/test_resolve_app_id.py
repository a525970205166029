from __future__ import annotations

import json
import plistlib
from pathlib import Path

from devsim.resolve_app_id import get_info_plist_path, is_valid_bundle_id, resolve_app_id


def _write_xcodeproj(root: Path, text: str) -> None:
    xcodeproj = root / "ios" / "MyApp.xcodeproj"
    xcodeproj.mkdir(parents=True, exist_ok=True)
    (xcodeproj / "project.pbxproj").write_text(text, encoding="utf-8")


def _write_info_plist(root: Path, bundle_id: str, folder: str = "MyApp") -> Path:
    path = root / "ios" / folder / "Info.plist"
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        plistlib.dump({"CFBundleIdentifier": bundle_id, "CFBundleName": "MyApp"}, f)
    return path


def _write_app_json(root: Path, config: dict) -> None:
    (root / "app.json").write_text(json.dumps(config), encoding="utf-8")


def test_xcode_project_wins(tmp_path, pbxproj_text) -> None:
    _write_xcodeproj(tmp_path, pbxproj_text("com.example.fromxcode"))
    _write_info_plist(tmp_path, "com.example.fromplist")
    _write_app_json(tmp_path, {"expo": {"ios": {"bundleIdentifier": "com.example.fromconfig"}}})

    assert resolve_app_id(tmp_path) == "com.example.fromxcode"


def test_info_plist_used_when_project_has_placeholder(tmp_path, pbxproj_text) -> None:
    _write_xcodeproj(tmp_path, pbxproj_text("$(APP_BUNDLE_ID)"))
    _write_info_plist(tmp_path, "com.example.fromplist")

    assert resolve_app_id(tmp_path) == "com.example.fromplist"


def test_broken_xcode_project_is_skipped(tmp_path) -> None:
    _write_xcodeproj(tmp_path, "{ not a project")
    _write_info_plist(tmp_path, "com.example.fromplist")

    assert resolve_app_id(tmp_path) == "com.example.fromplist"


def test_plist_placeholder_falls_through_to_app_config(tmp_path) -> None:
    _write_info_plist(tmp_path, "$(PRODUCT_BUNDLE_IDENTIFIER)")
    _write_app_json(tmp_path, {"expo": {"ios": {"bundleIdentifier": "com.example.fromconfig"}}})

    assert resolve_app_id(tmp_path) == "com.example.fromconfig"


def test_unreadable_plist_falls_through_to_app_config(tmp_path) -> None:
    plist = tmp_path / "ios" / "MyApp" / "Info.plist"
    plist.parent.mkdir(parents=True)
    plist.write_text("<plist><dict><key>broken", encoding="utf-8")
    _write_app_json(tmp_path, {"ios": {"bundleIdentifier": "com.example.toplevel"}})

    assert resolve_app_id(tmp_path) == "com.example.toplevel"


def test_app_config_json_overrides_app_json(tmp_path) -> None:
    _write_app_json(tmp_path, {"expo": {"ios": {"bundleIdentifier": "com.example.static"}}})
    (tmp_path / "app.config.json").write_text(
        json.dumps({"expo": {"ios": {"bundleIdentifier": "com.example.dynamic"}}}),
        encoding="utf-8",
    )

    assert resolve_app_id(str(tmp_path)) == "com.example.dynamic"


def test_nothing_found(tmp_path) -> None:
    _write_app_json(tmp_path, {"expo": {"name": "My App"}})
    assert resolve_app_id(tmp_path) is None


def test_invalid_app_json_is_none(tmp_path) -> None:
    (tmp_path / "app.json").write_text("{ nope", encoding="utf-8")
    assert resolve_app_id(tmp_path) is None


def test_malformed_ios_section_is_none(tmp_path) -> None:
    _write_app_json(tmp_path, {"expo": {"ios": "com.example.app"}})
    assert resolve_app_id(tmp_path) is None


def test_empty_project_is_none(tmp_path) -> None:
    assert resolve_app_id(tmp_path) is None


def test_info_plist_path_skips_pods_and_tests(tmp_path) -> None:
    _write_info_plist(tmp_path, "x", folder="Pods")
    _write_info_plist(tmp_path, "x", folder="MyAppTests")
    expected = _write_info_plist(tmp_path, "x", folder="MyApp")

    assert get_info_plist_path(tmp_path) == expected


def test_is_valid_bundle_id() -> None:
    assert is_valid_bundle_id("com.example.app")
    assert not is_valid_bundle_id("")
    assert not is_valid_bundle_id("   ")
    assert not is_valid_bundle_id("$(PRODUCT_BUNDLE_IDENTIFIER)")
    assert not is_valid_bundle_id(None)
