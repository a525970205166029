from __future__ import annotations

import pytest

from devsim import pbxproj
from devsim.exceptions import PbxprojParseError
from devsim.pbxproj import XcodeProject, expand_build_setting, find_xcode_project


def test_loads_openstep_values() -> None:
    data = pbxproj.loads(
        '// !$*UTF8*$!\n'
        '{ a = 1; /* note */ b = "two words"; c = ( x, "y z", ); d = { e = <0a0b>; }; '
        'f = "esc\\"aped"; }'
    )
    assert data == {
        "a": "1",
        "b": "two words",
        "c": ["x", "y z"],
        "d": {"e": b"\x0a\x0b"},
        "f": 'esc"aped',
    }


@pytest.mark.parametrize(
    "text",
    [
        "{ a = 1 }",
        "{ a = \"open; }",
        "( a, b )",
        "{ a = 1; } trailing",
        "{ /* never closed ",
    ],
)
def test_loads_rejects_malformed_text(text: str) -> None:
    with pytest.raises(PbxprojParseError):
        pbxproj.loads(text)


def test_parse_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        pbxproj.loads("{")


def test_application_targets(pbxproj_text) -> None:
    project = XcodeProject(pbxproj.loads(pbxproj_text()))
    assert [t["name"] for t in project.native_targets()] == ["MyAppTests", "MyApp"]
    assert [t["name"] for t in project.application_targets()] == ["MyApp"]


def test_bundle_identifier_prefers_release(pbxproj_text) -> None:
    project = XcodeProject(pbxproj.loads(pbxproj_text("com.example.myapp")))
    assert project.get_bundle_identifier() == "com.example.myapp"
    assert project.get_bundle_identifier("Debug") == "com.example.myapp.debug"
    assert project.get_bundle_identifier("Staging") is None


def test_bundle_identifier_expands_build_variables(pbxproj_text) -> None:
    text = pbxproj_text("org.reactjs.native.example.$(PRODUCT_NAME:rfc1034identifier)")
    project = XcodeProject(pbxproj.loads(text))
    assert project.get_bundle_identifier() == "org.reactjs.native.example.MyApp"


def test_bundle_identifier_with_unknown_variable_is_none(pbxproj_text) -> None:
    project = XcodeProject(pbxproj.loads(pbxproj_text("$(APP_BUNDLE_ID)")))
    assert project.get_bundle_identifier() is None


def test_expand_build_setting() -> None:
    settings = {"TARGET_NAME": "My App", "PRODUCT_NAME": "$(TARGET_NAME)"}
    assert expand_build_setting("com.x.${PRODUCT_NAME}", settings) == "com.x.My App"
    assert expand_build_setting("com.x.$(PRODUCT_NAME:rfc1034identifier)", settings) == "com.x.My-App"
    assert expand_build_setting("$(MISSING)", settings) is None


def test_expand_build_setting_cycle_is_unresolved() -> None:
    assert expand_build_setting("$(A)", {"A": "$(B)", "B": "$(A)"}) is None


def test_from_path_and_info_plist_path(tmp_path, pbxproj_text) -> None:
    xcodeproj = tmp_path / "ios" / "MyApp.xcodeproj"
    xcodeproj.mkdir(parents=True)
    (xcodeproj / "project.pbxproj").write_text(pbxproj_text(), encoding="utf-8")

    project = XcodeProject.from_path(xcodeproj)

    assert project.source_root == tmp_path / "ios"
    assert project.get_info_plist_path() == tmp_path / "ios" / "MyApp" / "Info.plist"


def test_find_xcode_project_skips_pods(tmp_path) -> None:
    ios = tmp_path / "ios"
    (ios / "Pods.xcodeproj").mkdir(parents=True)
    assert find_xcode_project(tmp_path) is None

    (ios / "MyApp.xcodeproj").mkdir()
    assert find_xcode_project(tmp_path) == ios / "MyApp.xcodeproj"


def test_find_xcode_project_without_ios_dir(tmp_path) -> None:
    assert find_xcode_project(tmp_path) is None
