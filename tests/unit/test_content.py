"""Unit tests for content item extraction."""

from pathlib import Path

import pytest

from addon_packager.core.content import ContentItem, ContentType, extract_content_item, parse_content_header
from addon_packager.core.dependency import Dependency, DependencyType
from addon_packager.core.exceptions import ManifestError


def _dep(dep_type: DependencyType = DependencyType.MODULE, artifact_id: str = "foo") -> Dependency:
    return Dependency(group_id="com.example", artifact_id=artifact_id, version="1.0.0", type=dep_type)


class TestContentItem:
    def test_str(self) -> None:
        item = ContentItem("foo", ContentType.BUNDLE, "1.0.0")
        assert str(item) == "foo;type=bundle;version=1.0.0"

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ManifestError):
            ContentItem("", ContentType.BUNDLE)

    def test_parse_accepts_long_type_names(self) -> None:
        item = ContentItem.parse("bar;type=osgi.subsystem.feature;version=2.0.0")
        assert item == ContentItem("bar", ContentType.FEATURE, "2.0.0")

    def test_parse_content_header_keeps_order(self) -> None:
        items = parse_content_header("b;type=bundle;version=1.0.0, a;type=fragment;version=0.0.0")
        assert [i.symbolic_name for i in items] == ["b", "a"]
        assert items[1].type is ContentType.FRAGMENT

    def test_parse_invalid_type(self) -> None:
        with pytest.raises(ManifestError, match="Invalid content item type"):
            ContentItem.parse("x;type=library;version=1.0.0")


class TestExtractModule:
    def test_bundle_without_version(self, make_bundle) -> None:
        jar = make_bundle("foo.jar", {"Bundle-ManifestVersion": "2", "Bundle-SymbolicName": "foo"})
        item = extract_content_item(jar, _dep())
        assert str(item) == "foo;type=bundle;version=0.0.0"

    def test_symbolic_name_parameters_are_discarded(self, make_bundle) -> None:
        jar = make_bundle(
            "core.jar",
            {
                "Bundle-ManifestVersion": "2",
                "Bundle-SymbolicName": "com.example.core;singleton:=true",
                "Bundle-Version": "1.2.3.RELEASE",
            },
        )
        item = extract_content_item(jar, _dep())
        assert item == ContentItem("com.example.core", ContentType.BUNDLE, "1.2.3.RELEASE")

    def test_fragment(self, make_bundle) -> None:
        jar = make_bundle(
            "frag.jar",
            {
                "Bundle-ManifestVersion": "2",
                "Bundle-SymbolicName": "com.example.frag",
                "Bundle-Version": "1.0.0",
                "Fragment-Host": "com.example.core",
            },
        )
        assert extract_content_item(jar, _dep()).type is ContentType.FRAGMENT

    def test_missing_manifest_version(self, make_bundle) -> None:
        jar = make_bundle("plain.jar", {"Bundle-SymbolicName": "foo"})
        with pytest.raises(ManifestError, match="Cannot include plain JAR file dependency") as exc_info:
            extract_content_item(jar, _dep())
        assert exc_info.value.subject == "com.example:foo:1.0.0"

    def test_jar_without_manifest(self, make_bundle) -> None:
        jar = make_bundle("nomf.jar", None, extra={"a.txt": b"a"})
        with pytest.raises(ManifestError, match="plain JAR"):
            extract_content_item(jar, _dep())

    def test_wrong_manifest_version(self, make_bundle) -> None:
        jar = make_bundle("v1.jar", {"Bundle-ManifestVersion": "1", "Bundle-SymbolicName": "foo"})
        with pytest.raises(ManifestError, match="Unsupported bundle manifest version: 1"):
            extract_content_item(jar, _dep())

    def test_missing_symbolic_name(self, make_bundle) -> None:
        jar = make_bundle("nosn.jar", {"Bundle-ManifestVersion": "2"})
        with pytest.raises(ManifestError, match="Missing bundle symbolic name"):
            extract_content_item(jar, _dep())

    def test_non_utf8_header_value_is_tolerated(self, make_bundle) -> None:
        manifest = (
            b"Manifest-Version: 1.0\r\n"
            b"Bundle-ManifestVersion: 2\r\n"
            b"Bundle-SymbolicName: com.example.foo\r\n"
            b"Bundle-Vendor: Soci\xe9t\xe9\r\n"
            b"Bundle-Description: a\xe2\x80\xa8b\r\n\r\n"
        )
        jar = make_bundle("latin1.jar", None, extra={"META-INF/MANIFEST.MF": manifest})
        item = extract_content_item(jar, _dep(DependencyType.MODULE))
        assert item == ContentItem("com.example.foo", ContentType.BUNDLE, "0.0.0")

    def test_not_a_zip(self, tmp_path: Path) -> None:
        bogus = tmp_path / "bogus.jar"
        bogus.write_text("not a zip", encoding="utf-8")
        with pytest.raises(ManifestError, match="com.example:foo:1.0.0"):
            extract_content_item(bogus, _dep())


class TestExtractFeature:
    def test_feature_defaults(self, make_feature) -> None:
        esa = make_feature("sub.esa", {"Subsystem-SymbolicName": "com.example.sub"})
        item = extract_content_item(esa, _dep(DependencyType.FEATURE))
        assert str(item) == "com.example.sub;type=application;version=0.0.0"

    def test_feature_version_used_as_is(self, make_feature) -> None:
        esa = make_feature(
            "sub.esa",
            {
                "Subsystem-SymbolicName": "com.example.sub",
                "Subsystem-Version": "1.0.0.SNAPSHOT",
                "Subsystem-Type": "osgi.subsystem.feature",
            },
        )
        item = extract_content_item(esa, _dep(DependencyType.FEATURE))
        assert item == ContentItem("com.example.sub", ContentType.FEATURE, "1.0.0.SNAPSHOT")

    def test_missing_subsystem_manifest_fails(self, make_feature) -> None:
        esa = make_feature("empty.esa", None)
        with pytest.raises(ManifestError, match="Unsupported addon dependency: com.example:foo") as exc_info:
            extract_content_item(esa, _dep(DependencyType.FEATURE))
        assert exc_info.value.subject == "com.example:foo:1.0.0"

    def test_missing_symbolic_name(self, make_feature) -> None:
        esa = make_feature("nosn.esa", {"Subsystem-Version": "1.0.0"})
        with pytest.raises(ManifestError, match="Missing subsystem symbolic name"):
            extract_content_item(esa, _dep(DependencyType.FEATURE))

    def test_blank_version_defaults(self, make_feature) -> None:
        esa = make_feature("blank.esa", {"Subsystem-SymbolicName": "com.example.sub", "Subsystem-Version": "  "})
        item = extract_content_item(esa, _dep(DependencyType.FEATURE))
        assert str(item) == "com.example.sub;type=application;version=0.0.0"

    def test_blank_symbolic_name_names_coordinate(self, make_feature) -> None:
        esa = make_feature("blank.esa", {"Subsystem-SymbolicName": "  ", "Subsystem-Version": "1.0.0"})
        with pytest.raises(ManifestError, match="Missing subsystem symbolic name") as exc_info:
            extract_content_item(esa, _dep(DependencyType.FEATURE))
        assert exc_info.value.subject == "com.example:foo:1.0.0"

    def test_unknown_subsystem_type(self, make_feature) -> None:
        esa = make_feature("comp.esa", {"Subsystem-SymbolicName": "x", "Subsystem-Type": "osgi.subsystem.composite"})
        with pytest.raises(ManifestError, match="Unsupported subsystem type"):
            extract_content_item(esa, _dep(DependencyType.FEATURE))


class TestExtractUnsupported:
    def test_config_dependency_fails(self, make_config_file) -> None:
        cfg = make_config_file("settings.cfg")
        with pytest.raises(ManifestError, match="Unsupported addon dependency: com.example:settings"):
            extract_content_item(cfg, _dep(DependencyType.CONFIG, artifact_id="settings"))

    def test_other_dependency_fails(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="Unsupported addon dependency"):
            extract_content_item(tmp_path / "x.pom", _dep(DependencyType.OTHER))
