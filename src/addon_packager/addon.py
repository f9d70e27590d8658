"""アドオン（フィーチャーパッケージ）のマニフェスト生成とパッケージング.

依存関係からコンテンツ項目を集め、`OSGI-INF/SUBSYSTEM.MF` を書き出し、
`<finalName>.esa`（zip）としてまとめます。
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from addon_packager.archive import ZipArchiver
from addon_packager.core.classifier import select_dependencies
from addon_packager.core.content import ContentItem, extract_content_item, parse_content_header
from addon_packager.core.dependency import Dependency
from addon_packager.core.exceptions import ConfigurationError, ManifestError
from addon_packager.core.manifest_text import format_manifest, parse_manifest
from addon_packager.core.version import normalize_version
from addon_packager.project import AddonMetadata, ProjectMetadata
from addon_packager.resolver import ArtifactResolver

ADDON_MANIFEST_PATH = "OSGI-INF/SUBSYSTEM.MF"
ADDON_EXTENSION = "esa"
REQUIRED_PACKAGING = "pom"

MANIFEST_VERSION = "Manifest-Version"
SUBSYSTEM_MANIFESTVERSION = "Subsystem-ManifestVersion"
SUBSYSTEM_CONTENT = "Subsystem-Content"
SUBSYSTEM_TYPE = "Subsystem-Type"
SUBSYSTEM_NAME = "Subsystem-Name"
SUBSYSTEM_SYMBOLICNAME = "Subsystem-SymbolicName"
SUBSYSTEM_VERSION = "Subsystem-Version"
SUBSYSTEM_DESCRIPTION = "Subsystem-Description"
SUBSYSTEM_DOCURL = "Subsystem-DocURL"
SUBSYSTEM_LICENSE = "Subsystem-License"
SUBSYSTEM_VENDOR = "Subsystem-Vendor"

SUBSYSTEM_TYPE_FEATURE = "feature"


@dataclass(frozen=True)
class AddonManifest:
    """アドオンマニフェストのヘッダ.

    必須ヘッダ（symbolic_name / version）はコンストラクタで検証し、
    任意ヘッダは空なら出力しない。
    """

    symbolic_name: str
    version: str
    content: tuple[ContentItem, ...] = ()
    name: str | None = None
    description: str | None = None
    doc_url: str | None = None
    license: str | None = None
    vendor: str | None = None

    def __post_init__(self) -> None:
        if not self.symbolic_name:
            raise ManifestError("Missing addon symbolic name")
        if not self.version:
            raise ManifestError("Missing addon version", subject=self.symbolic_name)

    @property
    def content_header(self) -> str:
        return ", ".join(str(item) for item in self.content)

    def headers(self) -> dict[str, str]:
        """書き出し順のヘッダ辞書を返す."""
        headers = {
            MANIFEST_VERSION: "1",
            SUBSYSTEM_MANIFESTVERSION: "1",
        }
        if self.content:
            headers[SUBSYSTEM_CONTENT] = self.content_header
        headers[SUBSYSTEM_TYPE] = SUBSYSTEM_TYPE_FEATURE

        optional_before = {SUBSYSTEM_NAME: self.name}
        required = {SUBSYSTEM_SYMBOLICNAME: self.symbolic_name, SUBSYSTEM_VERSION: self.version}
        optional_after = {
            SUBSYSTEM_DESCRIPTION: self.description,
            SUBSYSTEM_DOCURL: self.doc_url,
            SUBSYSTEM_LICENSE: self.license,
            SUBSYSTEM_VENDOR: self.vendor,
        }
        for key, value in (*optional_before.items(), *required.items(), *optional_after.items()):
            if value:
                headers[key] = value
        return headers

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> AddonManifest:
        """書き出したマニフェストを読み戻す.

        Raises:
            ManifestError: 必須ヘッダが無い、または feature 以外のマニフェストの場合
        """
        subsystem_type = headers.get(SUBSYSTEM_TYPE)
        if subsystem_type != SUBSYSTEM_TYPE_FEATURE:
            raise ManifestError(f"Not a feature manifest (Subsystem-Type={subsystem_type})")
        content_value = headers.get(SUBSYSTEM_CONTENT)
        return cls(
            symbolic_name=headers.get(SUBSYSTEM_SYMBOLICNAME, ""),
            version=headers.get(SUBSYSTEM_VERSION, ""),
            content=tuple(parse_content_header(content_value)) if content_value else (),
            name=headers.get(SUBSYSTEM_NAME),
            description=headers.get(SUBSYSTEM_DESCRIPTION),
            doc_url=headers.get(SUBSYSTEM_DOCURL),
            license=headers.get(SUBSYSTEM_LICENSE),
            vendor=headers.get(SUBSYSTEM_VENDOR),
        )


def collect_content_items(
    dependencies: Iterable[Dependency],
    resolver: ArtifactResolver,
) -> list[ContentItem]:
    """対象の依存関係ごとに解決→抽出し、宣言順のコンテンツ項目リストを返す.

    重複排除やソートは行わない。最初の失敗で中断する。
    """
    items: list[ContentItem] = []
    for dep in select_dependencies(dependencies):
        resolved = resolver.resolve(dep.artifact_coordinate())
        item = extract_content_item(resolved, dep)
        logger.debug(f"Content item from {dep.coordinate}: {item}")
        items.append(item)
    return items


def build_addon_manifest(
    addon: AddonMetadata,
    dependencies: Iterable[Dependency],
    resolver: ArtifactResolver,
) -> AddonManifest:
    """アドオンマニフェストを組み立てる.

    Args:
        addon: アドオン情報（バージョンはここで OSGi 形式へ正規化する）
        dependencies: プロジェクトの依存関係（分類はこの中で行う）
        resolver: アーティファクトリゾルバ

    Returns:
        アドオンマニフェスト

    Raises:
        ResolutionError: 依存関係を解決できない場合
        ManifestError: コンテンツ項目を抽出できない場合
    """
    logger.info("Reading addon dependencies")
    content = collect_content_items(dependencies, resolver)

    license_value = addon.license
    if license_value is None and addon.license_urls:
        license_value = addon.license_urls[0]

    return AddonManifest(
        symbolic_name=addon.symbolic_name,
        version=normalize_version(addon.version),
        content=tuple(content),
        name=addon.name,
        description=addon.description,
        doc_url=addon.doc_url,
        license=license_value,
        vendor=addon.vendor,
    )


def write_addon_manifest(manifest: AddonManifest, output_path: Path) -> None:
    logger.info(f"Writing addon manifest: {output_path}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(format_manifest(manifest.headers()).encode("utf-8"))


def read_addon_manifest(manifest_path: Path) -> AddonManifest:
    text = manifest_path.read_bytes().decode("utf-8", errors="replace")
    return AddonManifest.from_headers(parse_manifest(text))


def package_addon(
    project: ProjectMetadata,
    addon: AddonMetadata,
    dependencies: Iterable[Dependency],
    resolver: ArtifactResolver,
) -> Path:
    """アドオンを `<output>/<finalName>.esa` としてパッケージングする.

    Args:
        project: プロジェクト定義（packaging は "pom" であること）
        addon: アドオン情報
        dependencies: プロジェクトの依存関係
        resolver: アーティファクトリゾルバ

    Returns:
        作成したアーカイブのパス

    Raises:
        ConfigurationError: プロジェクトの packaging が "pom" でない場合
        ResolutionError / ManifestError / ArchiveError: 各処理の失敗
    """
    if project.packaging != REQUIRED_PACKAGING:
        raise ConfigurationError(
            f"Project packaging must be '{REQUIRED_PACKAGING}' (got '{project.packaging}')",
            subject=f"{project.group_id}:{project.artifact_id}",
        )

    dependencies = list(dependencies)
    manifest = build_addon_manifest(addon, dependencies, resolver)

    output_dir = Path(project.output_directory)
    addon_dir = output_dir / "addon"
    if addon_dir.exists():
        shutil.rmtree(addon_dir)
    write_addon_manifest(manifest, addon_dir / ADDON_MANIFEST_PATH)

    extra_files: list[tuple[Path, str]] = []
    if addon.embed_dependencies:
        for dep in select_dependencies(dependencies):
            dep_file = resolver.resolve(dep.artifact_coordinate())
            extra_files.append((dep_file, dep_file.name))

    addon_file = output_dir / f"{project.build_name}.{ADDON_EXTENSION}"
    logger.info(f"Packaging addon to file: {addon_file}")
    ZipArchiver().create(addon_file, addon_dir, extra_files=extra_files)
    return addon_file
