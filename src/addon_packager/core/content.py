"""依存関係からのコンテンツ項目（Subsystem-Content の1要素）抽出.

解決済みの依存ファイルに埋め込まれたマニフェストを読み、`name;type=T;version=V`
形式のコンテンツ項目を導出します。

種別ごとの抽出方法:
    - feature: アーカイブ内の `OSGI-INF/SUBSYSTEM.MF` を読む。
      エントリが無い場合はスキップではなく「未対応の依存関係」エラー。
    - module: `META-INF/MANIFEST.MF` を読む。`Bundle-ManifestVersion: 2` 必須
      （プレーンJARは埋め込めない）。
    - config / other: 対応する抽出方法が無いため「未対応の依存関係」エラー。
      config はディストリビューション組み立てでのみ有効。
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from loguru import logger

from .dependency import Dependency, DependencyType
from .exceptions import ManifestError
from .manifest_text import (
    ManifestHeaders,
    parse_header_name,
    parse_manifest,
    split_clause_parts,
    split_header_clauses,
)
from .version import DEFAULT_VERSION

SUBSYSTEM_MANIFEST_ENTRY = "OSGI-INF/SUBSYSTEM.MF"
BUNDLE_MANIFEST_ENTRY = "META-INF/MANIFEST.MF"

SUBSYSTEM_SYMBOLICNAME = "Subsystem-SymbolicName"
SUBSYSTEM_VERSION = "Subsystem-Version"
SUBSYSTEM_TYPE = "Subsystem-Type"

BUNDLE_MANIFESTVERSION = "Bundle-ManifestVersion"
BUNDLE_SYMBOLICNAME = "Bundle-SymbolicName"
BUNDLE_VERSION = "Bundle-Version"
FRAGMENT_HOST = "Fragment-Host"


class ContentType(str, Enum):
    """コンテンツ項目の種別."""

    BUNDLE = "bundle"
    FRAGMENT = "fragment"
    FEATURE = "feature"
    APPLICATION = "application"

    @classmethod
    def parse(cls, raw: str) -> ContentType:
        """ヘッダ値から種別を得る（OSGiの正式名 `osgi.subsystem.feature` 等も受け付ける).

        Raises:
            ValueError: 4種のいずれにも該当しない場合
        """
        key = raw.strip().lower()
        key = _LONG_TYPE_NAMES.get(key, key)
        return cls(key)


_LONG_TYPE_NAMES = {
    "osgi.bundle": "bundle",
    "osgi.fragment": "fragment",
    "osgi.subsystem.feature": "feature",
    "osgi.subsystem.application": "application",
}


@dataclass(frozen=True)
class ContentItem:
    symbolic_name: str
    type: ContentType
    version: str = DEFAULT_VERSION

    def __post_init__(self) -> None:
        if not self.symbolic_name:
            raise ManifestError("Content item symbolic name must not be empty")

    def __str__(self) -> str:
        return f"{self.symbolic_name};type={self.type.value};version={self.version}"

    @classmethod
    def parse(cls, clause: str) -> ContentItem:
        """`name;type=T;version=V` 形式の1句を解析する.

        Raises:
            ManifestError: 名前が空、または種別が不正な場合
        """
        parts = split_clause_parts(clause)
        name = parts[0]
        attrs: dict[str, str] = {}
        for part in parts[1:]:
            key, sep, value = part.partition("=")
            if not sep or key.endswith(":"):
                # ディレクティブ（`:=`）は無視
                continue
            attrs[key.strip().lower()] = value.strip().strip('"')

        try:
            content_type = ContentType.parse(attrs.get("type", ContentType.BUNDLE.value))
        except ValueError as e:
            raise ManifestError(f"Invalid content item type: {clause}", subject=name) from e
        return cls(name, content_type, attrs.get("version", DEFAULT_VERSION))


def parse_content_header(value: str) -> list[ContentItem]:
    """Subsystem-Content ヘッダ値をコンテンツ項目のリストへ変換する（順序保持）."""
    return [ContentItem.parse(clause) for clause in split_header_clauses(value)]


def _unsupported(dep: Dependency) -> ManifestError:
    return ManifestError(
        f"Unsupported addon dependency: {dep.group_id}:{dep.artifact_id}",
        subject=dep.coordinate,
    )


def _read_zip_manifest(resolved_file: Path, entry: str) -> ManifestHeaders | None:
    """アーカイブ内のマニフェストエントリを読む（無ければ None）."""
    with zipfile.ZipFile(resolved_file) as zf:
        # エントリ名は大文字小文字を区別しない
        name = next((n for n in zf.namelist() if n.lower() == entry.lower()), None)
        if name is None:
            return None
        # 不正なバイトは置換文字として読む
        text = zf.read(name).decode("utf-8", errors="replace")
    return parse_manifest(text)


def _extract_feature(resolved_file: Path, dep: Dependency) -> ContentItem:
    try:
        headers = _read_zip_manifest(resolved_file, SUBSYSTEM_MANIFEST_ENTRY)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        msg = f"Failed to read subsystem dependency: {resolved_file} ({dep.coordinate})"
        raise ManifestError(msg, subject=dep.coordinate) from e

    if headers is None:
        logger.error(f"No {SUBSYSTEM_MANIFEST_ENTRY} in feature dependency: {resolved_file}")
        raise _unsupported(dep)

    symbolic_name = (headers.get(SUBSYSTEM_SYMBOLICNAME) or "").strip()
    if not symbolic_name:
        msg = f"Missing subsystem symbolic name: {resolved_file} ({dep.coordinate})"
        raise ManifestError(msg, subject=dep.coordinate)

    # Subsystem-Version は既にOSGi形式なので再正規化しない
    version = (headers.get(SUBSYSTEM_VERSION) or "").strip() or DEFAULT_VERSION
    raw_type = (headers.get(SUBSYSTEM_TYPE) or "").strip() or ContentType.APPLICATION.value
    try:
        content_type = ContentType.parse(raw_type)
    except ValueError as e:
        msg = f"Unsupported subsystem type '{raw_type}': {resolved_file} ({dep.coordinate})"
        raise ManifestError(msg, subject=dep.coordinate) from e

    return ContentItem(symbolic_name, content_type, version)


def _extract_module(resolved_file: Path, dep: Dependency) -> ContentItem:
    try:
        headers = _read_zip_manifest(resolved_file, BUNDLE_MANIFEST_ENTRY)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        msg = f"Failed to read JAR manifest: {resolved_file} ({dep.coordinate})"
        raise ManifestError(msg, subject=dep.coordinate) from e

    manifest_version = headers.get(BUNDLE_MANIFESTVERSION) if headers is not None else None
    if manifest_version is None:
        msg = f"Cannot include plain JAR file dependency: {resolved_file} ({dep.coordinate})"
        raise ManifestError(msg, subject=dep.coordinate)
    if manifest_version.strip() != "2":
        msg = (
            f"Unsupported bundle manifest version: {manifest_version} "
            f"in {resolved_file} ({dep.coordinate})"
        )
        raise ManifestError(msg, subject=dep.coordinate)

    raw_name = headers.get(BUNDLE_SYMBOLICNAME)
    symbolic_name = parse_header_name(raw_name) if raw_name else ""
    if not symbolic_name:
        msg = f"Missing bundle symbolic name: {resolved_file} ({dep.coordinate})"
        raise ManifestError(msg, subject=dep.coordinate)

    raw_version = headers.get(BUNDLE_VERSION)
    version = parse_header_name(raw_version) if raw_version else ""

    content_type = ContentType.FRAGMENT if FRAGMENT_HOST in headers else ContentType.BUNDLE
    return ContentItem(symbolic_name, content_type, version or DEFAULT_VERSION)


def _extract_unsupported(resolved_file: Path, dep: Dependency) -> ContentItem:
    raise _unsupported(dep)


# 種別ごとの抽出方法（config は明示的に未対応）
_EXTRACTORS: dict[DependencyType, Callable[[Path, Dependency], ContentItem]] = {
    DependencyType.FEATURE: _extract_feature,
    DependencyType.MODULE: _extract_module,
    DependencyType.CONFIG: _extract_unsupported,
    DependencyType.OTHER: _extract_unsupported,
}


def extract_content_item(resolved_file: Path | str, dep: Dependency) -> ContentItem:
    """解決済みの依存ファイルからコンテンツ項目を抽出する.

    Args:
        resolved_file: リゾルバが返したローカルファイルパス
        dep: 抽出対象の依存関係（宣言種別でディスパッチ）

    Returns:
        コンテンツ項目

    Raises:
        ManifestError: 必須ヘッダの欠落、マニフェストバージョン不一致、未対応の依存関係
    """
    return _EXTRACTORS[dep.type](Path(resolved_file), dep)
