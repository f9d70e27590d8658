"""ディストリビューション（実行可能なディレクトリツリー）の組み立て.

処理の流れ:
    1. 配布形式の決定（auto はホストOSファミリで zip / tar.gz を選ぶ）
    2. テンプレート座標の決定（明示バージョン、またはツールの実行時依存から）
    3. テンプレートを作業ディレクトリへ展開し、ルートディレクトリ名をビルド名へ変更
    4. 依存ファイルを種別ごとのサブディレクトリ（etc/ / addons/）へ配置
    5. 作業ディレクトリをアーカイブ化
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from addon_packager.archive import FORMAT_TAR_GZ, FORMAT_ZIP, Archiver, archiver_for
from addon_packager.core.classifier import ExclusionReason, Excluded, classify_dependency
from addon_packager.core.dependency import ArtifactCoordinate, Dependency, DependencyType
from addon_packager.core.exceptions import ConfigurationError, ResolutionError
from addon_packager.project import DISTRIBUTION_TYPE_AUTO, DistributionOptions, ProjectMetadata
from addon_packager.resolver import ArtifactResolver

TEMPLATE_GROUP_ID = "io.staminaframework"
TEMPLATE_ARTIFACT_ID = "io.staminaframework.runtime"
TEMPLATE_CLASSIFIER = "bin"

OS_FAMILY_WINDOWS = "windows"

SUPPORTED_DISTRIBUTION_TYPES = (DISTRIBUTION_TYPE_AUTO, FORMAT_ZIP, FORMAT_TAR_GZ)


@dataclass(frozen=True)
class DistributionLayout:
    template_root: Path
    config_target_dir: str = "etc/"
    addon_target_dir: str = "addons/"

    def target_dir(self, dep_type: DependencyType) -> str | None:
        """依存種別ごとの配置先（対象外の種別は None）."""
        if dep_type is DependencyType.CONFIG:
            return self.config_target_dir
        if dep_type in (DependencyType.MODULE, DependencyType.FEATURE):
            return self.addon_target_dir
        return None


def overlay_target(dep_type: DependencyType) -> str | None:
    """既定レイアウトでの配置先（config → etc/、module/feature → addons/）."""
    return DistributionLayout(Path(".")).target_dir(dep_type)


def resolve_distribution_type(selector: str, os_family: str) -> str:
    """配布形式を決定する.

    Args:
        selector: "auto" / "zip" / "tar.gz"
        os_family: ホストのOSファミリ（"windows" / "unix" 等）

    Raises:
        ConfigurationError: 未対応の配布形式
    """
    if selector not in SUPPORTED_DISTRIBUTION_TYPES:
        logger.error(f"Supported distribution types: {', '.join(SUPPORTED_DISTRIBUTION_TYPES)}")
        raise ConfigurationError(f"Unsupported distribution type: {selector}", subject=selector)
    if selector != DISTRIBUTION_TYPE_AUTO:
        return selector

    resolved = FORMAT_ZIP if os_family.lower() == OS_FAMILY_WINDOWS else FORMAT_TAR_GZ
    logger.info(f"Distribution type automatically set to {resolved}")
    return resolved


def resolve_template_coordinate(options: DistributionOptions, distribution_format: str) -> ArtifactCoordinate:
    """テンプレートのアーティファクト座標を決定する.

    明示バージョンがあればそれを使い、無ければツール自身の実行時依存から
    既知の座標に一致するものを探してそのバージョンを再利用する。

    Raises:
        ResolutionError: テンプレート候補が見つからない場合
    """
    if options.version:
        return ArtifactCoordinate(
            group_id=TEMPLATE_GROUP_ID,
            artifact_id=TEMPLATE_ARTIFACT_ID,
            version=options.version,
            extension=distribution_format,
            classifier=TEMPLATE_CLASSIFIER,
        )

    for candidate in options.templates:
        if candidate.group_id == TEMPLATE_GROUP_ID and candidate.artifact_id == TEMPLATE_ARTIFACT_ID:
            return ArtifactCoordinate(
                group_id=candidate.group_id,
                artifact_id=candidate.artifact_id,
                version=candidate.version,
                extension=distribution_format,
                classifier=candidate.classifier or TEMPLATE_CLASSIFIER,
            )

    raise ResolutionError(
        "Unable to resolve distribution template",
        subject=f"{TEMPLATE_GROUP_ID}:{TEMPLATE_ARTIFACT_ID}",
    )


def fix_root_directory(dist_dir: Path, template: ArtifactCoordinate, build_name: str) -> Path:
    """展開したテンプレートのルート `<artifactId>-<version>` をビルド名へ変更する.

    期待する名前のディレクトリが無い場合は何もしない（警告のみ）。
    """
    expected = dist_dir / f"{template.artifact_id}-{template.version}"
    target = dist_dir / build_name
    if expected == target:
        return target
    if not expected.is_dir():
        logger.warning(f"Distribution root directory not found, not renamed: {expected}")
        return target
    if target.exists():
        shutil.rmtree(target)
    expected.rename(target)
    return target


def overlay_dependencies(
    layout: DistributionLayout,
    dependencies: Iterable[Dependency],
    resolver: ArtifactResolver,
) -> list[Path]:
    """依存ファイルを種別ごとのサブディレクトリへコピーする（宣言順）.

    Returns:
        配置したファイルのパスリスト
    """
    placed: list[Path] = []

    logger.info("Reading project dependencies")
    for dep in dependencies:
        result = classify_dependency(dep)
        if isinstance(result, Excluded) and result.reason is not ExclusionReason.TYPE:
            logger.debug(f"Dependency excluded ({result.reason.value}): {dep.coordinate}")
            continue

        prefix = layout.target_dir(dep.type)
        if prefix is None:
            logger.warning(f"Dependency not included (unsupported type): {dep.group_id}:{dep.artifact_id}")
            continue

        logger.info(f"Adding dependency to distribution: {dep.group_id}:{dep.artifact_id}")
        dep_file = resolver.resolve(dep.artifact_coordinate())
        dest = layout.template_root / prefix / dep_file.name
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(dep_file, dest)
        placed.append(dest)
    return placed


def assemble_distribution(
    project: ProjectMetadata,
    options: DistributionOptions,
    dependencies: Iterable[Dependency],
    resolver: ArtifactResolver,
    os_family: str,
    archiver: Archiver | None = None,
) -> Path:
    """ディストリビューションを組み立てて `<output>/<finalName>.<format>` を作成する.

    Args:
        project: プロジェクト定義
        options: ディストリビューション設定
        dependencies: プロジェクトの依存関係
        resolver: アーティファクトリゾルバ
        os_family: ホストのOSファミリ（auto 解決用）
        archiver: 使用するアーカイバ（省略時は配布形式から選択）

    Returns:
        作成したアーカイブのパス

    Raises:
        ConfigurationError / ResolutionError / ArchiveError: 各処理の失敗（即中断）
    """
    distribution_format = resolve_distribution_type(options.type, os_family)
    archiver = archiver or archiver_for(distribution_format)

    template = resolve_template_coordinate(options, distribution_format)
    template_file = resolver.resolve(template)
    logger.info(f"Using distribution template: {template_file}")

    output_dir = Path(project.output_directory)
    dist_dir = output_dir / "dist"
    if dist_dir.exists():
        shutil.rmtree(dist_dir)
    logger.info(f"Unpacking distribution template to: {dist_dir}")
    archiver.extract(template_file, dist_dir)

    root_dir = fix_root_directory(dist_dir, template, project.build_name)
    layout = DistributionLayout(template_root=root_dir)
    overlay_dependencies(layout, dependencies, resolver)

    dist_file = output_dir / f"{project.build_name}.{distribution_format}"
    logger.info(f"Packaging distribution to file: {dist_file}")
    return archiver.create(dist_file, dist_dir)
