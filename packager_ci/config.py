"""packaging.yml の読み込み."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml
from loguru import logger

from addon_packager.core.dependency import ArtifactCoordinate, Dependency
from addon_packager.core.exceptions import ConfigurationError
from addon_packager.project import DISTRIBUTION_TYPE_AUTO, AddonMetadata, DistributionOptions, ProjectMetadata
from addon_packager.resolver import DEFAULT_LOCAL_REPOSITORY, DEFAULT_REMOTE_REPOSITORIES


@dataclass(frozen=True)
class RepositoryConfig:
    local: Path = DEFAULT_LOCAL_REPOSITORY
    remote: tuple[str, ...] = DEFAULT_REMOTE_REPOSITORIES
    timeout: float = 300


@dataclass(frozen=True)
class PackagingConfig:
    project: ProjectMetadata
    addon: AddonMetadata
    distribution: DistributionOptions
    dependencies: list[Dependency] = field(default_factory=list)
    repositories: RepositoryConfig = field(default_factory=RepositoryConfig)


def _load_project(data: dict, base_dir: Path) -> ProjectMetadata:
    missing = [k for k in ("group_id", "artifact_id", "version") if not data.get(k)]
    if missing:
        raise ConfigurationError(f"project section is missing required keys: {missing}")

    licenses = []
    for entry in data.get("licenses", []) or []:
        url = entry.get("url") if isinstance(entry, dict) else entry
        if url:
            licenses.append(str(url))

    output_directory = Path(data.get("output_directory", "target"))
    if not output_directory.is_absolute():
        output_directory = base_dir / output_directory

    return ProjectMetadata(
        group_id=str(data["group_id"]),
        artifact_id=str(data["artifact_id"]),
        version=str(data["version"]),
        packaging=str(data.get("packaging", "pom")),
        name=data.get("name"),
        description=data.get("description"),
        url=data.get("url"),
        organization=data.get("organization"),
        license_urls=tuple(licenses),
        final_name=data.get("final_name"),
        output_directory=output_directory,
    )


def _load_addon(data: dict, project: ProjectMetadata) -> AddonMetadata:
    return AddonMetadata.from_project(
        project,
        symbolic_name=data.get("symbolic_name"),
        vendor=data.get("vendor"),
        license=data.get("license"),
        name=data.get("name"),
        doc_url=data.get("doc_url"),
        description=data.get("description"),
        embed_dependencies=data.get("embed_dependencies"),
    )


def _load_distribution(data: dict) -> DistributionOptions:
    templates = []
    for entry in data.get("templates", []) or []:
        templates.append(
            ArtifactCoordinate(
                group_id=str(entry["group_id"]),
                artifact_id=str(entry["artifact_id"]),
                version=str(entry["version"]),
                extension=str(entry.get("extension", "jar")),
                classifier=entry.get("classifier"),
            )
        )
    version = data.get("version")
    return DistributionOptions(
        version=str(version) if version is not None else None,
        type=str(data.get("type", DISTRIBUTION_TYPE_AUTO)),
        templates=tuple(templates),
    )


def _load_repositories(data: dict, base_dir: Path) -> RepositoryConfig:
    local = Path(data["local"]).expanduser() if data.get("local") else DEFAULT_LOCAL_REPOSITORY
    if not local.is_absolute():
        local = base_dir / local
    remote = data.get("remote")
    if isinstance(remote, str):
        # 単一URLの文字列指定も受け付ける
        remote = [remote]
    return RepositoryConfig(
        local=local,
        remote=tuple(remote) if remote is not None else DEFAULT_REMOTE_REPOSITORIES,
        timeout=float(data.get("timeout", 300)),
    )


def load_packaging_config(config_yml: Path) -> PackagingConfig:
    """packaging.yml を読み込んでパッケージング設定を返す.

    相対パスは設定ファイルのディレクトリ基準で解決する。

    Args:
        config_yml: packaging.yml のパス

    Returns:
        パッケージング設定

    Raises:
        ConfigurationError: ファイルが無い、または設定内容が不正な場合
    """
    config_yml = Path(config_yml)
    if not config_yml.exists():
        raise ConfigurationError(f"Config file not found: {config_yml}", subject=str(config_yml))

    with open(config_yml, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict) or "project" not in config:
        raise ConfigurationError(f"Config must contain a 'project' section: {config_yml}", subject=str(config_yml))

    base_dir = config_yml.resolve().parent
    project = _load_project(config["project"], base_dir)

    try:
        dependencies = [Dependency.from_dict(d) for d in config.get("dependencies", []) or []]
        distribution = _load_distribution(config.get("distribution", {}) or {})
    except (KeyError, ValueError) as e:
        raise ConfigurationError(f"Invalid config {config_yml}: {e}", subject=str(config_yml)) from e

    logger.info(f"Loaded {len(dependencies)} dependencies from {config_yml}")
    return PackagingConfig(
        project=project,
        addon=_load_addon(config.get("addon", {}) or {}, project),
        distribution=distribution,
        dependencies=dependencies,
        repositories=_load_repositories(config.get("repositories", {}) or {}, base_dir),
    )
