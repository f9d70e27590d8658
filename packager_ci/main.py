"""Packaging orchestrator: load packaging.yml, build the addon and/or the distribution."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

from loguru import logger

from addon_packager.addon import package_addon
from addon_packager.core.exceptions import PackagingError
from addon_packager.distribution import OS_FAMILY_WINDOWS, assemble_distribution
from addon_packager.resolver import ArtifactResolver, MavenRepositoryResolver
from packager_ci.config import PackagingConfig, load_packaging_config


def host_os_family() -> str:
    return OS_FAMILY_WINDOWS if os.name == "nt" else "unix"


def _make_resolver(config: PackagingConfig) -> MavenRepositoryResolver:
    return MavenRepositoryResolver(
        local_repository=config.repositories.local,
        remote_repositories=config.repositories.remote,
        timeout=config.repositories.timeout,
    )


def orchestrate(
    target: str,
    config: PackagingConfig,
    resolver: ArtifactResolver,
    os_family: str,
) -> list[Path]:
    """指定ターゲットのパッケージングを順に実行する.

    Args:
        target: "addon" / "dist" / "all"
        config: パッケージング設定
        resolver: アーティファクトリゾルバ
        os_family: ホストのOSファミリ

    Returns:
        作成したアーカイブのパスリスト
    """
    if target not in ("addon", "dist", "all"):
        raise ValueError(f"Unknown target: {target}")

    outputs: list[Path] = []
    if target in ("addon", "all"):
        logger.info(f"=== Addon build start: {config.project.build_name} ===")
        outputs.append(package_addon(config.project, config.addon, config.dependencies, resolver))
    if target in ("dist", "all"):
        logger.info(f"=== Distribution build start: {config.project.build_name} ===")
        outputs.append(
            assemble_distribution(
                config.project,
                config.distribution,
                config.dependencies,
                resolver,
                os_family=os_family,
            )
        )

    for path in outputs:
        logger.info(f"Created: {path}")
    return outputs


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Addon / distribution packager")
    p.add_argument("target", choices=["addon", "dist", "all"], help="Packaging target")
    p.add_argument(
        "--config",
        type=Path,
        default=Path("packaging.yml"),
        help="packaging.yml path",
    )
    p.add_argument("--output-dir", type=Path, default=None, help="override project.output_directory")
    p.add_argument(
        "--distribution-type",
        choices=["auto", "zip", "tar.gz"],
        default=None,
        help="override distribution.type",
    )
    p.add_argument("--distribution-version", default=None, help="override distribution.version")
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"],
        help="log level",
    )

    args = p.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level)

    try:
        config = load_packaging_config(args.config)
        if args.output_dir is not None:
            config = replace(config, project=replace(config.project, output_directory=args.output_dir))
        if args.distribution_type or args.distribution_version:
            config = replace(
                config,
                distribution=replace(
                    config.distribution,
                    type=args.distribution_type or config.distribution.type,
                    version=args.distribution_version or config.distribution.version,
                ),
            )
        orchestrate(args.target, config, _make_resolver(config), host_os_family())
    except PackagingError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
