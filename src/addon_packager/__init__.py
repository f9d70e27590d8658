"""addon_packager: アドオン/ディストリビューションのパッケージング.

依存関係の分類、マニフェスト生成、ディストリビューション組み立てを提供する。
"""

from addon_packager.addon import AddonManifest, build_addon_manifest, package_addon
from addon_packager.distribution import assemble_distribution, resolve_distribution_type
from addon_packager.project import AddonMetadata, DistributionOptions, ProjectMetadata

__version__ = "0.1.0"

__all__ = [
    "AddonManifest",
    "AddonMetadata",
    "DistributionOptions",
    "ProjectMetadata",
    "build_addon_manifest",
    "package_addon",
    "assemble_distribution",
    "resolve_distribution_type",
]
