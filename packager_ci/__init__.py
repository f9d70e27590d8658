"""packager_ci: パッケージングのオーケストレーション層.

packaging.yml の読み込みと、アドオン/ディストリビューションのビルド実行を提供する。
"""

from packager_ci.config import PackagingConfig, load_packaging_config
from packager_ci.main import orchestrate

__version__ = "0.1.0"

__all__ = [
    # config
    "PackagingConfig",
    "load_packaging_config",
    # main
    "orchestrate",
]
