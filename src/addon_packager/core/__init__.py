"""パッケージングのコア処理群.

- バージョン正規化（Maven形式 → OSGi形式）
- 依存関係の分類（対象/対象外）
- コンテンツ項目の抽出（依存ファイルのマニフェスト解析）
"""

from .classifier import classify_dependency, select_dependencies
from .content import ContentItem, ContentType, extract_content_item
from .dependency import ArtifactCoordinate, Dependency, DependencyType, Scope
from .version import normalize_version

__all__ = [
    "normalize_version",
    "classify_dependency",
    "select_dependencies",
    "extract_content_item",
    "ContentItem",
    "ContentType",
    "ArtifactCoordinate",
    "Dependency",
    "DependencyType",
    "Scope",
]
