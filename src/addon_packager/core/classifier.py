"""依存関係の分類（パッケージング対象か否か）.

スコープ・optional フラグ・宣言種別だけで判定する純粋関数です（I/Oなし）。

判定順:
    1. スコープ（provided/runtime/test/import は除外）
    2. optional フラグ
    3. 種別（module/config/feature 以外は除外）

NOTE:
    ここで対象となる種別は、コンテンツ抽出が扱える種別（module/feature）より広い。
    config はディストリビューション組み立てでのみ有効で、アドオンのマニフェスト生成に
    渡すと抽出側でエラーになる。
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from .dependency import Dependency, DependencyType, Scope

EXCLUDED_SCOPES = frozenset({Scope.PROVIDED, Scope.RUNTIME, Scope.TEST, Scope.IMPORT})
SUPPORTED_TYPES = frozenset({DependencyType.MODULE, DependencyType.CONFIG, DependencyType.FEATURE})


class ExclusionReason(str, Enum):
    SCOPE = "scope-excluded"
    OPTIONAL = "optional-excluded"
    TYPE = "type-unsupported"


@dataclass(frozen=True)
class Included:
    dependency: Dependency

    @property
    def included(self) -> bool:
        return True


@dataclass(frozen=True)
class Excluded:
    dependency: Dependency
    reason: ExclusionReason

    @property
    def included(self) -> bool:
        return False


Classification = Included | Excluded


def classify_dependency(dep: Dependency) -> Classification:
    """依存関係をパッケージング対象/対象外に分類する."""
    if dep.scope in EXCLUDED_SCOPES:
        return Excluded(dep, ExclusionReason.SCOPE)
    if dep.optional:
        return Excluded(dep, ExclusionReason.OPTIONAL)
    if dep.type not in SUPPORTED_TYPES:
        return Excluded(dep, ExclusionReason.TYPE)
    return Included(dep)


def select_dependencies(dependencies: Iterable[Dependency]) -> list[Dependency]:
    """対象となる依存関係のみを宣言順のまま返す.

    Args:
        dependencies: プロジェクトの依存関係リスト

    Returns:
        パッケージング対象の依存関係リスト（宣言順）
    """
    selected: list[Dependency] = []
    for dep in dependencies:
        result = classify_dependency(dep)
        if isinstance(result, Excluded):
            logger.debug(f"Dependency excluded ({result.reason.value}): {dep.coordinate}")
            continue
        selected.append(dep)
    return selected
