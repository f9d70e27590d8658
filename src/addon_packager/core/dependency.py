"""依存関係モデル.

プロジェクト定義（packaging.yml）から読み込む依存関係を不変の値として表現します。
宣言された種別は閉じた列挙（module/config/feature/other）に寄せ、以降の処理は
この列挙に対してディスパッチします。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import ConfigurationError


class DependencyType(str, Enum):
    """依存関係の宣言種別."""

    MODULE = "module"  # 自己記述的なモジュール（バンドルJAR）
    CONFIG = "config"  # 設定ファイル（.cfg）
    FEATURE = "feature"  # フィーチャーパッケージ（.esa）
    OTHER = "other"  # 上記以外（パッケージング対象外）

    @classmethod
    def from_raw(cls, raw: str | None) -> DependencyType:
        """設定上の種別文字列（Maven の type 表記も可）を列挙値へ変換する."""
        if raw is None:
            return cls.MODULE
        key = raw.strip().lower()
        if not key:
            return cls.MODULE
        return _TYPE_ALIASES.get(key, cls.OTHER)


_TYPE_ALIASES = {
    "module": DependencyType.MODULE,
    "jar": DependencyType.MODULE,
    "config": DependencyType.CONFIG,
    "cfg": DependencyType.CONFIG,
    "feature": DependencyType.FEATURE,
    "esa": DependencyType.FEATURE,
}

# 種別ごとのアーティファクト拡張子
DEFAULT_EXTENSIONS = {
    DependencyType.MODULE: "jar",
    DependencyType.CONFIG: "cfg",
    DependencyType.FEATURE: "esa",
}


class Scope(str, Enum):
    """依存関係のスコープ."""

    COMPILE = "compile"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    TEST = "test"
    IMPORT = "import"
    NONE = "none"

    @classmethod
    def from_raw(cls, raw: str | None) -> Scope:
        if raw is None or not raw.strip():
            return cls.NONE
        return cls(raw.strip().lower())


@dataclass(frozen=True)
class ArtifactCoordinate:
    """リポジトリ上のアーティファクト座標."""

    group_id: str
    artifact_id: str
    version: str
    extension: str = "jar"
    classifier: str | None = None

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)

    @property
    def file_name(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact_id}-{self.version}{suffix}.{self.extension}"

    @property
    def repository_path(self) -> str:
        """Maven2 リポジトリレイアウトでの相対パス."""
        group_path = self.group_id.replace(".", "/")
        return f"{group_path}/{self.artifact_id}/{self.version}/{self.file_name}"


@dataclass(frozen=True)
class Dependency:
    group_id: str
    artifact_id: str
    version: str
    classifier: str | None = None
    type: DependencyType = DependencyType.MODULE
    scope: Scope = Scope.NONE
    optional: bool = False
    extension: str | None = None

    @property
    def coordinate(self) -> str:
        """エラーメッセージ/ログ用の座標表記（group:artifact:version）."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def file_extension(self) -> str:
        if self.extension:
            return self.extension
        return DEFAULT_EXTENSIONS.get(self.type, self.type.value)

    def artifact_coordinate(self) -> ArtifactCoordinate:
        """リゾルバへ渡すアーティファクト座標を返す."""
        return ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            extension=self.file_extension,
            classifier=self.classifier,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dependency:
        """packaging.yml の依存関係エントリから生成する.

        Args:
            data: group_id/artifact_id/version 必須、classifier/type/scope/optional 任意

        Raises:
            ValueError: 必須キーの欠落、または不正なスコープ
            ConfigurationError: optional が真偽値でない場合
        """
        missing = [k for k in ("group_id", "artifact_id", "version") if not data.get(k)]
        if missing:
            msg = f"Dependency entry is missing required keys {missing}: {data}"
            raise ValueError(msg)

        raw_type = data.get("type")
        dep_type = DependencyType.from_raw(raw_type)
        extension = data.get("extension")
        if extension is None and dep_type is DependencyType.OTHER:
            # 未知の種別は宣言文字列をそのまま拡張子として扱う
            extension = str(raw_type).strip()

        optional = data.get("optional")
        if optional is None:
            optional = False
        if not isinstance(optional, bool):
            msg = f"Dependency optional flag must be true or false, got {optional!r}: {data}"
            raise ConfigurationError(msg, subject=f"{data['group_id']}:{data['artifact_id']}")

        return cls(
            group_id=str(data["group_id"]),
            artifact_id=str(data["artifact_id"]),
            version=str(data["version"]),
            classifier=data.get("classifier") or None,
            type=dep_type,
            scope=Scope.from_raw(data.get("scope")),
            optional=optional,
            extension=extension,
        )
