"""プロジェクト・アドオン・ディストリビューションの設定値."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from addon_packager.core.dependency import ArtifactCoordinate

DISTRIBUTION_TYPE_AUTO = "auto"


@dataclass(frozen=True)
class ProjectMetadata:
    group_id: str
    artifact_id: str
    version: str
    packaging: str = "pom"
    name: str | None = None
    description: str | None = None
    url: str | None = None
    organization: str | None = None
    license_urls: tuple[str, ...] = ()
    final_name: str | None = None
    output_directory: Path = Path("target")

    @property
    def build_name(self) -> str:
        """成果物のファイル名（拡張子なし）. 既定は `artifactId-version`."""
        return self.final_name or f"{self.artifact_id}-{self.version}"


@dataclass(frozen=True)
class AddonMetadata:
    """アドオン（フィーチャーパッケージ）のマニフェスト元情報.

    未指定の項目はプロジェクト定義から補う（`from_project` 参照）。
    """

    symbolic_name: str
    version: str
    vendor: str | None = None
    license: str | None = None
    name: str | None = None
    doc_url: str | None = None
    description: str | None = None
    embed_dependencies: bool = True
    license_urls: tuple[str, ...] = ()

    @classmethod
    def from_project(cls, project: ProjectMetadata, **overrides: object) -> AddonMetadata:
        """プロジェクト定義を既定値としてアドオン情報を作る.

        Args:
            project: プロジェクト定義
            **overrides: 明示的に設定された値（None は未設定扱い）
        """
        values = {
            "symbolic_name": project.artifact_id,
            "version": project.version,
            "vendor": project.organization,
            "license": None,
            "name": project.name,
            "doc_url": project.url,
            "description": project.description,
            "embed_dependencies": True,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(license_urls=project.license_urls, **values)


@dataclass(frozen=True)
class DistributionOptions:
    """ディストリビューション組み立ての設定.

    Attributes:
        version: テンプレートのバージョン（明示指定時はこれで座標を組み立てる）
        type: "auto" / "zip" / "tar.gz"
        templates: ツール自身が宣言している実行時アーティファクト（テンプレート候補）
    """

    version: str | None = None
    type: str = DISTRIBUTION_TYPE_AUTO
    templates: tuple[ArtifactCoordinate, ...] = field(default_factory=tuple)
