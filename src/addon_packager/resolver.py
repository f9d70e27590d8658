"""アーティファクト解決（Maven2 レイアウトのリポジトリ）.

座標からローカルファイルパスを得るリゾルバを提供します。
本番はローカルリポジトリ + リモートリポジトリ（HTTP）、テストは固定のローカルファイル群へ差し替えます。
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import httpx
from loguru import logger

from addon_packager.core.dependency import ArtifactCoordinate
from addon_packager.core.exceptions import ResolutionError

DEFAULT_LOCAL_REPOSITORY = Path.home() / ".m2" / "repository"
DEFAULT_REMOTE_REPOSITORIES = ("https://repo.maven.apache.org/maven2",)


class ArtifactResolver(Protocol):
    def resolve(self, coordinate: ArtifactCoordinate) -> Path: ...


def _failure(coordinate: ArtifactCoordinate) -> ResolutionError:
    return ResolutionError(
        f"Failed to resolve artifact: {coordinate.group_id}:{coordinate.artifact_id}:{coordinate.version}",
        subject=str(coordinate),
    )


class MavenRepositoryResolver:
    """ローカルリポジトリを優先し、無ければリモートから取得してキャッシュするリゾルバ."""

    def __init__(
        self,
        local_repository: Path | str = DEFAULT_LOCAL_REPOSITORY,
        remote_repositories: Iterable[str] = DEFAULT_REMOTE_REPOSITORIES,
        timeout: float = 300,
        client: httpx.Client | None = None,
    ) -> None:
        """リゾルバを初期化.

        Args:
            local_repository: ローカルリポジトリのルート
            remote_repositories: リモートリポジトリのベースURL（先頭から順に試す）
            timeout: ダウンロードのタイムアウト秒
            client: 使用する httpx クライアント（テストで差し替え用）
        """
        self.local_repository = Path(local_repository)
        self.remote_repositories = [url.rstrip("/") for url in remote_repositories]
        self.timeout = timeout
        self._client = client

    def resolve(self, coordinate: ArtifactCoordinate) -> Path:
        """座標をローカルファイルパスへ解決する.

        Raises:
            ResolutionError: どのリポジトリにも見つからない場合
        """
        local_path = self.local_repository / coordinate.repository_path
        if local_path.is_file():
            logger.debug(f"Resolved {coordinate} from local repository: {local_path}")
            return local_path

        for base_url in self.remote_repositories:
            url = f"{base_url}/{coordinate.repository_path}"
            if self._download(url, local_path):
                logger.info(f"Downloaded {coordinate} from {base_url}")
                return local_path

        raise _failure(coordinate)

    def _download(self, url: str, dest: Path) -> bool:
        client = self._client or httpx.Client(follow_redirects=True, timeout=self.timeout)
        part_path = dest.with_name(dest.name + ".part")
        try:
            with client.stream("GET", url) as r:
                if r.status_code == 404:
                    logger.debug(f"Not found: {url}")
                    return False
                r.raise_for_status()
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(part_path, "wb") as f:
                    for chunk in r.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            logger.warning(f"Download failed: {url} ({e})")
            part_path.unlink(missing_ok=True)
            return False
        finally:
            if self._client is None:
                client.close()

        part_path.replace(dest)
        return True


class StaticResolver:
    """座標 -> ローカルファイルの固定マッピングで解決するリゾルバ."""

    def __init__(self, artifacts: dict[ArtifactCoordinate, Path] | None = None) -> None:
        self._artifacts: dict[ArtifactCoordinate, Path] = dict(artifacts or {})

    def add(self, coordinate: ArtifactCoordinate, path: Path) -> None:
        self._artifacts[coordinate] = Path(path)

    def resolve(self, coordinate: ArtifactCoordinate) -> Path:
        path = self._artifacts.get(coordinate)
        if path is None or not path.exists():
            raise _failure(coordinate)
        return path
