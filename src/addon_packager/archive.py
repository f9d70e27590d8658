"""アーカイブの作成・展開（zip / tar.gz）.

ディストリビューション形式ごとにアーカイバを1つ選び、組み立て処理へ注入します。
テストでは同じインターフェースの偽実装に差し替えられます。
"""

from __future__ import annotations

import tarfile
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from loguru import logger

from addon_packager.core.exceptions import ArchiveError, ConfigurationError

FORMAT_ZIP = "zip"
FORMAT_TAR_GZ = "tar.gz"


class Archiver(Protocol):
    extension: str

    def create(
        self,
        dest_file: Path,
        source_tree: Path,
        extra_files: Iterable[tuple[Path, str]] = (),
    ) -> Path: ...

    def extract(self, source_file: Path, dest_dir: Path) -> None: ...


def _iter_tree(source_tree: Path) -> list[tuple[Path, str]]:
    """ディレクトリ配下のファイルを (実パス, アーカイブ内パス) で列挙する（順序固定）."""
    entries: list[tuple[Path, str]] = []
    for path in sorted(source_tree.rglob("*")):
        entries.append((path, path.relative_to(source_tree).as_posix()))
    return entries


class ZipArchiver:
    extension = FORMAT_ZIP

    def create(
        self,
        dest_file: Path,
        source_tree: Path,
        extra_files: Iterable[tuple[Path, str]] = (),
    ) -> Path:
        """source_tree の内容（と追加ファイル）をルートに持つzipを作成する.

        Raises:
            ArchiveError: 書き込みに失敗した場合
        """
        dest_file = Path(dest_file)
        try:
            dest_file.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(dest_file, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for path, arcname in _iter_tree(Path(source_tree)):
                    zf.write(path, arcname)
                for path, arcname in extra_files:
                    zf.write(path, arcname)
        except OSError as e:
            raise ArchiveError(f"Cannot create archive: {dest_file}", subject=str(dest_file)) from e
        logger.debug(f"Created zip archive: {dest_file}")
        return dest_file

    def extract(self, source_file: Path, dest_dir: Path) -> None:
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(source_file) as zf:
                for info in zf.infolist():
                    target = Path(zf.extract(info, dest_dir))
                    # zipfile はUnixパーミッションを復元しない（起動スクリプトの実行ビット等）
                    mode = (info.external_attr >> 16) & 0o7777
                    if mode and not info.is_dir():
                        target.chmod(mode)
        except (OSError, zipfile.BadZipFile) as e:
            msg = f"Failed to unpack {source_file} to {dest_dir}"
            raise ArchiveError(msg, subject=str(source_file)) from e


class TarGzArchiver:
    extension = FORMAT_TAR_GZ

    def create(
        self,
        dest_file: Path,
        source_tree: Path,
        extra_files: Iterable[tuple[Path, str]] = (),
    ) -> Path:
        """source_tree の内容（と追加ファイル）をルートに持つ tar.gz を作成する.

        長いパス名は GNU 形式で格納する。

        Raises:
            ArchiveError: 書き込みに失敗した場合
        """
        dest_file = Path(dest_file)
        try:
            dest_file.parent.mkdir(parents=True, exist_ok=True)
            with tarfile.open(dest_file, "w:gz", format=tarfile.GNU_FORMAT) as tf:
                for path, arcname in _iter_tree(Path(source_tree)):
                    tf.add(path, arcname, recursive=False)
                for path, arcname in extra_files:
                    tf.add(path, arcname, recursive=False)
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"Cannot create archive: {dest_file}", subject=str(dest_file)) from e
        logger.debug(f"Created tar.gz archive: {dest_file}")
        return dest_file

    def extract(self, source_file: Path, dest_dir: Path) -> None:
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            with tarfile.open(source_file, "r:gz") as tf:
                tf.extractall(dest_dir, filter="data")
        except (OSError, tarfile.TarError) as e:
            msg = f"Failed to unpack {source_file} to {dest_dir}"
            raise ArchiveError(msg, subject=str(source_file)) from e


def archiver_for(distribution_format: str) -> Archiver:
    """解決済みのディストリビューション形式に対応するアーカイバを返す."""
    if distribution_format == FORMAT_ZIP:
        return ZipArchiver()
    if distribution_format == FORMAT_TAR_GZ:
        return TarGzArchiver()
    raise ConfigurationError(
        f"Unsupported distribution type: {distribution_format}",
        subject=distribution_format,
    )
