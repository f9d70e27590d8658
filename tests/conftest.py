"""テスト用のアーティファクト生成ヘルパー."""

from __future__ import annotations

import io
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from addon_packager.core.manifest_text import format_manifest
from addon_packager.resolver import StaticResolver


def _write_zip(path: Path, entries: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


@pytest.fixture
def make_bundle(tmp_path: Path) -> Callable[..., Path]:
    """META-INF/MANIFEST.MF を持つJARを作る."""

    def _make(name: str, headers: dict[str, str] | None, extra: dict[str, bytes] | None = None) -> Path:
        entries: dict[str, bytes] = {}
        if headers is not None:
            entries["META-INF/MANIFEST.MF"] = format_manifest({"Manifest-Version": "1.0", **headers}).encode("utf-8")
        entries.update(extra or {})
        return _write_zip(tmp_path / "artifacts" / name, entries)

    return _make


@pytest.fixture
def make_feature(tmp_path: Path) -> Callable[..., Path]:
    """OSGI-INF/SUBSYSTEM.MF を持つ .esa を作る（headers=None ならエントリ無し）."""

    def _make(name: str, headers: dict[str, str] | None) -> Path:
        entries: dict[str, bytes] = {"README.txt": b"feature"}
        if headers is not None:
            entries["OSGI-INF/SUBSYSTEM.MF"] = format_manifest(headers).encode("utf-8")
        return _write_zip(tmp_path / "artifacts" / name, entries)

    return _make


@pytest.fixture
def make_config_file(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, text: str = "key=value\n") -> Path:
        path = tmp_path / "artifacts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _make


@pytest.fixture
def make_template(tmp_path: Path) -> Callable[..., Path]:
    """`<root>/bin/start.sh` 等を含むディストリビューションテンプレートを作る."""

    def _make(name: str, root: str, fmt: str) -> Path:
        files = {
            f"{root}/bin/start.sh": b"#!/bin/sh\necho start\n",
            f"{root}/etc/system.properties": b"a=b\n",
            f"{root}/addons/.keep": b"",
        }
        path = tmp_path / "templates" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "zip":
            return _write_zip(path, files)
        with tarfile.open(path, "w:gz") as tf:
            for arcname, data in files.items():
                info = tarfile.TarInfo(arcname)
                info.size = len(data)
                tf.addfile(info, io.BytesIO(data))
        return path

    return _make


@pytest.fixture
def resolver() -> StaticResolver:
    return StaticResolver()
