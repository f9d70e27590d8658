"""JAR形式マニフェスト（MANIFEST.MF / SUBSYSTEM.MF）の読み書き.

`Name: value` 形式のヘッダ行を扱います。

フォーマット:
    - 1行は最大72バイト（UTF-8）。超える場合は先頭1文字スペースの継続行で折り返す
    - 書き出しの改行は CRLF、読み込みは LF/CRLF/CR いずれも受け付ける
    - 最初の空行までがメインセクション（それ以降の per-entry セクションは読まない）
    - ヘッダ名の照合は大文字小文字を区別しない
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

MAX_LINE_BYTES = 72
_NEWLINE = "\r\n"
# 改行は CR / LF / CRLF のみ（U+2028 等は値の一部）
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ManifestHeaders(Mapping[str, str]):
    """大文字小文字を区別しないヘッダ参照（書き込み順を保持）."""

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, tuple[str, str]] = {}
        if items:
            for name, value in items.items():
                self._items[name.lower()] = (name, value)

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __repr__(self) -> str:
        return f"ManifestHeaders({dict(self.items())!r})"


def parse_manifest(text: str) -> ManifestHeaders:
    """マニフェストのメインセクションを解析する.

    Args:
        text: マニフェスト全文

    Returns:
        ヘッダ名 -> 値 のマッピング

    Raises:
        ValueError: `Name: value` 形式でない行がある場合
    """
    headers: dict[str, str] = {}
    current: str | None = None

    for line in _LINE_BREAK.split(text):
        if not line:
            break
        if line.startswith(" "):
            if current is None:
                raise ValueError(f"Continuation line without header: {line!r}")
            headers[current] += line[1:]
            continue
        name, sep, value = line.partition(":")
        if not sep or not name:
            raise ValueError(f"Invalid manifest header line: {line!r}")
        current = name
        headers[current] = value[1:] if value.startswith(" ") else value

    return ManifestHeaders(headers)


def _wrap_line(line: str) -> list[str]:
    out: list[str] = []
    chunk = ""
    chunk_bytes = 0
    for ch in line:
        size = len(ch.encode("utf-8"))
        if chunk_bytes + size > MAX_LINE_BYTES:
            out.append(chunk)
            # 継続行は先頭スペース分を差し引く
            chunk, chunk_bytes = " ", 1
        chunk += ch
        chunk_bytes += size
    out.append(chunk)
    return out


def format_manifest(headers: Mapping[str, str]) -> str:
    """ヘッダをマニフェスト文字列へ整形する（72バイト折り返し、CRLF）."""
    lines: list[str] = []
    for name, value in headers.items():
        lines.extend(_wrap_line(f"{name}: {value}"))
    return _NEWLINE.join(lines) + _NEWLINE + _NEWLINE


def split_header_clauses(value: str) -> list[str]:
    """OSGiヘッダ値をトップレベルのカンマで句に分割する（引用符内は無視）."""
    clauses: list[str] = []
    buf: list[str] = []
    quoted = False
    for ch in value:
        if ch == '"':
            quoted = not quoted
        if ch == "," and not quoted:
            clauses.append("".join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    tail = "".join(buf).strip()
    if tail:
        clauses.append(tail)
    return [c for c in clauses if c]


def split_clause_parts(clause: str) -> list[str]:
    """句をセミコロンでパスと属性/ディレクティブに分割する（引用符内は無視）."""
    parts: list[str] = []
    buf: list[str] = []
    quoted = False
    for ch in clause:
        if ch == '"':
            quoted = not quoted
        if ch == ";" and not quoted:
            parts.append("".join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf).strip())
    return parts


def parse_header_name(value: str) -> str:
    """OSGiヘッダ値の先頭句のパス部分を返す.

    Examples:
        >>> parse_header_name("com.acme.core;singleton:=true")
        'com.acme.core'
        >>> parse_header_name("1.0.0")
        '1.0.0'
    """
    clauses = split_header_clauses(value)
    if not clauses:
        return ""
    return split_clause_parts(clauses[0])[0]
