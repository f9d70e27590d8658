"""バージョン文字列の正規化（Maven形式 → OSGi形式）.

ゆるい書式のバージョン文字列を `major.minor.micro[.qualifier]` の4要素形式へ変換します。

設計方針:
    - 変換は失敗しない（入力が何であっても有効なバージョンを返す）
    - 正規化済み文字列を再度正規化しても変化しない（冪等）
"""

from __future__ import annotations

import re

DEFAULT_VERSION = "0.0.0"

_SEPARATOR = re.compile(r"[.\-]")
_NUMERIC = re.compile(r"^[0-9]+$")
_INVALID_QUALIFIER_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


def normalize_version(raw: str | None) -> str:
    """バージョン文字列を OSGi の厳密な形式へ正規化する.

    Args:
        raw: 入力バージョン（例: "1.2.3-SNAPSHOT", "2", None）

    Returns:
        正規化済みバージョン（例: "1.2.3.SNAPSHOT", "2.0.0", "0.0.0"）

    Examples:
        >>> normalize_version("1.2.3-SNAPSHOT")
        '1.2.3.SNAPSHOT'
        >>> normalize_version("2")
        '2.0.0'
        >>> normalize_version("1.0-beta-2")
        '1.0.0.beta-2'
        >>> normalize_version(None)
        '0.0.0'
    """
    if raw is None:
        return DEFAULT_VERSION
    s = raw.strip()
    if not s:
        return DEFAULT_VERSION

    numbers: list[int] = []
    pos = 0
    while len(numbers) < 3:
        match = _SEPARATOR.search(s, pos)
        end = match.start() if match else len(s)
        segment = s[pos:end]
        if not _NUMERIC.match(segment):
            break
        numbers.append(int(segment))
        if match is None:
            pos = len(s)
            break
        pos = match.end()

    qualifier = s[pos:].strip(".-")

    while len(numbers) < 3:
        numbers.append(0)

    version = ".".join(str(n) for n in numbers)
    if qualifier:
        # 修飾子に使えない文字（"." 等）は "_" に寄せる
        version = f"{version}.{_INVALID_QUALIFIER_CHARS.sub('_', qualifier)}"
    return version
