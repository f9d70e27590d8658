"""Addon packager exceptions.

パッケージング処理で発生する例外クラスを定義します。
いずれの例外もリトライ対象ではなく、設定または環境の問題としてビルド全体を中断します。
"""


class PackagingError(Exception):
    """パッケージング処理の基底例外.

    Attributes:
        subject: 問題のあった依存関係の座標、またはファイルパス
    """

    def __init__(self, message: str, subject: str | None = None) -> None:
        """例外初期化.

        Args:
            message: エラーメッセージ
            subject: 問題のあった依存関係の座標、またはファイルパス
        """
        self.subject = subject
        super().__init__(message)


class ConfigurationError(PackagingError):
    """設定値が不正（未対応のディストリビューション種別、packaging種別の誤り等）."""


class ResolutionError(PackagingError):
    """アーティファクト座標を解決できない."""


class ManifestError(PackagingError):
    """マニフェストの必須ヘッダ欠落、バージョン不一致、未対応の依存関係."""


class ArchiveError(PackagingError):
    """アーカイブの作成・展開時のI/Oエラー."""
