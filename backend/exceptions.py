"""
例外定義モジュール

ワークスペース処理で発生するエラー種別を定義します。
"""

from typing import Optional


class SGoVError(Exception):
    """アプリケーション例外の基底クラス"""


class NotFoundError(SGoVError):
    """ワークスペース・語彙コンテキスト・語彙が存在しない"""

    @classmethod
    def create(cls, resource_name: str, identifier: object) -> "NotFoundError":
        return cls(f"{resource_name} identified by {identifier} not found.")


class PublicationError(SGoVError):
    """ワークスペース公開時のエラー"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class VocabularyConflictError(SGoVError):
    """語彙の読み書き排他性に違反する"""

    def __init__(self, vocabulary_uri: str, holders: list):
        super().__init__(
            f"Vocabulary {vocabulary_uri} is already registered read-write "
            f"in workspace(s) {', '.join(holders)}."
        )
        self.vocabulary_uri = vocabulary_uri
        self.holders = list(holders)


class GraphStoreError(SGoVError):
    """トリプルストアへのアクセスエラー"""


class GitError(SGoVError):
    """gitコマンドの実行エラー"""
