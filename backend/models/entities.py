"""
エンティティ定義

ワークスペース・語彙コンテキスト・変更追跡コンテキストを表します。
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ontology import VOCABULARY_CONTEXT_READONLY


def new_uri(class_iri: str) -> str:
    """クラスIRIから新しいインスタンスIRIを生成"""
    return f"{class_iri}/instance-{uuid.uuid4()}"


@dataclass(eq=False)
class ChangeTrackingContext:
    """語彙コンテキストに対する変更ログ"""
    uri: Optional[str] = None
    changes_vocabulary_version: Optional[str] = None

    def __eq__(self, other):
        if not isinstance(other, ChangeTrackingContext):
            return NotImplemented
        if self.uri is None or other.uri is None:
            return self is other
        return self.uri == other.uri

    def __hash__(self):
        return hash(self.uri) if self.uri is not None else id(self)


class VocabularyContext:
    """ワークスペース内の語彙の作業コピー"""

    def __init__(
        self,
        uri: Optional[str] = None,
        based_on_vocabulary_version: Optional[str] = None,
        change_tracking_context: Optional[ChangeTrackingContext] = None,
        types: Optional[Set[str]] = None,
    ):
        self.uri = uri
        self._based_on_vocabulary_version = None
        if based_on_vocabulary_version is not None:
            self.based_on_vocabulary_version = based_on_vocabulary_version
        self.change_tracking_context = change_tracking_context
        self.types: Set[str] = set(types or ())

    @classmethod
    def stub(cls, vocabulary_uri: str) -> "VocabularyContext":
        """語彙に基づく空のコンテキストを変更追跡コンテキスト付きで生成"""
        return cls(
            based_on_vocabulary_version=vocabulary_uri,
            change_tracking_context=ChangeTrackingContext(
                changes_vocabulary_version=vocabulary_uri
            ),
        )

    @property
    def based_on_vocabulary_version(self) -> Optional[str]:
        return self._based_on_vocabulary_version

    @based_on_vocabulary_version.setter
    def based_on_vocabulary_version(self, value: str):
        # 一度設定したら変更不可
        if self._based_on_vocabulary_version not in (None, value):
            raise ValueError(
                f"Vocabulary context {self.uri} is already based on "
                f"{self._based_on_vocabulary_version}"
            )
        self._based_on_vocabulary_version = value

    @property
    def readonly(self) -> bool:
        return VOCABULARY_CONTEXT_READONLY in self.types

    @readonly.setter
    def readonly(self, value: bool):
        if value:
            self.types.add(VOCABULARY_CONTEXT_READONLY)
        else:
            self.types.discard(VOCABULARY_CONTEXT_READONLY)

    def __eq__(self, other):
        if not isinstance(other, VocabularyContext):
            return NotImplemented
        if self.uri is None or other.uri is None:
            return self is other
        return self.uri == other.uri

    def __hash__(self):
        return hash(self.uri) if self.uri is not None else id(self)

    def __repr__(self):
        return f"VocabularyContext{{ <{self.uri}> }}"


@dataclass(eq=False)
class Workspace:
    """語彙コンテキスト参照の集合"""
    uri: Optional[str] = None
    label: Optional[str] = None
    vocabulary_contexts: List[VocabularyContext] = field(default_factory=list)

    def get_vocabulary_context(self, vocabulary_uri: str) -> Optional[VocabularyContext]:
        """語彙IRIに基づくコンテキストを取得"""
        for context in self.vocabulary_contexts:
            if context.based_on_vocabulary_version == vocabulary_uri:
                return context
        return None

    def find_vocabulary_context(self, context_uri: str) -> Optional[VocabularyContext]:
        """コンテキストIRIでコンテキストを取得"""
        for context in self.vocabulary_contexts:
            if context.uri == context_uri:
                return context
        return None

    def add_vocabulary_context(self, context: VocabularyContext) -> None:
        """
        コンテキストを追加

        Raises:
            ValueError: 同じ語彙のコンテキストが既に存在する場合
        """
        if self.get_vocabulary_context(context.based_on_vocabulary_version) is not None:
            raise ValueError(
                f"Workspace {self.uri} already contains vocabulary "
                f"{context.based_on_vocabulary_version}"
            )
        self.vocabulary_contexts.append(context)

    def remove_vocabulary_context(self, context: VocabularyContext) -> None:
        self.vocabulary_contexts = [c for c in self.vocabulary_contexts if c is not context]

    @property
    def local_name(self) -> str:
        return self.uri[self.uri.rfind("/") + 1:]
