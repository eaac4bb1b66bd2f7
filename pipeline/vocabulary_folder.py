"""
語彙フォルダモジュール

語彙IRIとリポジトリ内のフォルダ構成（compactファイル＋派生ファイル）を対応付けます。

    https://slovník.gov.cz/legislativní/sbírka/111/2009
        -> content/vocabularies/l-sgov-sbírka-111-2009/
               l-sgov-sbírka-111-2009.ttl           (compact)
               l-sgov-sbírka-111-2009-slovník.ttl
               l-sgov-sbírka-111-2009-glosář.ttl
               l-sgov-sbírka-111-2009-model.ttl
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from backend.config import VOCABULARIES_DIR
from ontology import SGOV_NS

SGOV_BASE = SGOV_NS

# 語彙種別 -> フォルダ接頭辞
VOCABULARY_KINDS = {
    "legislativní": "l",
    "generický": "g",
    "veřejný-sektor": "v",
    "agendový": "a",
    "datový": "d",
}


@dataclass(frozen=True)
class VocabularyInstance:
    """SGoV語彙IRIの構造化表現"""
    iri: str
    kind: str
    path: tuple

    @classmethod
    def parse(cls, iri: str) -> "VocabularyInstance":
        """
        語彙IRIを解析

        Raises:
            ValueError: IRIがSGoV語彙IRIの形式でない場合
        """
        if not iri or not iri.startswith(SGOV_BASE):
            raise ValueError(f"Vocabulary IRI {iri} does not start with {SGOV_BASE}")
        segments = iri[len(SGOV_BASE):].rstrip("/").split("/")
        kind, path = segments[0], tuple(segments[1:])
        if kind not in VOCABULARY_KINDS:
            raise ValueError(f"Unknown vocabulary kind '{kind}' in {iri}")
        if not path or any(not s or s.strip() != s or " " in s for s in path):
            raise ValueError(f"Vocabulary IRI {iri} has an invalid path")
        return cls(iri=iri, kind=kind, path=path)

    @property
    def folder_id(self) -> str:
        return f"{VOCABULARY_KINDS[self.kind]}-sgov-{'-'.join(self.path)}"


class VocabularyFolder:
    """語彙1つ分のフォルダ"""

    def __init__(self, folder: Path, instance: VocabularyInstance):
        self.folder = folder
        self.instance = instance

    @classmethod
    def of_vocabulary_iri(
        cls, root: Union[str, Path], instance: VocabularyInstance
    ) -> "VocabularyFolder":
        """作業ディレクトリ内の語彙フォルダを取得（存在しなければ作成）"""
        folder = Path(root) / VOCABULARIES_DIR / instance.folder_id
        folder.mkdir(parents=True, exist_ok=True)
        return cls(folder, instance)

    def file(self, suffix: str = "") -> Path:
        name = self.instance.folder_id
        if suffix:
            name = f"{name}-{suffix}"
        return self.folder / f"{name}.ttl"

    @property
    def compact_file(self) -> Path:
        return self.file()

    @property
    def vocabulary_file(self) -> Path:
        return self.file("slovník")

    @property
    def glossary_file(self) -> Path:
        return self.file("glosář")

    @property
    def model_file(self) -> Path:
        return self.file("model")

    def to_prune_all_except_compact(self) -> List[Path]:
        """compactファイル以外の既存ファイル一覧"""
        compact = self.compact_file.name
        return sorted(
            p for p in self.folder.iterdir()
            if p.is_file() and p.name != compact
        )
