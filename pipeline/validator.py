"""
SHACL検証モジュール

語彙データをSHACL用語集ルールで検証します。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from pyshacl import validate
from rdflib import Graph, Literal
from rdflib.namespace import RDF, SH

from ontology import GLOSSARY_RULES_TTL


@dataclass
class ValidationResult:
    """単一の検証結果"""
    severity: str
    focus_node: Optional[str]
    value: Optional[str]
    message: Optional[str]
    source_shape: Optional[str] = None
    result_path: Optional[str] = None


@dataclass
class ValidationReport:
    """検証レポート"""
    conforms: bool
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def violation_count(self) -> int:
        return sum(1 for r in self.results if r.severity == "Violation")


def _local_name(uri) -> str:
    text = str(uri)
    return text.split("#")[-1].split("/")[-1]


def _pick_message(messages: List[Literal]) -> Optional[str]:
    """英語のメッセージを優先して1つ選ぶ"""
    if not messages:
        return None
    for message in messages:
        if getattr(message, "language", None) == "en":
            return str(message)
    return str(messages[0])


def parse_report(results_graph: Graph, conforms: bool) -> ValidationReport:
    """pySHACLの結果グラフを構造化レポートへ変換"""
    results = []
    for result in results_graph.subjects(RDF.type, SH.ValidationResult):
        severity = results_graph.value(result, SH.resultSeverity)
        focus_node = results_graph.value(result, SH.focusNode)
        value = results_graph.value(result, SH.value)
        source_shape = results_graph.value(result, SH.sourceShape)
        path = results_graph.value(result, SH.resultPath)
        messages = list(results_graph.objects(result, SH.resultMessage))
        results.append(
            ValidationResult(
                severity=_local_name(severity) if severity is not None else "Violation",
                focus_node=str(focus_node) if focus_node is not None else None,
                value=str(value) if value is not None else None,
                message=_pick_message(messages),
                source_shape=str(source_shape) if source_shape is not None else None,
                result_path=str(path) if path is not None else None,
            )
        )
    return ValidationReport(conforms=conforms, results=results)


class RuleValidator:
    """SHACL検証を行うクラス"""

    def __init__(self, shapes_path: Optional[str] = None):
        """
        Args:
            shapes_path: SHACLシェイプファイルのパス
        """
        self.shapes_path = Path(shapes_path) if shapes_path else GLOSSARY_RULES_TTL
        self.shapes_graph = None
        self._load_shapes()

    def _load_shapes(self):
        """SHACLシェイプをロード"""
        self.shapes_graph = Graph()
        self.shapes_graph.parse(str(self.shapes_path), format="turtle")

    def validate(
        self,
        data_graph: Graph,
        shapes_graph: Optional[Graph] = None,
        inference: str = "rdfs",
    ) -> ValidationReport:
        """
        RDFデータをSHACL検証

        Args:
            data_graph: 検証対象のグラフ
            shapes_graph: シェイプグラフ（省略時は用語集ルール）
            inference: 推論モード ("none", "rdfs", "owlrl", "both")

        Returns:
            検証レポート
        """
        conforms, results_graph, _ = validate(
            data_graph,
            shacl_graph=shapes_graph if shapes_graph is not None else self.shapes_graph,
            inference=inference,
            do_owl_imports=False,
            abort_on_first=False,
            meta_shacl=False,
            debug=False,
        )
        return parse_report(results_graph, conforms)
