"""
エンティティとRDFの対応表

エンティティ種別ごとに「属性名 -> 述語」を明示的に定義し、
汎用のto_graph / from_graphで読み書きします。
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF, RDFS

from backend.models.entities import (
    ChangeTrackingContext,
    VocabularyContext,
    Workspace,
    new_uri,
)
from ontology import (
    BASED_ON_VOCABULARY_VERSION,
    CHANGE_TRACKING_CONTEXT,
    CHANGES_VOCABULARY_VERSION,
    HAS_CHANGE_TRACKING_CONTEXT,
    REFERS_TO_VOCABULARY_CONTEXT,
    VOCABULARY_CONTEXT,
    WORKSPACE,
)

# 属性の種類
LITERAL = "literal"          # 文字列リテラル
IRI = "iri"                  # 外部IRI（所有しない）
REFERENCE = "reference"      # 単一の所有エンティティ
REFERENCES = "references"    # 所有エンティティのリスト
TYPES = "types"              # 追加のrdf:type


@dataclass(frozen=True)
class FieldMapping:
    attribute: str
    predicate: URIRef
    kind: str
    target: Optional[type] = None
    required: bool = False


@dataclass(frozen=True)
class EntityMapping:
    rdf_type: URIRef
    fields: Tuple[FieldMapping, ...]


MAPPINGS: Dict[type, EntityMapping] = {
    Workspace: EntityMapping(
        rdf_type=URIRef(WORKSPACE),
        fields=(
            FieldMapping("label", RDFS.label, LITERAL),
            FieldMapping(
                "vocabulary_contexts",
                URIRef(REFERS_TO_VOCABULARY_CONTEXT),
                REFERENCES,
                target=VocabularyContext,
            ),
        ),
    ),
    VocabularyContext: EntityMapping(
        rdf_type=URIRef(VOCABULARY_CONTEXT),
        fields=(
            FieldMapping(
                "based_on_vocabulary_version",
                URIRef(BASED_ON_VOCABULARY_VERSION),
                IRI,
                required=True,
            ),
            FieldMapping(
                "change_tracking_context",
                URIRef(HAS_CHANGE_TRACKING_CONTEXT),
                REFERENCE,
                target=ChangeTrackingContext,
                required=True,
            ),
            FieldMapping("types", RDF.type, TYPES),
        ),
    ),
    ChangeTrackingContext: EntityMapping(
        rdf_type=URIRef(CHANGE_TRACKING_CONTEXT),
        fields=(
            FieldMapping(
                "changes_vocabulary_version",
                URIRef(CHANGES_VOCABULARY_VERSION),
                IRI,
                required=True,
            ),
        ),
    ),
}


def to_graph(entity, graph: Optional[Graph] = None) -> Graph:
    """
    エンティティと所有エンティティをグラフへ書き出す

    Raises:
        ValueError: IRI未設定、または必須属性が欠けている場合
    """
    if graph is None:
        graph = Graph()
    mapping = MAPPINGS[type(entity)]
    if entity.uri is None:
        raise ValueError(f"{type(entity).__name__} has no IRI")
    subject = URIRef(entity.uri)
    graph.add((subject, RDF.type, mapping.rdf_type))

    for f in mapping.fields:
        value = getattr(entity, f.attribute)
        if value is None or value == [] or value == set():
            if f.required:
                raise ValueError(
                    f"{type(entity).__name__} {entity.uri} is missing required {f.attribute}"
                )
            continue
        if f.kind == LITERAL:
            graph.add((subject, f.predicate, Literal(value)))
        elif f.kind == IRI:
            graph.add((subject, f.predicate, URIRef(value)))
        elif f.kind == REFERENCE:
            graph.add((subject, f.predicate, URIRef(value.uri)))
            to_graph(value, graph)
        elif f.kind == REFERENCES:
            for item in value:
                graph.add((subject, f.predicate, URIRef(item.uri)))
                to_graph(item, graph)
        elif f.kind == TYPES:
            for t in value:
                graph.add((subject, f.predicate, URIRef(t)))
    return graph


def from_graph(graph: Graph, uri: str, cls: type):
    """
    グラフからエンティティを復元

    Returns:
        エンティティ（指定クラスの型付けがない場合はNone）

    Raises:
        ValueError: 必須属性が欠けている場合
    """
    mapping = MAPPINGS[cls]
    subject = URIRef(uri)
    if (subject, RDF.type, mapping.rdf_type) not in graph:
        return None

    entity = cls()
    entity.uri = str(subject)
    for f in mapping.fields:
        if f.kind == LITERAL:
            value = graph.value(subject, f.predicate)
            if value is not None:
                setattr(entity, f.attribute, str(value))
        elif f.kind == IRI:
            value = graph.value(subject, f.predicate)
            if value is not None:
                setattr(entity, f.attribute, str(value))
        elif f.kind == REFERENCE:
            value = graph.value(subject, f.predicate)
            if value is not None:
                setattr(entity, f.attribute, from_graph(graph, value, f.target))
        elif f.kind == REFERENCES:
            items = []
            for o in sorted(graph.objects(subject, f.predicate)):
                item = from_graph(graph, o, f.target)
                # 別種のコンテキストは対象外
                if item is not None:
                    items.append(item)
            setattr(entity, f.attribute, items)
        elif f.kind == TYPES:
            types = {
                str(t) for t in graph.objects(subject, f.predicate)
                if t != mapping.rdf_type
            }
            setattr(entity, f.attribute, types)

        if f.required and getattr(entity, f.attribute) is None:
            raise ValueError(f"{cls.__name__} {uri} is missing required {f.attribute}")
    return entity


def _managed_triples(graph: Graph, subject, cls: type, managed: Graph) -> None:
    mapping = MAPPINGS[cls]
    if (subject, RDF.type, mapping.rdf_type) not in graph:
        return
    managed.add((subject, RDF.type, mapping.rdf_type))
    for f in mapping.fields:
        for o in graph.objects(subject, f.predicate):
            if f.kind in (REFERENCE, REFERENCES):
                # 対応表の型を持たない参照先は管理外
                if (o, RDF.type, MAPPINGS[f.target].rdf_type) not in graph:
                    continue
                _managed_triples(graph, o, f.target, managed)
            managed.add((subject, f.predicate, o))


def unmapped_triples(graph: Graph, uri: str, cls: type) -> Graph:
    """
    対応表で管理されないトリプル（別種のコンテキストへの参照など）を取り出す

    Returns:
        graphのうち、uriから対応表をたどって到達できないトリプル
    """
    managed = Graph()
    _managed_triples(graph, URIRef(uri), cls, managed)
    rest = Graph()
    for triple in graph:
        if triple not in managed:
            rest.add(triple)
    return rest


def assign_uris(entity) -> None:
    """IRI未設定のエンティティ（所有エンティティを含む）にIRIを割り当てる"""
    mapping = MAPPINGS[type(entity)]
    if entity.uri is None:
        entity.uri = new_uri(str(mapping.rdf_type))
    for f in mapping.fields:
        value = getattr(entity, f.attribute)
        if f.kind == REFERENCE and value is not None:
            assign_uris(value)
        elif f.kind == REFERENCES:
            for item in value:
                assign_uris(item)


def cascade_remove(context: VocabularyContext) -> List[str]:
    """語彙コンテキストの削除に伴って消えるリソースのIRI"""
    uris = [context.uri]
    if context.change_tracking_context is not None:
        uris.append(context.change_tracking_context.uri)
    return uris
