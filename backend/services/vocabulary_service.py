"""
語彙コンテンツサービス

語彙カタログの参照、語彙コンテキストの内容の作成・キャッシュからの読み込み、
ファイルへの書き出し、レコードの削除を行います。
"""

import logging
from typing import Dict, List

from rdflib import Graph, Literal, URIRef
from rdflib.namespace import DCTERMS, OWL, RDF, SKOS

from backend.models.entities import VocabularyContext
from backend.models.schemas import VocabularyContextDto
from backend.services.sparql_client import SPARQLClient, iri
from backend.services.workspace_dao import WorkspaceDao
from ontology import GLOSSARY, HAS_GLOSSARY, HAS_MODEL, MODEL, VOCABULARY, WORKSPACE_NS
from pipeline.fuseki_uploader import FusekiUploader
from pipeline.vocabulary_folder import VocabularyFolder


logger = logging.getLogger(__name__)


def _bind_namespaces(graph: Graph) -> Graph:
    graph.bind("skos", SKOS)
    graph.bind("owl", OWL)
    graph.bind("dcterms", DCTERMS)
    graph.bind("a-popis-dat-pojem", WORKSPACE_NS)
    return graph


def split_vocabulary_graph(graph: Graph, vocabulary_uri: str) -> Dict[str, Graph]:
    """
    語彙グラフを slovník / glosář / model の3つに分割

    - 語彙IRIを主語とするトリプル -> slovník
    - 用語集IRIを主語とするトリプル、SKOS述語、skos:Concept型付け -> glosář
    - それ以外 -> model
    """
    vocabulary = URIRef(vocabulary_uri)
    glossary = URIRef(f"{vocabulary_uri}/glosář")
    parts = {name: _bind_namespaces(Graph()) for name in ("slovník", "glosář", "model")}
    for s, p, o in graph:
        if s == vocabulary:
            parts["slovník"].add((s, p, o))
        elif s == glossary or str(p).startswith(str(SKOS)) or (
            p == RDF.type and o == SKOS.Concept
        ):
            parts["glosář"].add((s, p, o))
        else:
            parts["model"].add((s, p, o))
    return parts


class VocabularyService:
    """語彙コンテキストの内容を管理するクラス"""

    def __init__(
        self,
        sparql_client: SPARQLClient,
        uploader: FusekiUploader,
        workspace_dao: WorkspaceDao,
    ):
        self.sparql = sparql_client
        self.uploader = uploader
        self.workspace_dao = workspace_dao

    def get_vocabularies_as_context_dtos(self) -> List[VocabularyContextDto]:
        """キャッシュ済みの正規語彙の一覧"""
        bindings = self.sparql.select(
            f"""
            PREFIX dcterms: <{DCTERMS}>
            SELECT ?vocabulary ?label WHERE {{
                GRAPH ?vocabulary {{
                    ?vocabulary a {iri(VOCABULARY)} .
                    OPTIONAL {{ ?vocabulary dcterms:title ?label }}
                }}
            }}
            ORDER BY ?vocabulary
            """
        )
        dtos: Dict[str, VocabularyContextDto] = {}
        for binding in bindings:
            uri = binding["vocabulary"]["value"]
            label = binding.get("label", {}).get("value")
            if uri not in dtos or (dtos[uri].label is None and label is not None):
                dtos[uri] = VocabularyContextDto(
                    basedOnVocabularyVersion=uri, label=label
                )
        return list(dtos.values())

    def create_context(
        self, context: VocabularyContext, dto: VocabularyContextDto
    ) -> None:
        """記述子から新しい語彙の骨格をコンテキストに作成"""
        vocabulary_uri = dto.basedOnVocabularyVersion
        vocabulary = URIRef(vocabulary_uri)
        glossary = URIRef(f"{vocabulary_uri}/glosář")
        model = URIRef(f"{vocabulary_uri}/model")

        graph = _bind_namespaces(Graph())
        graph.add((vocabulary, RDF.type, URIRef(VOCABULARY)))
        graph.add((vocabulary, DCTERMS.title, Literal(dto.label, lang="cs")))
        graph.add((vocabulary, URIRef(HAS_GLOSSARY), glossary))
        graph.add((vocabulary, URIRef(HAS_MODEL), model))
        graph.add((glossary, RDF.type, URIRef(GLOSSARY)))
        graph.add((glossary, RDF.type, SKOS.ConceptScheme))
        graph.add((model, RDF.type, URIRef(MODEL)))
        graph.add((model, RDF.type, OWL.Ontology))
        graph.add((model, OWL.imports, glossary))

        logger.info(f"Creating vocabulary {vocabulary_uri} in context {context.uri}")
        self.uploader.put_graph(graph, context.uri)

    def load_context(self, context: VocabularyContext) -> None:
        """キャッシュ済みの正規語彙をコンテキストへ読み込む"""
        logger.info(
            f"Loading vocabulary {context.based_on_vocabulary_version} "
            f"from cache into context {context.uri}"
        )
        self.sparql.add_graph(context.based_on_vocabulary_version, context.uri)

    def store_context(self, context: VocabularyContext, folder: VocabularyFolder) -> None:
        """コンテキストの現在の内容を語彙フォルダへ書き出す"""
        graph = self.uploader.get_graph(context.uri)
        parts = split_vocabulary_graph(graph, context.based_on_vocabulary_version)
        targets = {
            "slovník": folder.vocabulary_file,
            "glosář": folder.glossary_file,
            "model": folder.model_file,
        }
        for name, part in parts.items():
            if len(part) == 0:
                continue
            part.serialize(destination=str(targets[name]), format="turtle", encoding="utf-8")
        logger.info(
            f"Stored context {context.uri} ({len(graph)} triples) into {folder.folder}"
        )

    def remove(self, workspace_uri: str, context: VocabularyContext) -> None:
        """コンテキストのレコードを削除"""
        self.workspace_dao.remove_vocabulary_context(workspace_uri, context)
