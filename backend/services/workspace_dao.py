"""
ワークスペースDAO

ワークスペース・語彙コンテキスト・変更追跡コンテキストを
トリプルストアに永続化します。ワークスペースのメタデータは
ワークスペースIRIと同名の名前付きグラフに格納されます。
"""

import logging
from typing import List, Optional

from rdflib.namespace import OWL

from backend.exceptions import GraphStoreError, NotFoundError
from backend.models.entities import VocabularyContext, Workspace
from backend.models.mapping import (
    assign_uris,
    cascade_remove,
    from_graph,
    to_graph,
    unmapped_triples,
)
from backend.services.sparql_client import SPARQLClient, iri, iri_list
from ontology import (
    BASED_ON_VOCABULARY_VERSION,
    REFERS_TO_VOCABULARY_CONTEXT,
    VOCABULARY_CONTEXT,
    VOCABULARY_CONTEXT_READONLY,
    WORKSPACE,
)
from pipeline.fuseki_uploader import FusekiUploader


logger = logging.getLogger(__name__)


class WorkspaceDao:
    """ワークスペースの永続化を行うクラス"""

    def __init__(self, sparql_client: SPARQLClient, uploader: FusekiUploader):
        self.sparql = sparql_client
        self.uploader = uploader

    # ------------------------------------------------------------------
    # ワークスペース
    # ------------------------------------------------------------------

    def _metadata_graph(self, workspace_uri: str):
        return self.sparql.construct(
            f"CONSTRUCT {{ ?s ?p ?o }} WHERE {{ GRAPH {iri(workspace_uri)} {{ ?s ?p ?o }} }}"
        )

    def find(self, workspace_uri: str) -> Optional[Workspace]:
        """ワークスペースを取得（存在しなければNone）"""
        return from_graph(self._metadata_graph(workspace_uri), workspace_uri, Workspace)

    def find_required(self, workspace_uri: str) -> Workspace:
        """
        ワークスペースを取得

        Raises:
            NotFoundError: ワークスペースが存在しない場合
        """
        workspace = self.find(workspace_uri)
        if workspace is None:
            raise NotFoundError.create("Workspace", workspace_uri)
        return workspace

    def get_all_workspace_iris(self) -> List[str]:
        bindings = self.sparql.select(
            f"""
            SELECT DISTINCT ?workspace WHERE {{
                GRAPH ?workspace {{ ?workspace a {iri(WORKSPACE)} }}
            }}
            ORDER BY ?workspace
            """
        )
        return [b["workspace"]["value"] for b in bindings]

    def find_all(self) -> List[Workspace]:
        workspaces = []
        for uri in self.get_all_workspace_iris():
            workspace = self.find(uri)
            if workspace is not None:
                workspaces.append(workspace)
        return workspaces

    def persist(self, workspace: Workspace) -> Workspace:
        """ワークスペースを新規保存（IRI未設定のエンティティにはIRIを割り当てる）"""
        assign_uris(workspace)
        logger.info(f"Persisting workspace {workspace.uri}")
        self.uploader.put_graph(to_graph(workspace), workspace.uri)
        return workspace

    def update(self, workspace: Workspace) -> Workspace:
        """
        ワークスペースのメタデータグラフを置換

        対応表で管理しないトリプル（別種のコンテキストへの参照など）は保持する。
        """
        assign_uris(workspace)
        graph = to_graph(workspace)
        kept = unmapped_triples(self._metadata_graph(workspace.uri), workspace.uri, Workspace)
        for triple in kept:
            graph.add(triple)
        logger.info(
            f"Updating workspace {workspace.uri} "
            f"({len(workspace.vocabulary_contexts)} vocabulary contexts, "
            f"{len(kept)} unmapped statements kept)"
        )
        self.uploader.put_graph(graph, workspace.uri)
        return workspace

    def remove(self, workspace_uri: str) -> None:
        """
        ワークスペースを削除

        各コンテキストの内容・変更ロググラフとメタデータグラフのみを削除し、
        共有されている正規の語彙グラフには触れない。
        """
        workspace = self.find_required(workspace_uri)
        # 全グラフのクリアを試みてから失敗を報告する
        errors = []
        for context in workspace.vocabulary_contexts:
            for graph_uri in cascade_remove(context):
                try:
                    self.clear_vocabulary_context(graph_uri)
                except GraphStoreError as e:
                    logger.error(f"Clearing graph {graph_uri} failed: {e}")
                    errors.append(e)
        if errors:
            raise GraphStoreError(f"Removing workspace {workspace_uri} failed") from errors[0]
        self.uploader.delete_graph(workspace_uri)
        logger.info(f"Removed workspace {workspace_uri}")

    # ------------------------------------------------------------------
    # 語彙コンテキスト
    # ------------------------------------------------------------------

    @staticmethod
    def get_vocabulary_context_reference(
        workspace: Workspace, vocabulary_uri: str
    ) -> Optional[str]:
        """ワークスペース内で語彙に対応するコンテキストのIRI"""
        context = workspace.get_vocabulary_context(vocabulary_uri)
        return context.uri if context is not None else None

    def clear_vocabulary_context(self, context_uri: str) -> None:
        self.sparql.clear_graph(context_uri)

    def remove_vocabulary_context(
        self, workspace_uri: str, context: VocabularyContext
    ) -> None:
        """コンテキストのレコードを変更追跡コンテキストごと削除"""
        graph = iri(workspace_uri)
        self.sparql.update(
            f"""
            DELETE {{ GRAPH {graph} {{ ?s ?p ?o }} }}
            WHERE {{
                GRAPH {graph} {{ ?s ?p ?o }}
                VALUES ?s {{ {iri_list(cascade_remove(context))} }}
            }} ;
            DELETE WHERE {{
                GRAPH {graph} {{ ?w {iri(REFERS_TO_VOCABULARY_CONTEXT)} {iri(context.uri)} }}
            }}
            """
        )

    def get_vocabulary_snapshot_contexts(self, workspace_uri: str) -> List[str]:
        """ワークスペースが参照する語彙コンテキスト（他種別のコンテキストを除く）"""
        bindings = self.sparql.select(
            f"""
            SELECT DISTINCT ?context WHERE {{
                GRAPH {iri(workspace_uri)} {{
                    {iri(workspace_uri)} {iri(REFERS_TO_VOCABULARY_CONTEXT)} ?context .
                    ?context a {iri(VOCABULARY_CONTEXT)} .
                }}
            }}
            ORDER BY ?context
            """
        )
        return [b["context"]["value"] for b in bindings]

    def find_workspaces_with_read_write_vocabulary(self, vocabulary_uri: str) -> List[str]:
        """語彙を読み書き可能なコンテキストとして保持するワークスペースのIRI"""
        bindings = self.sparql.select(
            f"""
            SELECT DISTINCT ?workspace WHERE {{
                GRAPH ?workspace {{
                    ?workspace a {iri(WORKSPACE)} ;
                        {iri(REFERS_TO_VOCABULARY_CONTEXT)} ?context .
                    ?context {iri(BASED_ON_VOCABULARY_VERSION)} {iri(vocabulary_uri)} .
                    FILTER NOT EXISTS {{ ?context a {iri(VOCABULARY_CONTEXT_READONLY)} }}
                }}
            }}
            ORDER BY ?workspace
            """
        )
        return [b["workspace"]["value"] for b in bindings]

    def get_dependents_for_vocabulary_in_workspace(
        self, workspace: Workspace, vocabulary_uri: str
    ) -> List[str]:
        """ワークスペース内で語彙を直接インポートしている語彙"""
        contexts = {
            c.uri: c.based_on_vocabulary_version
            for c in workspace.vocabulary_contexts
            if c.based_on_vocabulary_version != vocabulary_uri
        }
        if not contexts:
            return []
        bindings = self.sparql.select(
            f"""
            SELECT DISTINCT ?context WHERE {{
                GRAPH ?context {{ ?s {iri(OWL.imports)} ?imported }}
                FILTER(?imported = {iri(vocabulary_uri)}
                    || STRSTARTS(STR(?imported), "{vocabulary_uri}/"))
                VALUES ?context {{ {iri_list(contexts)} }}
            }}
            """
        )
        return sorted({contexts[b["context"]["value"]] for b in bindings})
