"""
ワークスペースサービス

ワークスペースに関するビジネスロジック（語彙の追加・削除、公開、検証）を提供します。
"""

import logging
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from rdflib import Graph

from backend.config import PUBLISH_BRANCH_PREFIX
from backend.exceptions import (
    GitError,
    GraphStoreError,
    NotFoundError,
    PublicationError,
    VocabularyConflictError,
)
from backend.models.entities import VocabularyContext, Workspace
from backend.models.schemas import VocabularyContextDto
from backend.services.github_service import GithubService, GitRepository
from backend.services.sparql_client import SPARQLClient, iri_list
from backend.services.vocabulary_service import VocabularyService
from backend.services.workspace_dao import WorkspaceDao
from pipeline.fuseki_uploader import FusekiUploader
from pipeline.validator import RuleValidator, ValidationReport
from pipeline.vocabulary_folder import VocabularyFolder, VocabularyInstance


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 語彙追加の判定
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Found:
    """ワークスペースに既に存在する"""
    uri: str


@dataclass(frozen=True)
class CreateFromDescriptor:
    """記述子から新しい語彙を作成する"""


@dataclass(frozen=True)
class LoadFromCache:
    """キャッシュ済みの語彙を読み込む"""
    readonly: bool = False


@dataclass(frozen=True)
class Conflict:
    """他のワークスペースが読み書き可能で保持している"""
    holders: tuple


@dataclass(frozen=True)
class Missing:
    """語彙が存在せず、作成もできない"""


Placement = Union[Found, CreateFromDescriptor, LoadFromCache, Conflict, Missing]


def decide_vocabulary_placement(
    workspace: Workspace,
    dto: VocabularyContextDto,
    catalogued: bool,
    read_write_holders: Sequence[str],
) -> Placement:
    """
    語彙をワークスペースへ追加する方法を決定

    Args:
        workspace: 対象ワークスペース
        dto: 語彙記述子
        catalogued: 語彙がカタログ（キャッシュ）に存在するか
        read_write_holders: 語彙を読み書き可能で保持する他のワークスペース

    Returns:
        判定結果
    """
    context = workspace.get_vocabulary_context(dto.basedOnVocabularyVersion)
    if context is not None:
        return Found(context.uri)
    if not catalogued:
        if dto.label is None:
            return Missing()
        if read_write_holders:
            return Conflict(tuple(read_write_holders))
        return CreateFromDescriptor()
    return LoadFromCache(readonly=bool(read_write_holders))


def create_branch_name(workspace_uri: str) -> str:
    return PUBLISH_BRANCH_PREFIX + workspace_uri[workspace_uri.rfind("/") + 1:]


def create_pull_request_body(workspace: Workspace) -> str:
    lines = [
        f" - {c.based_on_vocabulary_version} (context {c.uri})"
        for c in workspace.vocabulary_contexts
    ]
    return "Changed vocabularies:\n" + "\n".join(lines)


# ---------------------------------------------------------------------------
# サービス
# ---------------------------------------------------------------------------

class WorkspaceService:
    """ワークスペースのビジネスロジック"""

    def __init__(
        self,
        workspace_dao: WorkspaceDao,
        vocabulary_service: VocabularyService,
        github_service: GithubService,
        sparql_client: SPARQLClient,
        validator: RuleValidator,
    ):
        self.workspace_dao = workspace_dao
        self.vocabulary_service = vocabulary_service
        self.github_service = github_service
        self.sparql = sparql_client
        self.validator = validator

        # 読み書き排他性の判定はプロセス内でのみ直列化される
        self._ensure_lock = threading.Lock()
        # ブランチ名 -> (ロック, 利用者数)。利用者がいなくなれば削除する
        self._branch_locks: Dict[str, Tuple[threading.Lock, int]] = {}
        self._branch_locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # ワークスペースCRUD
    # ------------------------------------------------------------------

    def _get_workspace(self, workspace_uri: str) -> Workspace:
        return self.workspace_dao.find_required(workspace_uri)

    def create_workspace(self, label: str) -> Workspace:
        return self.workspace_dao.persist(Workspace(label=label))

    def find_workspace(self, workspace_uri: str) -> Workspace:
        return self._get_workspace(workspace_uri)

    def find_all_workspaces(self) -> List[Workspace]:
        return self.workspace_dao.find_all()

    def update_workspace(self, workspace_uri: str, label: str) -> Workspace:
        """ワークスペースの直接の属性（ラベル）のみを更新"""
        workspace = self._get_workspace(workspace_uri)
        workspace.label = label
        return self.workspace_dao.update(workspace)

    def remove_workspace(self, workspace_uri: str) -> None:
        self.workspace_dao.remove(workspace_uri)

    # ------------------------------------------------------------------
    # 語彙コンテキスト
    # ------------------------------------------------------------------

    def list_vocabularies(self) -> List[VocabularyContextDto]:
        return self.vocabulary_service.get_vocabularies_as_context_dtos()

    def get_workspaces_with_read_write_vocabulary(self, vocabulary_uri: str) -> List[Workspace]:
        """語彙を読み書き可能で保持しているワークスペース"""
        workspaces = []
        for uri in self.workspace_dao.find_workspaces_with_read_write_vocabulary(vocabulary_uri):
            workspace = self.workspace_dao.find(uri)
            if workspace is not None:
                workspaces.append(workspace)
        return workspaces

    def get_dependents_for_vocabulary_in_workspace(
        self, workspace_uri: str, vocabulary_uri: str
    ) -> List[str]:
        workspace = self._get_workspace(workspace_uri)
        return self.workspace_dao.get_dependents_for_vocabulary_in_workspace(
            workspace, vocabulary_uri
        )

    def ensure_vocabulary_exists_in_workspace(
        self, workspace_uri: str, dto: VocabularyContextDto
    ) -> str:
        """
        語彙がワークスペースに登録されていることを保証

        - 語彙が既にワークスペースにあれば、内容には触れずにそのIRIを返す。
        - 語彙がカタログになく、ラベルもなければNotFoundError。
        - 語彙がカタログになくラベルがあれば、新しい語彙として作成する。
        - 語彙がカタログにあれば、キャッシュから内容を読み込む。
          他のワークスペースが読み書き可能で保持している場合は読み取り専用で追加する。

        Returns:
            語彙コンテキストのIRI
        """
        vocabulary_uri = dto.basedOnVocabularyVersion
        with self._ensure_lock:
            workspace = self._get_workspace(workspace_uri)
            context_uri = self.workspace_dao.get_vocabulary_context_reference(
                workspace, vocabulary_uri
            )
            if context_uri is not None:
                return context_uri

            catalogued = any(
                v.basedOnVocabularyVersion == vocabulary_uri
                for v in self.vocabulary_service.get_vocabularies_as_context_dtos()
            )
            holders = [
                uri for uri in
                self.workspace_dao.find_workspaces_with_read_write_vocabulary(vocabulary_uri)
                if uri != workspace.uri
            ]
            decision = decide_vocabulary_placement(workspace, dto, catalogued, holders)
            logger.info(f"Placing vocabulary {vocabulary_uri} in {workspace.uri}: {decision}")

            if isinstance(decision, Found):
                return decision.uri
            if isinstance(decision, Missing):
                raise NotFoundError.create("Vocabulary", vocabulary_uri)
            if isinstance(decision, Conflict):
                raise VocabularyConflictError(vocabulary_uri, list(decision.holders))
            if isinstance(decision, CreateFromDescriptor):
                return self._create_vocabulary_context(workspace, dto)
            return self._load_vocabulary_context_from_cache(
                workspace, vocabulary_uri, decision.readonly
            )

    def _attach_stub(
        self, workspace: Workspace, vocabulary_uri: str, readonly: bool = False
    ) -> VocabularyContext:
        context = VocabularyContext.stub(vocabulary_uri)
        context.readonly = readonly
        workspace.add_vocabulary_context(context)
        # 内容の投入前にワークスペースを保存する（失敗時のロールバックはしない）
        self.workspace_dao.update(workspace)
        return context

    def _create_vocabulary_context(
        self, workspace: Workspace, dto: VocabularyContextDto
    ) -> str:
        context = self._attach_stub(workspace, dto.basedOnVocabularyVersion)
        try:
            self.vocabulary_service.create_context(context, dto)
        except GraphStoreError as e:
            raise GraphStoreError(
                f"Creating vocabulary {dto.basedOnVocabularyVersion} "
                f"in context {context.uri} failed"
            ) from e
        return context.uri

    def _load_vocabulary_context_from_cache(
        self, workspace: Workspace, vocabulary_uri: str, readonly: bool
    ) -> str:
        context = self._attach_stub(workspace, vocabulary_uri, readonly)
        try:
            self.vocabulary_service.load_context(context)
        except GraphStoreError as e:
            raise GraphStoreError(
                f"Loading vocabulary {vocabulary_uri} into context {context.uri} failed"
            ) from e
        return context.uri

    def remove_vocabulary(self, workspace_uri: str, vocabulary_context_uri: str) -> VocabularyContext:
        """
        語彙コンテキストをワークスペースから削除

        Returns:
            削除した語彙コンテキスト
        """
        workspace = self._get_workspace(workspace_uri)
        context = workspace.find_vocabulary_context(vocabulary_context_uri)
        if context is None:
            raise NotFoundError.create("VocabularyContext", vocabulary_context_uri)

        graph_uris = []
        if context.change_tracking_context is not None:
            graph_uris.append(context.change_tracking_context.uri)
        graph_uris.append(context.uri)

        # 両方のグラフのクリアを必ず試みる
        errors = []
        for graph_uri in graph_uris:
            try:
                self.workspace_dao.clear_vocabulary_context(graph_uri)
            except GraphStoreError as e:
                logger.error(f"Clearing graph {graph_uri} failed: {e}")
                errors.append(e)
        if errors:
            raise GraphStoreError(
                f"Clearing vocabulary context {vocabulary_context_uri} failed"
            ) from errors[0]

        self.vocabulary_service.remove(workspace.uri, context)
        workspace.remove_vocabulary_context(context)
        self.workspace_dao.update(workspace)
        logger.info(f"Removed vocabulary context {vocabulary_context_uri} from {workspace.uri}")
        return context

    # ------------------------------------------------------------------
    # 公開
    # ------------------------------------------------------------------

    @contextmanager
    def _branch_lock(self, branch_name: str):
        with self._branch_locks_guard:
            lock, users = self._branch_locks.get(branch_name, (threading.Lock(), 0))
            self._branch_locks[branch_name] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._branch_locks_guard:
                lock, users = self._branch_locks[branch_name]
                if users == 1:
                    del self._branch_locks[branch_name]
                else:
                    self._branch_locks[branch_name] = (lock, users - 1)

    def _publish_contexts(self, repo: GitRepository, workspace: Workspace) -> None:
        for context in workspace.vocabulary_contexts:
            vocabulary_uri = context.based_on_vocabulary_version
            try:
                instance = VocabularyInstance.parse(vocabulary_uri)
            except ValueError as e:
                raise PublicationError(f"Invalid vocabulary IRI {vocabulary_uri}", e) from e
            folder = VocabularyFolder.of_vocabulary_iri(repo.path, instance)

            # compact以外を削除してから書き出す
            for file in folder.to_prune_all_except_compact():
                self.github_service.delete(repo, file)
            self.vocabulary_service.store_context(context, folder)

            self.github_service.commit(
                repo,
                f"Publishing vocabulary {vocabulary_uri} in workspace "
                f"{workspace.label} ({workspace.uri})",
            )

    def publish(self, workspace_uri: str) -> str:
        """
        ワークスペースを公開

        Returns:
            プルリクエストのURL
        """
        workspace = self._get_workspace(workspace_uri)
        branch_name = create_branch_name(workspace.uri)
        logger.info(f"Publishing workspace {workspace.uri} to branch {branch_name}")

        with self._branch_lock(branch_name):
            try:
                with tempfile.TemporaryDirectory(prefix="sgov") as directory:
                    repo = self.github_service.checkout(branch_name, directory)
                    self._publish_contexts(repo, workspace)
                    self.github_service.push(repo)
            except (OSError, GitError, GraphStoreError) as e:
                raise PublicationError(
                    "An exception occurred during publishing workspace.", e
                ) from e

            try:
                url = self.github_service.create_or_update_pull_request_to_default(
                    branch_name,
                    f"Publishing workspace {workspace.label} ({workspace.uri})",
                    create_pull_request_body(workspace),
                )
            except GitError as e:
                raise PublicationError(
                    f"Creating pull request for branch {branch_name} failed.", e
                ) from e

        logger.info(f"Published workspace {workspace.uri}: {url}")
        return url

    # ------------------------------------------------------------------
    # 検証
    # ------------------------------------------------------------------

    def validate(self, workspace_uri: str) -> ValidationReport:
        """ワークスペースの語彙を用語集ルールで検証"""
        workspace = self._get_workspace(workspace_uri)
        logger.info(f"Validating workspace {workspace.uri}")

        contexts = self.workspace_dao.get_vocabulary_snapshot_contexts(workspace.uri)
        logger.info(f"- found vocabularies {contexts}")

        if contexts:
            query = (
                "CONSTRUCT { ?s ?p ?o } WHERE { GRAPH ?g { ?s ?p ?o } "
                f"VALUES ?g {{ {iri_list(contexts)} }} }}"
            )
            logger.info(f"- getting all statements for the vocabularies using query {query}")
            data_graph = self.sparql.construct(query)
        else:
            data_graph = Graph()
        logger.info(f"- found {len(data_graph)} statements. Now validating")

        report = self.validator.validate(data_graph, inference="rdfs")
        logger.info("- validated, with the following results:")
        for r in report.results:
            logger.info(
                f"    - [{r.severity}] Node {r.focus_node} failing for value {r.value} "
                f"with message: {r.message}"
            )
        return report


# シングルトンインスタンス
_service: Optional[WorkspaceService] = None


def get_workspace_service() -> WorkspaceService:
    """シングルトンのワークスペースサービスを取得"""
    global _service
    if _service is None:
        sparql_client = SPARQLClient()
        uploader = FusekiUploader()
        workspace_dao = WorkspaceDao(sparql_client, uploader)
        _service = WorkspaceService(
            workspace_dao=workspace_dao,
            vocabulary_service=VocabularyService(sparql_client, uploader, workspace_dao),
            github_service=GithubService(),
            sparql_client=sparql_client,
            validator=RuleValidator(),
        )
    return _service
