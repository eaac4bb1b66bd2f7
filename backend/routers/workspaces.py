"""
ワークスペースAPIルーター

/api/workspaces エンドポイントを提供します。
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.exceptions import (
    GraphStoreError,
    NotFoundError,
    PublicationError,
    SGoVError,
    VocabularyConflictError,
)
from backend.models.entities import VocabularyContext, Workspace
from backend.models.schemas import (
    PublishResponse,
    UriResponse,
    ValidationReportResponse,
    ValidationResultResponse,
    VocabularyContextDto,
    VocabularyContextResponse,
    WorkspaceCreateRequest,
    WorkspaceResponse,
    WorkspaceUpdateRequest,
)
from backend.services.workspace_service import WorkspaceService, get_workspace_service
from ontology import WORKSPACE


router = APIRouter(prefix="/workspaces", tags=["workspaces"])


def workspace_uri(workspace_id: str) -> str:
    """パスのIDからワークスペースIRIを復元"""
    return f"{WORKSPACE}/{workspace_id}"


def to_http_exception(e: Exception) -> HTTPException:
    """例外種別をHTTPステータスへ対応付け"""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, VocabularyConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, GraphStoreError):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PublicationError):
        return HTTPException(status_code=500, detail=str(e))
    return HTTPException(status_code=500, detail=f"Workspace operation failed: {str(e)}")


def context_to_response(context: VocabularyContext) -> VocabularyContextResponse:
    ctc = context.change_tracking_context
    return VocabularyContextResponse(
        uri=context.uri,
        basedOnVocabularyVersion=context.based_on_vocabulary_version,
        changeTrackingContext=ctc.uri if ctc is not None else None,
        readonly=context.readonly,
        types=sorted(context.types),
    )


def workspace_to_response(workspace: Workspace) -> WorkspaceResponse:
    return WorkspaceResponse(
        id=workspace.local_name,
        uri=workspace.uri,
        label=workspace.label,
        vocabularyContexts=[context_to_response(c) for c in workspace.vocabulary_contexts],
    )


@router.get("", response_model=List[WorkspaceResponse])
def list_workspaces(service: WorkspaceService = Depends(get_workspace_service)):
    """ワークスペース一覧を取得"""
    try:
        return [workspace_to_response(w) for w in service.find_all_workspaces()]
    except SGoVError as e:
        raise to_http_exception(e) from e


@router.post("", response_model=WorkspaceResponse, status_code=201)
def create_workspace(
    request: WorkspaceCreateRequest,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペースを作成"""
    try:
        return workspace_to_response(service.create_workspace(request.label))
    except SGoVError as e:
        raise to_http_exception(e) from e


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
def get_workspace(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペースを取得"""
    try:
        return workspace_to_response(service.find_workspace(workspace_uri(workspace_id)))
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.put("/{workspace_id}", response_model=WorkspaceResponse)
def update_workspace(
    workspace_id: str,
    request: WorkspaceUpdateRequest,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペースのラベルを更新"""
    try:
        return workspace_to_response(
            service.update_workspace(workspace_uri(workspace_id), request.label)
        )
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.delete("/{workspace_id}", status_code=204)
def remove_workspace(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペースを削除"""
    try:
        service.remove_workspace(workspace_uri(workspace_id))
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.post("/{workspace_id}/vocabularies", response_model=UriResponse, status_code=201)
def ensure_vocabulary(
    workspace_id: str,
    dto: VocabularyContextDto,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """
    語彙をワークスペースに追加

    既に追加済みの場合は既存の語彙コンテキストのIRIを返します。
    """
    try:
        uri = service.ensure_vocabulary_exists_in_workspace(workspace_uri(workspace_id), dto)
        return UriResponse(uri=uri)
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.delete("/{workspace_id}/vocabularies", response_model=VocabularyContextResponse)
def remove_vocabulary(
    workspace_id: str,
    vocabulary_context_uri: str = Query(..., alias="vocabularyContextUri"),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """語彙コンテキストをワークスペースから削除"""
    try:
        context = service.remove_vocabulary(workspace_uri(workspace_id), vocabulary_context_uri)
        return context_to_response(context)
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.get("/{workspace_id}/vocabularies/dependents", response_model=List[str])
def get_dependents(
    workspace_id: str,
    vocabulary_uri: str = Query(..., alias="vocabularyUri"),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペース内で語彙に直接依存する語彙を取得"""
    try:
        return service.get_dependents_for_vocabulary_in_workspace(
            workspace_uri(workspace_id), vocabulary_uri
        )
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.post("/{workspace_id}/publish", response_model=PublishResponse)
def publish_workspace(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペースを公開し、プルリクエストのURLを返す"""
    try:
        return PublishResponse(pullRequestUrl=service.publish(workspace_uri(workspace_id)))
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e


@router.get("/{workspace_id}/validate", response_model=ValidationReportResponse)
def validate_workspace(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """ワークスペースを用語集ルールで検証"""
    try:
        report = service.validate(workspace_uri(workspace_id))
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e

    return ValidationReportResponse(
        conforms=report.conforms,
        violationCount=report.violation_count,
        results=[
            ValidationResultResponse(
                severity=r.severity,
                focusNode=r.focus_node,
                value=r.value,
                message=r.message,
                sourceShape=r.source_shape,
                resultPath=r.result_path,
            )
            for r in report.results
        ],
    )
