"""
語彙APIルーター

/api/vocabularies エンドポイントを提供します。
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from backend.exceptions import SGoVError
from backend.models.schemas import VocabularyContextDto, WorkspaceResponse
from backend.routers.workspaces import to_http_exception, workspace_to_response
from backend.services.workspace_service import WorkspaceService, get_workspace_service


router = APIRouter(prefix="/vocabularies", tags=["vocabularies"])


@router.get("", response_model=List[VocabularyContextDto])
def list_vocabularies(service: WorkspaceService = Depends(get_workspace_service)):
    """キャッシュ済みの語彙一覧を取得"""
    try:
        return service.list_vocabularies()
    except SGoVError as e:
        raise to_http_exception(e) from e


@router.get("/read-write-holders", response_model=List[WorkspaceResponse])
def get_read_write_holders(
    vocabulary_uri: str = Query(..., alias="vocabularyUri"),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """語彙を読み書き可能で保持しているワークスペースを取得"""
    try:
        return [
            workspace_to_response(w)
            for w in service.get_workspaces_with_read_write_vocabulary(vocabulary_uri)
        ]
    except (SGoVError, ValueError) as e:
        raise to_http_exception(e) from e
