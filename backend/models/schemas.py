"""
Pydanticスキーマ定義

APIのリクエスト/レスポンスモデルを定義します。
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class VocabularyContextDto(BaseModel):
    """語彙コンテキスト記述子"""
    basedOnVocabularyVersion: str
    label: Optional[str] = None


class WorkspaceCreateRequest(BaseModel):
    """ワークスペース作成リクエスト"""
    label: str


class WorkspaceUpdateRequest(BaseModel):
    """ワークスペース更新リクエスト"""
    label: str


class VocabularyContextResponse(BaseModel):
    """語彙コンテキスト"""
    uri: str
    basedOnVocabularyVersion: str
    changeTrackingContext: Optional[str] = None
    readonly: bool = False
    types: List[str] = Field(default_factory=list)


class WorkspaceResponse(BaseModel):
    """ワークスペース"""
    id: str
    uri: str
    label: Optional[str] = None
    vocabularyContexts: List[VocabularyContextResponse] = Field(default_factory=list)


class UriResponse(BaseModel):
    """IRIを1つ返すレスポンス"""
    uri: str


class PublishResponse(BaseModel):
    """公開結果"""
    pullRequestUrl: str


class ValidationResultResponse(BaseModel):
    """単一の検証結果"""
    severity: str
    focusNode: Optional[str] = None
    value: Optional[str] = None
    message: Optional[str] = None
    sourceShape: Optional[str] = None
    resultPath: Optional[str] = None


class ValidationReportResponse(BaseModel):
    """検証レポート"""
    conforms: bool
    violationCount: int = 0
    results: List[ValidationResultResponse] = Field(default_factory=list)
