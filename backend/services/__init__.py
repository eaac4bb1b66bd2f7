"""
サービスモジュール
"""

from .sparql_client import SPARQLClient
from .workspace_dao import WorkspaceDao
from .vocabulary_service import VocabularyService
from .github_service import GithubService, GitRepository
from .workspace_service import WorkspaceService, get_workspace_service

__all__ = [
    "SPARQLClient",
    "WorkspaceDao",
    "VocabularyService",
    "GithubService",
    "GitRepository",
    "WorkspaceService",
    "get_workspace_service",
]
