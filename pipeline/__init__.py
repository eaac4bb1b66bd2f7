"""
パイプラインモジュール

語彙の検証・公開パイプラインを構成する部品を提供します。
"""

from .fuseki_uploader import FusekiUploader
from .validator import RuleValidator, ValidationReport, ValidationResult
from .vocabulary_folder import VocabularyFolder, VocabularyInstance

__all__ = [
    "FusekiUploader",
    "RuleValidator",
    "ValidationReport",
    "ValidationResult",
    "VocabularyFolder",
    "VocabularyInstance",
]
