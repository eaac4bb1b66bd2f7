"""
バックエンド設定モジュール

環境変数やデフォルト設定を管理します。
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# プロジェクトルート
PROJECT_ROOT = Path(__file__).parent.parent

# .envファイルを読み込み
load_dotenv(PROJECT_ROOT / ".env")

# Fuseki設定
FUSEKI_ENDPOINT = os.getenv("FUSEKI_ENDPOINT", "http://localhost:3030")
FUSEKI_DATASET = os.getenv("FUSEKI_DATASET", "sgov")

# SPARQLエンドポイント
SPARQL_QUERY_ENDPOINT = f"{FUSEKI_ENDPOINT}/{FUSEKI_DATASET}/query"
SPARQL_UPDATE_ENDPOINT = f"{FUSEKI_ENDPOINT}/{FUSEKI_DATASET}/update"
GRAPH_STORE_ENDPOINT = f"{FUSEKI_ENDPOINT}/{FUSEKI_DATASET}/data"

# タイムアウト設定（秒）
SPARQL_TIMEOUT = float(os.getenv("SPARQL_TIMEOUT", "30"))
GRAPH_STORE_TIMEOUT = float(os.getenv("GRAPH_STORE_TIMEOUT", "60"))

# GitHub設定
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
GITHUB_REPOSITORY = os.getenv("GITHUB_REPOSITORY", "opendata-mvcr/ssp")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
GITHUB_DEFAULT_BRANCH = os.getenv("GITHUB_DEFAULT_BRANCH", "master")
GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "30"))

# git CLI設定
GIT_REMOTE_URL = os.getenv(
    "GIT_REMOTE_URL", f"https://github.com/{GITHUB_REPOSITORY}.git"
)
GIT_TIMEOUT = float(os.getenv("GIT_TIMEOUT", "300"))
GIT_AUTHOR_NAME = os.getenv("GIT_AUTHOR_NAME", "SGoV server")
GIT_AUTHOR_EMAIL = os.getenv("GIT_AUTHOR_EMAIL", "sgov-server@example.org")

# 公開設定
PUBLISH_BRANCH_PREFIX = "PL-publish-"
VOCABULARIES_DIR = os.getenv("VOCABULARIES_DIR", "content/vocabularies")

# API設定
API_PREFIX = "/api"

# CORS設定
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8000",
]

# ログ設定
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "")
