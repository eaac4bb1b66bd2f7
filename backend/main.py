"""
SGoV ワークスペースAPI

FastAPIアプリケーションのエントリポイント
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import API_PREFIX, CORS_ORIGINS, LOG_FILE_PATH, LOG_LEVEL
from backend.routers import vocabularies, workspaces
from backend.services.workspace_service import WorkspaceService, get_workspace_service


logger = logging.getLogger(__name__)


def setup_logging():
    """ログ設定を初期化"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE_PATH:
        handlers.append(logging.FileHandler(LOG_FILE_PATH, encoding="utf-8"))
    logging.basicConfig(
        level=LOG_LEVEL,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("SGoV Workspace API Server starting...")
    yield
    logger.info("SGoV Workspace API Server shutting down...")


app = FastAPI(
    title="SGoV Workspace API",
    description="語彙ワークスペースの編集・検証・公開を行うAPI",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ルーターを登録
app.include_router(workspaces.router, prefix=API_PREFIX)
app.include_router(vocabularies.router, prefix=API_PREFIX)


@app.get("/")
def root():
    """ルートエンドポイント"""
    return {
        "name": "SGoV Workspace API",
        "version": "0.1.0",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
def health_check(service: WorkspaceService = Depends(get_workspace_service)):
    fuseki_ok = service.sparql.check_connection()

    return {
        "status": "ok" if fuseki_ok else "degraded",
        "fuseki": "connected" if fuseki_ok else "disconnected",
    }
