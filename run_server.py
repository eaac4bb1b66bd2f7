#!/usr/bin/env python3
"""
SGoV ワークスペースサーバー起動スクリプト

使用方法:
    python run_server.py
    python run_server.py --port 8080 --reload --log-level debug
"""

import argparse
import os

import uvicorn

from backend.config import FUSEKI_ENDPOINT, FUSEKI_DATASET, GITHUB_REPOSITORY


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="SGoV ワークスペースAPIサーバーを起動")
    parser.add_argument("--host", default=os.getenv("SGOV_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("SGOV_PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="自動リロード有効")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    print("=" * 60)
    print(f"SGoV Workspace API  http://{args.host}:{args.port}/docs")
    print(f"Triple store: {FUSEKI_ENDPOINT}/{FUSEKI_DATASET}")
    print(f"Vocabulary repository: {GITHUB_REPOSITORY}")
    print("=" * 60)

    uvicorn.run(
        "backend.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
