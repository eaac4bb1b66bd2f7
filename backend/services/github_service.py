"""
GitHubリポジトリサービス

語彙リポジトリのブランチのチェックアウト・コミット・プッシュ（git CLI）と
プルリクエストの作成・更新（GitHub REST API）を行います。
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import urlsplit, urlunsplit

import httpx

from backend.config import (
    GIT_AUTHOR_EMAIL,
    GIT_AUTHOR_NAME,
    GIT_REMOTE_URL,
    GIT_TIMEOUT,
    GITHUB_API_URL,
    GITHUB_DEFAULT_BRANCH,
    GITHUB_REPOSITORY,
    GITHUB_TIMEOUT,
    GITHUB_TOKEN,
)
from backend.exceptions import GitError


logger = logging.getLogger(__name__)


@dataclass
class GitRepository:
    """チェックアウト済みの作業ディレクトリ"""
    path: Path
    branch: str


class GithubService:
    """語彙リポジトリへのアクセスを行うクラス"""

    def __init__(
        self,
        remote_url: str = GIT_REMOTE_URL,
        repository: str = GITHUB_REPOSITORY,
        token: str = GITHUB_TOKEN,
        default_branch: str = GITHUB_DEFAULT_BRANCH,
        api_url: str = GITHUB_API_URL,
        author_name: str = GIT_AUTHOR_NAME,
        author_email: str = GIT_AUTHOR_EMAIL,
        git_timeout: float = GIT_TIMEOUT,
        api_timeout: float = GITHUB_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            remote_url: cloneするリモートリポジトリのURL
            repository: GitHubリポジトリ名（owner/name）
            token: GitHubアクセストークン
            default_branch: プルリクエストの宛先ブランチ
            api_url: GitHub APIのベースURL
            author_name: コミット作成者名
            author_email: コミット作成者メールアドレス
            git_timeout: gitコマンドのタイムアウト（秒）
            api_timeout: GitHub APIのタイムアウト（秒）
            transport: httpxのトランスポート（テスト用）
        """
        self.remote_url = remote_url
        self.repository = repository
        self.token = token
        self.default_branch = default_branch
        self.api_url = api_url.rstrip("/")
        self.author_name = author_name
        self.author_email = author_email
        self.git_timeout = git_timeout
        self.api_timeout = api_timeout
        self.transport = transport

    # ------------------------------------------------------------------
    # git CLI
    # ------------------------------------------------------------------

    def _authenticated_remote(self) -> str:
        parts = urlsplit(self.remote_url)
        if not self.token or parts.scheme != "https":
            return self.remote_url
        netloc = f"x-access-token:{self.token}@{parts.hostname}"
        if parts.port:
            netloc = f"{netloc}:{parts.port}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))

    def _mask(self, text: str) -> str:
        return text.replace(self.token, "***") if self.token else text

    def _git(self, args: List[str], cwd: Union[str, Path]) -> str:
        cmd = [
            "git",
            "-c", f"user.name={self.author_name}",
            "-c", f"user.email={self.author_email}",
        ] + args
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.git_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(
                f"git {args[0]} timed out after {self.git_timeout} seconds"
            ) from e
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e

        if result.returncode != 0:
            raise GitError(
                f"git {args[0]} failed ({result.returncode}): "
                f"{self._mask(result.stderr.strip())}"
            )
        return result.stdout.strip()

    def checkout(self, branch_name: str, directory: Union[str, Path]) -> GitRepository:
        """
        リポジトリをcloneし、ブランチをチェックアウト（存在しなければ作成）

        Args:
            branch_name: ブランチ名
            directory: 作業ディレクトリ（空であること）

        Returns:
            作業ディレクトリのハンドル
        """
        path = Path(directory)
        logger.info(f"Cloning {self.remote_url} into {path}")
        self._git(["clone", "--quiet", self._authenticated_remote(), str(path)], path.parent)

        remote_heads = self._git(["ls-remote", "--heads", "origin", branch_name], path)
        if remote_heads:
            self._git(["checkout", "--quiet", "-B", branch_name, f"origin/{branch_name}"], path)
            logger.info(f"Checked out existing branch {branch_name}")
        else:
            self._git(["checkout", "--quiet", "-b", branch_name], path)
            logger.info(f"Created branch {branch_name}")
        return GitRepository(path=path, branch=branch_name)

    def delete(self, repo: GitRepository, file: Union[str, Path]) -> None:
        """ファイルを削除し、削除をステージ"""
        file = Path(file)
        relative = file.relative_to(repo.path) if file.is_absolute() else file
        self._git(["rm", "--quiet", "--force", "--ignore-unmatch", "--", str(relative)], repo.path)
        # 未追跡ファイルはgit rmで消えない
        target = repo.path / relative
        if target.exists():
            target.unlink()

    def commit(self, repo: GitRepository, message: str) -> None:
        """作業ディレクトリの変更をすべてコミット"""
        self._git(["add", "--all"], repo.path)
        self._git(["commit", "--quiet", "--allow-empty", "-m", message], repo.path)
        logger.info(f"Committed to {repo.branch}: {message}")

    def push(self, repo: GitRepository) -> None:
        """ブランチをリモートへプッシュ"""
        self._git(["push", "--quiet", "--set-upstream", "origin", repo.branch], repo.path)
        logger.info(f"Pushed branch {repo.branch}")

    # ------------------------------------------------------------------
    # GitHub REST API
    # ------------------------------------------------------------------

    def _api_client(self) -> httpx.Client:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.Client(
            base_url=self.api_url,
            headers=headers,
            timeout=self.api_timeout,
            transport=self.transport,
        )

    def create_or_update_pull_request_to_default(
        self, branch_name: str, title: str, body: str
    ) -> str:
        """
        ブランチからデフォルトブランチへのプルリクエストを作成（既存なら更新）

        Returns:
            プルリクエストのURL
        """
        owner = self.repository.split("/")[0]
        pulls = f"/repos/{self.repository}/pulls"
        with self._api_client() as client:
            try:
                response = client.get(
                    pulls,
                    params={
                        "head": f"{owner}:{branch_name}",
                        "base": self.default_branch,
                        "state": "open",
                    },
                )
                response.raise_for_status()
                existing = response.json()
                if existing:
                    number = existing[0]["number"]
                    response = client.patch(
                        f"{pulls}/{number}", json={"title": title, "body": body}
                    )
                    logger.info(f"Updating pull request #{number} for {branch_name}")
                else:
                    response = client.post(
                        pulls,
                        json={
                            "title": title,
                            "head": branch_name,
                            "base": self.default_branch,
                            "body": body,
                        },
                    )
                    logger.info(f"Creating pull request for {branch_name}")
                response.raise_for_status()
                return response.json()["html_url"]
            except httpx.HTTPStatusError as e:
                logger.error(f"GitHub API failed: {e.response.status_code}")
                raise GitError(
                    f"GitHub API returned {e.response.status_code} for branch {branch_name}"
                ) from e
            except httpx.RequestError as e:
                logger.error(f"GitHub API request error: {e}")
                raise GitError("GitHub API is not reachable") from e
