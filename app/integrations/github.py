from __future__ import annotations

import base64
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from app.config import settings
from app.core.exceptions import (
    RemoteConflict,
    RemoteError,
    RemoteNotFound,
    RemoteRejected,
    RemoteUnavailable,
)
from app.models.publish import BranchRef, RemoteFile

logger = logging.getLogger(__name__)


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(encoded: str) -> str:
    # The contents API wraps base64 payloads at 60 columns. Files are not
    # guaranteed to be UTF-8, so undecodable bytes become U+FFFD.
    return base64.b64decode("".join((encoded or "").split())).decode("utf-8", errors="replace")


class GitHubClient:
    """Authenticated wrapper around the GitHub REST API (repos, refs, contents, pulls)."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = (token or "").strip() or None
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": settings.github_user_agent,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or settings.github_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self.client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.error("GitHub %s %s failed: %s", method, path, exc)
            raise RemoteUnavailable(f"GitHub API unreachable: {exc}") from exc

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.is_success:
            return data

        message = (data.get("message") if isinstance(data, dict) else None) or f"GitHub API error: {response.status_code}"
        logger.warning("GitHub %s %s returned %s: %s", method, path, response.status_code, message)
        raise self._error_for(response.status_code, message)

    @staticmethod
    def _error_for(status_code: int, message: str) -> RemoteError:
        if status_code == 404:
            return RemoteNotFound(message, status_code)
        if status_code == 409 or (status_code == 422 and "already exists" in message.lower()):
            return RemoteConflict(message, status_code)
        return RemoteRejected(message, status_code)

    @staticmethod
    def _contents_path(owner: str, repo: str, path: str) -> str:
        return f"/repos/{owner}/{repo}/contents/{quote(path.strip('/'), safe='/')}"

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._request("GET", f"/repos/{owner}/{repo}")

    async def get_branch_ref(self, owner: str, repo: str, branch: str) -> BranchRef:
        data = await self._request("GET", f"/repos/{owner}/{repo}/git/ref/heads/{quote(branch, safe='/')}")
        sha = (data.get("object") or {}).get("sha") if isinstance(data, dict) else None
        if not sha:
            raise RemoteRejected(f"Branch {branch} has no commit sha")
        return BranchRef(name=branch, base_commit_sha=sha)

    async def create_branch_ref(self, owner: str, repo: str, branch: str, sha: str) -> BranchRef:
        await self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        return BranchRef(name=branch, base_commit_sha=sha)

    async def list_directory(self, owner: str, repo: str, path: str) -> list[dict[str, Any]]:
        data = await self._request("GET", self._contents_path(owner, repo, path))
        # A file path returns a single object instead of a listing.
        return data if isinstance(data, list) else [data]

    async def get_file(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> RemoteFile:
        params = {"ref": ref} if ref else None
        data = await self._request("GET", self._contents_path(owner, repo, path), params=params)
        # A directory path returns a listing instead of a file object.
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise RemoteRejected(f"{path} is not a file", 422)
        try:
            content = decode_content(data.get("content") or "")
        except ValueError as exc:
            raise RemoteRejected(f"Undecodable content for {path}: {exc}") from exc
        return RemoteFile(path=data.get("path") or path, content_hash=data.get("sha"), content=content)

    async def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str,
        sha: Optional[str] = None,
    ) -> dict[str, Any]:
        """Create or update a file; `sha` is required when the file already exists."""
        payload: dict[str, Any] = {
            "message": message,
            "content": encode_content(content),
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha
        return await self._request("PUT", self._contents_path(owner, repo, path), json=payload)

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )

    async def search_repositories(
        self,
        query: str,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 12,
    ) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            "/search/repositories",
            params={"q": query, "sort": sort, "order": order, "per_page": per_page},
        )
        return data.get("items") or []
