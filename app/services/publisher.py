"""
Publish a workflow file as a pull request.

The orchestrator is an explicit state machine. Each state has one transition
method that performs at most one logical remote step and returns the next
state. The only retry is the single branch-name conflict retry, and it is
encoded as its own state so it cannot loop.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from app.config import settings
from app.core.exceptions import AppError, RemoteConflict, RemoteNotFound, RemoteRejected
from app.integrations.github import GitHubClient
from app.models.publish import PublishRequest, PublishResult
from app.services.repo_locator import RepoLocator, parse_repo_url

logger = logging.getLogger(__name__)

_UNSAFE_BRANCH_CHARS = re.compile(r"[^A-Za-z0-9/_-]")


class PublishState(str, Enum):
    RESOLVING_REPO = "resolving_repo"
    FETCHING_BASE_REF = "fetching_base_ref"
    CREATING_BRANCH = "creating_branch"
    BRANCH_CONFLICT_RETRY = "branch_conflict_retry"
    CHECKING_EXISTING_FILE = "checking_existing_file"
    WRITING_FILE = "writing_file"
    OPENING_PULL_REQUEST = "opening_pull_request"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PublishState.DONE, PublishState.FAILED})


def sanitize_branch_name(name: str) -> str:
    return _UNSAFE_BRANCH_CHARS.sub("-", name.strip())


def epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class PublishContext:
    """Values produced by earlier states and consumed by later ones."""

    request: PublishRequest
    state: PublishState = PublishState.RESOLVING_REPO
    history: list[PublishState] = field(default_factory=list)
    repo: Optional[RepoLocator] = None
    default_branch: Optional[str] = None
    base_sha: Optional[str] = None
    branch: Optional[str] = None
    existing_sha: Optional[str] = None
    pr_url: Optional[str] = None
    pr_number: Optional[int] = None
    error: Optional[AppError] = None


Transition = Callable[[PublishContext], Awaitable[PublishState]]


class PublishOrchestrator:
    """Drives branch -> commit -> pull request against one repository."""

    def __init__(
        self,
        client: GitHubClient,
        clock: Optional[Callable[[], int]] = None,
        branch_prefix: Optional[str] = None,
    ):
        self.client = client
        self.clock = clock or epoch_millis
        self.branch_prefix = branch_prefix or settings.branch_prefix
        self._transitions: dict[PublishState, Transition] = {
            PublishState.RESOLVING_REPO: self._resolve_repo,
            PublishState.FETCHING_BASE_REF: self._fetch_base_ref,
            PublishState.CREATING_BRANCH: self._create_branch,
            PublishState.BRANCH_CONFLICT_RETRY: self._retry_branch,
            PublishState.CHECKING_EXISTING_FILE: self._check_existing_file,
            PublishState.WRITING_FILE: self._write_file,
            PublishState.OPENING_PULL_REQUEST: self._open_pull_request,
        }

    async def publish(self, request: PublishRequest) -> PublishResult:
        ctx = PublishContext(request=request)
        while ctx.state not in TERMINAL_STATES:
            ctx.history.append(ctx.state)
            transition = self._transitions[ctx.state]
            try:
                next_state = await transition(ctx)
            except AppError as exc:
                ctx.error = exc
                ctx.history.append(PublishState.FAILED)
                logger.error(
                    "Publish to %s failed in state %s (branch=%s): %s",
                    request.repo_url,
                    ctx.state.value,
                    ctx.branch,
                    exc.message,
                )
                ctx.state = PublishState.FAILED
                raise
            logger.debug("Publish state %s -> %s", ctx.state.value, next_state.value)
            ctx.state = next_state

        ctx.history.append(PublishState.DONE)
        logger.info("Opened pull request %s from branch %s", ctx.pr_url, ctx.branch)
        return PublishResult(
            pr_url=ctx.pr_url or "",
            branch=ctx.branch or "",
            pr_number=ctx.pr_number,
            states=[state.value for state in ctx.history],
        )

    async def _resolve_repo(self, ctx: PublishContext) -> PublishState:
        ctx.repo = parse_repo_url(ctx.request.repo_url)
        return PublishState.FETCHING_BASE_REF

    async def _fetch_base_ref(self, ctx: PublishContext) -> PublishState:
        repo = ctx.repo
        info = await self.client.get_repository(repo.owner, repo.name)
        ctx.default_branch = info.get("default_branch") if isinstance(info, dict) else None
        if not ctx.default_branch:
            raise RemoteRejected(f"Repository {repo.full_name} reported no default branch")
        base = await self.client.get_branch_ref(repo.owner, repo.name, ctx.default_branch)
        ctx.base_sha = base.base_commit_sha
        return PublishState.CREATING_BRANCH

    async def _create_branch(self, ctx: PublishContext) -> PublishState:
        desired = (ctx.request.desired_branch_name or "").strip()
        ctx.branch = sanitize_branch_name(desired or f"{self.branch_prefix}-{self.clock()}")
        try:
            await self.client.create_branch_ref(ctx.repo.owner, ctx.repo.name, ctx.branch, ctx.base_sha)
        except RemoteConflict:
            logger.info("Branch %s already exists on %s; retrying once", ctx.branch, ctx.repo.full_name)
            return PublishState.BRANCH_CONFLICT_RETRY
        return PublishState.CHECKING_EXISTING_FILE

    async def _retry_branch(self, ctx: PublishContext) -> PublishState:
        ctx.branch = f"{ctx.branch}-{self.clock()}"
        await self.client.create_branch_ref(ctx.repo.owner, ctx.repo.name, ctx.branch, ctx.base_sha)
        return PublishState.CHECKING_EXISTING_FILE

    async def _check_existing_file(self, ctx: PublishContext) -> PublishState:
        try:
            existing = await self.client.get_file(
                ctx.repo.owner,
                ctx.repo.name,
                ctx.request.target_path,
                ref=ctx.branch,
            )
        except RemoteNotFound:
            ctx.existing_sha = None
        else:
            ctx.existing_sha = existing.content_hash
        return PublishState.WRITING_FILE

    async def _write_file(self, ctx: PublishContext) -> PublishState:
        await self.client.put_file(
            ctx.repo.owner,
            ctx.repo.name,
            ctx.request.target_path,
            ctx.request.text_content,
            ctx.request.commit_message,
            ctx.branch,
            sha=ctx.existing_sha,
        )
        return PublishState.OPENING_PULL_REQUEST

    async def _open_pull_request(self, ctx: PublishContext) -> PublishState:
        pr = await self.client.create_pull_request(
            ctx.repo.owner,
            ctx.repo.name,
            title=ctx.request.pr_title,
            body=ctx.request.pr_body,
            head=ctx.branch,
            base=ctx.default_branch,
        )
        ctx.pr_url = pr.get("html_url")
        ctx.pr_number = pr.get("number")
        return PublishState.DONE
