"""Publish a generated workflow as a pull request."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import GitHubClientFactory, get_github_client_factory
from app.config import settings
from app.models.publish import PublishRequest
from app.schemas.publish import PublishPayload, PublishResponse
from app.services.publisher import PublishOrchestrator

router = APIRouter()


@router.post("/publish", response_model=PublishResponse)
async def publish_workflow(
    payload: PublishPayload,
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> PublishResponse:
    request = PublishRequest(
        repo_url=payload.repo_url,
        target_path=payload.target_path,
        text_content=payload.text_content,
        desired_branch_name=payload.branch_name,
        commit_message=payload.commit_message or settings.default_commit_message,
        pr_title=payload.pr_title or settings.default_pr_title,
        pr_body=payload.pr_body or settings.default_pr_body,
    )
    async with client_factory(payload.token) as client:
        result = await PublishOrchestrator(client).publish(request)
    return PublishResponse(pr_url=result.pr_url, branch=result.branch)
