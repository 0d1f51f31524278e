"""Workflow load/parse/generate routes."""
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import GitHubClientFactory, get_github_client_factory
from app.models.workflow import Step, WorkflowDocument
from app.schemas.workflow import (
    GenerateWorkflowRequest,
    GenerateWorkflowResponse,
    LoadWorkflowsRequest,
    LoadWorkflowsResponse,
    ParseWorkflowRequest,
    WorkflowDocumentSchema,
)
from app.services.workflow_codec import parse, serialize
from app.services.workflow_loader import load_workflows

router = APIRouter()


@router.post("/load", response_model=LoadWorkflowsResponse)
async def load_repository_workflows(
    payload: LoadWorkflowsRequest,
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> dict[str, Any]:
    async with client_factory(payload.token) as client:
        result = await load_workflows(client, payload.repo_url)
    for workflow in result["workflows"]:
        workflow["steps"] = [asdict(step) for step in workflow["steps"]]
    return result


@router.post("/parse", response_model=WorkflowDocumentSchema)
async def parse_workflow(payload: ParseWorkflowRequest) -> WorkflowDocumentSchema:
    document = parse(payload.content)
    if not document.steps:
        raise HTTPException(status_code=422, detail="No steps found in workflow content")
    return WorkflowDocumentSchema(
        display_name=document.display_name,
        steps=[asdict(step) for step in document.steps],
    )


@router.post("/generate", response_model=GenerateWorkflowResponse)
async def generate_workflow(payload: GenerateWorkflowRequest) -> GenerateWorkflowResponse:
    document = WorkflowDocument(
        display_name=payload.display_name,
        steps=[Step(name=step.name, uses=step.uses, run=step.run) for step in payload.steps],
    )
    return GenerateWorkflowResponse(content=serialize(document))
