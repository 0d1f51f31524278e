"""Step palette and marketplace search routes."""
from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import GitHubClientFactory, get_bearer_token, get_github_client_factory
from app.schemas.marketplace import MarketplaceSearchResponse
from app.schemas.workflow import ComponentsResponse
from app.services.editor import COMMON_COMPONENTS
from app.services.marketplace import search_actions

router = APIRouter()


@router.get("/components", response_model=ComponentsResponse)
async def list_components() -> ComponentsResponse:
    return ComponentsResponse(components=[asdict(step) for step in COMMON_COMPONENTS])


@router.get("/marketplace/search", response_model=MarketplaceSearchResponse)
async def search_marketplace(
    q: str = Query(default=""),
    token: Optional[str] = Query(default=None),
    bearer: Optional[str] = Depends(get_bearer_token),
    client_factory: GitHubClientFactory = Depends(get_github_client_factory),
) -> MarketplaceSearchResponse:
    async with client_factory(token or bearer) as client:
        actions = await search_actions(client, q)
    return MarketplaceSearchResponse(actions=actions)
