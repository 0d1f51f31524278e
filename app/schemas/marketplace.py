from __future__ import annotations

from app.schemas.workflow import CamelModel


class MarketplaceAction(CamelModel):
    name: str
    uses: str
    description: str
    stars: int = 0
    url: str = ""


class MarketplaceSearchResponse(CamelModel):
    actions: list[MarketplaceAction]
