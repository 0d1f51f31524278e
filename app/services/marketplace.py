from __future__ import annotations

from typing import Any

from app.integrations.github import GitHubClient

ACTION_TOPIC = "topic:github-action"


def _normalize_action(item: dict[str, Any]) -> dict[str, Any]:
    full_name = item.get("full_name") or ""
    return {
        "name": full_name,
        "uses": f"{full_name}@v1",
        "description": item.get("description") or "No description",
        "stars": item.get("stargazers_count") or 0,
        "url": item.get("html_url") or "",
    }


async def search_actions(client: GitHubClient, query: str, limit: int = 12) -> list[dict[str, Any]]:
    """Search repositories tagged as GitHub Actions, most starred first."""
    q = f"{(query or '').strip() or 'ci'} {ACTION_TOPIC}"
    items = await client.search_repositories(q, sort="stars", order="desc", per_page=limit)
    return [_normalize_action(item) for item in items]
