from __future__ import annotations

import logging
import re
from typing import Any, Optional

from app.config import settings
from app.core.exceptions import RemoteNotFound
from app.integrations.github import GitHubClient
from app.services.repo_locator import parse_repo_url
from app.services.workflow_codec import parse

logger = logging.getLogger(__name__)

WORKFLOW_FILE_PATTERN = re.compile(r"\.ya?ml$", re.IGNORECASE)


def is_workflow_entry(entry: dict[str, Any]) -> bool:
    return entry.get("type") == "file" and bool(WORKFLOW_FILE_PATTERN.search(entry.get("name") or ""))


async def load_workflows(
    client: GitHubClient,
    repo_url: str,
    directory: Optional[str] = None,
) -> dict[str, Any]:
    """
    Fetch every workflow file from a repository's workflow directory.

    A missing directory is a normal outcome and yields an empty result with
    `has_actions` false.
    """
    repo = parse_repo_url(repo_url)
    directory = directory or settings.workflows_dir

    try:
        entries = await client.list_directory(repo.owner, repo.name, directory)
    except RemoteNotFound:
        logger.info("No %s directory in %s", directory, repo.full_name)
        return {"owner": repo.owner, "repo": repo.name, "has_actions": False, "workflows": []}

    workflows: list[dict[str, Any]] = []
    for entry in filter(is_workflow_entry, entries):
        remote = await client.get_file(repo.owner, repo.name, entry["path"])
        workflows.append(
            {
                "name": entry["name"],
                "path": entry["path"],
                "content_hash": entry.get("sha") or remote.content_hash,
                "content": remote.content,
                "steps": parse(remote.content).steps,
            }
        )

    logger.info("Loaded %d workflow file(s) from %s", len(workflows), repo.full_name)
    return {
        "owner": repo.owner,
        "repo": repo.name,
        "has_actions": bool(workflows),
        "workflows": workflows,
    }
