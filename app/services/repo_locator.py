from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from app.config import settings
from app.core.exceptions import InvalidLocator


@dataclass(frozen=True)
class RepoLocator:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def _locator_pattern(host: str) -> re.Pattern[str]:
    return re.compile(rf"{re.escape(host)}[/:]([\w.-]+)/([\w.-]+?)(?:\.git|/)?$", re.IGNORECASE)


def parse_repo_url(repo_url: str, host: Optional[str] = None) -> RepoLocator:
    """Split `<host>[:/]<owner>/<name>[.git][/]` into owner and name."""
    match = _locator_pattern(host or settings.github_host).search((repo_url or "").strip())
    if not match:
        raise InvalidLocator(f"Invalid repository URL. Use https://{host or settings.github_host}/owner/repo")
    return RepoLocator(owner=match.group(1), name=match.group(2))
