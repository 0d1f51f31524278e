"""Transient records exchanged while publishing a workflow."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RemoteFile:
    path: str
    content_hash: Optional[str] = None
    content: str = ""


@dataclass(frozen=True)
class BranchRef:
    name: str
    base_commit_sha: str


@dataclass(frozen=True)
class PublishRequest:
    repo_url: str
    target_path: str
    text_content: str
    commit_message: str
    pr_title: str
    pr_body: str
    desired_branch_name: Optional[str] = None


@dataclass
class PublishResult:
    pr_url: str
    branch: str
    pr_number: Optional[int] = None
    states: list[str] = field(default_factory=list)
