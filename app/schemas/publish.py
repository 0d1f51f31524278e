from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from app.schemas.workflow import CamelModel


class PublishPayload(CamelModel):
    repo_url: str = Field(min_length=1)
    token: str = Field(min_length=1)
    target_path: str = Field(min_length=1)
    text_content: str = Field(min_length=1)
    branch_name: Optional[str] = None
    commit_message: Optional[str] = None
    pr_title: Optional[str] = None
    pr_body: Optional[str] = None

    @field_validator("repo_url", "token", "target_path", mode="before")
    @classmethod
    def strip_required(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("branch_name", "commit_message", "pr_title", "pr_body", mode="before")
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        """Blank optional fields fall back to configured defaults."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PublishResponse(CamelModel):
    pr_url: str
    branch: str
