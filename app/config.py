from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=(str(Path(__file__).resolve().parents[1] / ".env"), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    app_name: str = Field(default="Workflow Studio API", alias="APP_NAME")
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="production",
        alias="APP_ENV",
    )
    app_debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ORIGINS",
    )

    github_api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")
    github_host: str = Field(default="github.com", alias="GITHUB_HOST")
    github_user_agent: str = Field(default="workflow-studio", alias="GITHUB_USER_AGENT")
    github_timeout_seconds: float = Field(default=30.0, gt=0, le=300, alias="GITHUB_TIMEOUT_SECONDS")

    workflows_dir: str = Field(default=".github/workflows", alias="WORKFLOWS_DIR")
    default_workflow_path: str = Field(default=".github/workflows/ci.yml", alias="DEFAULT_WORKFLOW_PATH")
    branch_prefix: str = Field(default="workflow-studio-update", alias="BRANCH_PREFIX")

    default_commit_message: str = Field(
        default="chore: update GitHub Actions workflow via Workflow Studio",
        alias="DEFAULT_COMMIT_MESSAGE",
    )
    default_pr_title: str = Field(default="Update GitHub Actions workflow", alias="DEFAULT_PR_TITLE")
    default_pr_body: str = Field(
        default="This PR updates workflow configuration using Workflow Studio.",
        alias="DEFAULT_PR_BODY",
    )

    max_body_bytes: int = Field(default=2 * 1024 * 1024, ge=1024, alias="MAX_BODY_BYTES")

    @field_validator("github_api_url")
    @classmethod
    def validate_api_url(cls, value: str) -> str:
        """Require an http(s) base URL and drop any trailing slash."""
        normalized = value.strip()
        if not normalized.lower().startswith(("http://", "https://")):
            raise ValueError("GITHUB_API_URL must start with http:// or https://")
        return normalized.rstrip("/")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        """Support comma-separated CORS origins from environment variables."""
        if isinstance(value, str):
            if not value.strip():
                return []
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("workflows_dir", "default_workflow_path")
    @classmethod
    def validate_repo_path(cls, value: str) -> str:
        """Repository paths are relative and slash-separated."""
        normalized = value.strip().strip("/")
        if not normalized:
            raise ValueError("Repository paths must not be empty.")
        return normalized


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings: Settings = get_settings()
