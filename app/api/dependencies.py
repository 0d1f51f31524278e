"""Shared API dependencies."""
from __future__ import annotations

from typing import Callable, Optional

from fastapi import Header

from app.integrations.github import GitHubClient

GitHubClientFactory = Callable[[Optional[str]], GitHubClient]


def get_github_client_factory() -> GitHubClientFactory:
    """Return a callable that builds a GitHub client for a caller-supplied token."""
    return lambda token: GitHubClient(token=token)


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


__all__ = ["GitHubClientFactory", "get_bearer_token", "get_github_client_factory"]
