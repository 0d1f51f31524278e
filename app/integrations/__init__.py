"""External integration adapters."""

from .github import GitHubClient, decode_content, encode_content

__all__ = [
    "GitHubClient",
    "decode_content",
    "encode_content",
]
