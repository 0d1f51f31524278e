import json
import os
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('GITHUB_API_URL', 'https://api.github.test')
os.environ.setdefault('BRANCH_PREFIX', 'workflow-studio-update')

from app.integrations.github import GitHubClient, encode_content  # noqa: E402

API_URL = os.environ['GITHUB_API_URL']


class FakeGitHub:
    """In-memory GitHub REST API. Responses are queued per (method, path)."""

    def __init__(self):
        self.calls = []
        self.routes = {}
        self.tokens = []

    def add(self, method, path, status=200, payload=None):
        self.routes.setdefault((method, path), []).append((status, payload if payload is not None else {}))
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, request.url.path, body, dict(request.url.params)))
        self.tokens.append(request.headers.get('Authorization'))
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={'message': 'Not Found'})
        # The last queued response repeats.
        status, payload = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(status, json=payload)

    def client(self, token='ghp_test'):
        return GitHubClient(token=token, base_url=API_URL, transport=httpx.MockTransport(self.handler))

    def calls_to(self, method, path):
        return [call for call in self.calls if call[0] == method and call[1] == path]

    def with_repository(self, owner='octo', repo='demo', default_branch='main', sha='base-sha'):
        self.add('GET', f'/repos/{owner}/{repo}', payload={'default_branch': default_branch})
        self.add('GET', f'/repos/{owner}/{repo}/git/ref/heads/{default_branch}', payload={'object': {'sha': sha}})
        return self

    def with_file(self, owner, repo, path, content, sha):
        self.add(
            'GET',
            f'/repos/{owner}/{repo}/contents/{path}',
            payload={'path': path, 'sha': sha, 'content': encode_content(content)},
        )
        return self


@pytest.fixture
def fake_github():
    return FakeGitHub()
