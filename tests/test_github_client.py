from __future__ import annotations

import base64

import httpx
import pytest

from app.core.exceptions import InvalidLocator, RemoteConflict, RemoteNotFound, RemoteRejected, RemoteUnavailable
from app.integrations.github import GitHubClient, decode_content, encode_content
from app.services.marketplace import search_actions
from app.services.repo_locator import parse_repo_url


@pytest.mark.parametrize(
    'url',
    [
        'https://github.com/octo/demo',
        'https://github.com/octo/demo.git',
        'https://github.com/octo/demo/',
        'git@github.com:octo/demo.git',
        '  github.com/octo/demo  ',
    ],
)
def test_parse_repo_url_accepts_common_forms(url):
    locator = parse_repo_url(url)
    assert (locator.owner, locator.name) == ('octo', 'demo')


@pytest.mark.parametrize('url', ['not-a-url', '', 'https://github.com/octo', 'https://github.com/octo/demo/tree/main'])
def test_parse_repo_url_rejects_other_shapes(url):
    with pytest.raises(InvalidLocator):
        parse_repo_url(url)


def test_content_codec_handles_wrapped_base64():
    encoded = encode_content('name: ci\n' * 20)
    wrapped = '\n'.join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
    assert decode_content(wrapped) == 'name: ci\n' * 20


def test_content_codec_replaces_undecodable_bytes():
    assert decode_content(base64.b64encode(b'caf\xe9').decode()) == 'caf\ufffd'


@pytest.mark.asyncio
async def test_headers_include_bearer_token_only_when_given(fake_github):
    fake_github.add('GET', '/repos/octo/demo', payload={'default_branch': 'main'})
    async with fake_github.client(token='secret') as client:
        await client.get_repository('octo', 'demo')
    async with fake_github.client(token='') as client:
        await client.get_repository('octo', 'demo')
    assert fake_github.tokens == ['Bearer secret', None]


@pytest.mark.asyncio
async def test_error_mapping(fake_github):
    fake_github.add('GET', '/repos/octo/gone', 404, {'message': 'Not Found'})
    fake_github.add('POST', '/repos/octo/demo/git/refs', 422, {'message': 'Reference already exists'})
    fake_github.add('POST', '/repos/octo/demo/pulls', 422, {'message': 'Validation Failed'})
    fake_github.add('GET', '/repos/octo/limited', 403, {})

    async with fake_github.client() as client:
        with pytest.raises(RemoteNotFound):
            await client.get_repository('octo', 'gone')
        with pytest.raises(RemoteConflict) as conflict:
            await client.create_branch_ref('octo', 'demo', 'x', 'sha')
        with pytest.raises(RemoteRejected) as rejected:
            await client.create_pull_request('octo', 'demo', title='t', body='b', head='x', base='main')
        with pytest.raises(RemoteRejected) as limited:
            await client.get_repository('octo', 'limited')

    assert conflict.value.status_code == 422
    assert rejected.value.message == 'Validation Failed'
    assert limited.value.message == 'GitHub API error: 403'


@pytest.mark.asyncio
async def test_transport_errors_become_remote_unavailable():
    def explode(request):
        raise httpx.ConnectError('connection refused', request=request)

    async with GitHubClient(token='t', base_url='https://api.github.test', transport=httpx.MockTransport(explode)) as client:
        with pytest.raises(RemoteUnavailable) as excinfo:
            await client.get_repository('octo', 'demo')
    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_get_file_decodes_content(fake_github):
    fake_github.with_file('octo', 'demo', '.github/workflows/ci.yml', 'name: ci\n', 'abc')
    async with fake_github.client() as client:
        remote = await client.get_file('octo', 'demo', '.github/workflows/ci.yml', ref='feature')
    assert remote.content == 'name: ci\n'
    assert remote.content_hash == 'abc'
    assert fake_github.calls[0][3] == {'ref': 'feature'}


@pytest.mark.asyncio
async def test_search_actions_normalizes_results(fake_github):
    fake_github.add(
        'GET',
        '/search/repositories',
        payload={
            'items': [
                {
                    'full_name': 'actions/cache',
                    'description': None,
                    'stargazers_count': 4000,
                    'html_url': 'https://github.com/actions/cache',
                }
            ]
        },
    )
    async with fake_github.client(token=None) as client:
        actions = await search_actions(client, '  ')

    assert actions == [
        {
            'name': 'actions/cache',
            'uses': 'actions/cache@v1',
            'description': 'No description',
            'stars': 4000,
            'url': 'https://github.com/actions/cache',
        }
    ]
    params = fake_github.calls[0][3]
    assert params['q'] == 'ci topic:github-action'
    assert params['sort'] == 'stars'
    assert params['per_page'] == '12'


@pytest.mark.asyncio
async def test_get_file_rejects_directory_listing(fake_github):
    fake_github.add('GET', '/repos/octo/demo/contents/.github/workflows', payload=[{'type': 'file', 'name': 'ci.yml'}])
    async with fake_github.client() as client:
        with pytest.raises(RemoteRejected) as excinfo:
            await client.get_file('octo', 'demo', '.github/workflows')
    assert excinfo.value.status_code == 422
    assert excinfo.value.message == '.github/workflows is not a file'


@pytest.mark.asyncio
async def test_branch_ref_without_sha_is_rejected(fake_github):
    fake_github.add('GET', '/repos/octo/demo/git/ref/heads/main', payload={'ref': 'refs/heads/main'})
    async with fake_github.client() as client:
        with pytest.raises(RemoteRejected):
            await client.get_branch_ref('octo', 'demo', 'main')
