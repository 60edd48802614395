"""Unit tests for AssetsClient."""

import base64
import json

import httpx
import pytest

from common.types import FileRecord, UploadCredential
from uploader.assets_client import USER_AGENT, AssetsClient, build_upload_payload
from uploader.exceptions import ApiError, AuthExpiredError


def envelope(result=None, success=True, errors=None):
    return {'success': success, 'errors': errors or [], 'messages': [], 'result': result}


def make_client(handler):
    return AssetsClient(
        account_id='acc123',
        project_name='my-site',
        api_token='api-token-xyz',
        base_url='http://test/client/v4',
        transport=httpx.MockTransport(handler)
    )


def make_record(path, content, content_type='text/plain'):
    return FileRecord(
        logical_path=path,
        content=content,
        size_in_bytes=len(content),
        content_type=content_type,
        fingerprint=path.ljust(32, '0')[:32],
    )


@pytest.mark.asyncio
async def test_fetch_credential_uses_api_token():
    seen = {}

    def handler(request):
        seen['path'] = request.url.path
        seen['auth'] = request.headers['Authorization']
        seen['agent'] = request.headers['User-Agent']
        return httpx.Response(200, json=envelope({'jwt': 'jwt-abc'}))

    async with make_client(handler) as client:
        credential = await client.fetch_credential()

    assert credential.token == 'jwt-abc'
    assert seen['path'] == '/client/v4/accounts/acc123/pages/projects/my-site/upload-token'
    assert seen['auth'] == 'Bearer api-token-xyz'
    assert seen['agent'] == USER_AGENT


@pytest.mark.asyncio
async def test_check_missing_sends_sorted_hashes():
    seen = {}

    def handler(request):
        seen['body'] = json.loads(request.content)
        seen['auth'] = request.headers['Authorization']
        return httpx.Response(200, json=envelope(['bbb']))

    async with make_client(handler) as client:
        missing = await client.check_missing(UploadCredential(token='jwt-1'), {'bbb', 'aaa'})

    assert missing == {'bbb'}
    assert seen['body'] == {'hashes': ['aaa', 'bbb']}
    assert seen['auth'] == 'Bearer jwt-1'


@pytest.mark.asyncio
async def test_upload_batch_payload():
    seen = {}

    def handler(request):
        seen['path'] = request.url.path
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json=envelope(None))

    record = make_record('index.html', b'<html></html>', 'text/html')
    async with make_client(handler) as client:
        await client.upload_batch(UploadCredential(token='jwt-1'), [record])

    assert seen['path'] == '/client/v4/pages/assets/upload'
    assert seen['body'] == [{
        'key': record.fingerprint,
        'value': base64.b64encode(b'<html></html>').decode(),
        'metadata': {'contentType': 'text/html'},
        'base64': True,
    }]


@pytest.mark.asyncio
async def test_commit_fingerprints_endpoint():
    seen = {}

    def handler(request):
        seen['path'] = request.url.path
        seen['body'] = json.loads(request.content)
        return httpx.Response(200, json=envelope(True))

    async with make_client(handler) as client:
        await client.commit_fingerprints(UploadCredential(token='jwt-1'), ['ccc', 'aaa', 'ccc'])

    assert seen['path'] == '/client/v4/pages/assets/upsert-hashes'
    assert seen['body'] == {'hashes': ['aaa', 'ccc']}


@pytest.mark.asyncio
async def test_expired_token_raises_auth_expired():
    def handler(request):
        return httpx.Response(401, json=envelope(success=False, errors=[{'code': 8000013, 'message': 'jwt expired'}]))

    async with make_client(handler) as client:
        with pytest.raises(AuthExpiredError) as exc_info:
            await client.upload_batch(UploadCredential(token='old'), [make_record('a.txt', b'a')])

    assert exc_info.value.code == 8000013
    assert exc_info.value.message == 'jwt expired'


@pytest.mark.asyncio
async def test_other_api_error_keeps_code():
    def handler(request):
        return httpx.Response(400, json=envelope(success=False, errors=[{'code': 8000096, 'message': 'bad request'}]))

    async with make_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.check_missing(UploadCredential(token='t'), ['aaa'])

    assert not isinstance(exc_info.value, AuthExpiredError)
    assert exc_info.value.code == 8000096


@pytest.mark.asyncio
async def test_malformed_response():
    def handler(request):
        return httpx.Response(502, text='<html>Bad Gateway</html>')

    async with make_client(handler) as client:
        with pytest.raises(ApiError, match='malformed response') as exc_info:
            await client.fetch_credential()

    assert exc_info.value.code is None
    assert '502' in exc_info.value.message


@pytest.mark.asyncio
async def test_network_error_is_api_error():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    async with make_client(handler) as client:
        with pytest.raises(ApiError, match='Network error'):
            await client.check_missing(UploadCredential(token='t'), ['aaa'])


@pytest.mark.asyncio
async def test_undecodable_body_is_api_error():
    def handler(request):
        return httpx.Response(
            200,
            headers={'Content-Encoding': 'gzip', 'Content-Type': 'application/json'},
            stream=httpx.ByteStream(b'not gzip'),
        )

    async with make_client(handler) as client:
        with pytest.raises(ApiError, match='Request failed') as exc_info:
            await client.upload_batch(UploadCredential(token='t'), [make_record('a.txt', b'a')])

    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
    assert exc_info.value.code is None


@pytest.mark.asyncio
async def test_too_many_redirects_is_api_error():
    def handler(request):
        raise httpx.TooManyRedirects('Exceeded maximum allowed redirects.', request=request)

    async with make_client(handler) as client:
        with pytest.raises(ApiError, match='TooManyRedirects'):
            await client.commit_fingerprints(UploadCredential(token='t'), ['aaa'])


@pytest.mark.asyncio
async def test_check_missing_rejects_non_list_result():
    def handler(request):
        return httpx.Response(200, json=envelope({'hashes': []}))

    async with make_client(handler) as client:
        with pytest.raises(ApiError):
            await client.check_missing(UploadCredential(token='t'), ['aaa'])


def test_upload_timeout_scales_with_size():
    client = make_client(lambda request: httpx.Response(200))

    assert client._calculate_upload_timeout(0) == 30.0
    assert client._calculate_upload_timeout(10 * 1024 * 1024) == pytest.approx(31.0)


def test_build_upload_payload_keeps_order():
    payload = build_upload_payload([make_record('b.txt', b'b'), make_record('a.txt', b'a')])

    assert [item['value'] for item in payload] == ['Yg==', 'YQ==']
