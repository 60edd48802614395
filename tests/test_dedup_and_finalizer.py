"""Tests for the dedup resolver and the finalizer."""

import pytest

from conftest import FakeAssetsClient, RecordingSleep
from uploader.credentials import CredentialStore
from uploader.dedup import resolve_upload_set
from uploader.exceptions import ApiError, AuthExpiredError, DedupCheckError
from uploader.finalizer import finalize
from uploader.indexer import build_index
from uploader.settings import UploadSettings


@pytest.mark.asyncio
async def test_upload_set_keeps_only_missing(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient(known={index['index.html'].fingerprint})
    credentials = await CredentialStore.create(client.fetch_credential)

    upload_set = await resolve_upload_set(index, client, credentials.current)

    assert sorted(f.logical_path for f in upload_set.files) == ['css/main.css', 'img/logo.png']
    assert upload_set.skipped == 1
    assert client.check_calls == [{r.fingerprint for r in index.values()}]


@pytest.mark.asyncio
async def test_everything_known_yields_empty_upload_set(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient(known={r.fingerprint for r in index.values()})
    credentials = await CredentialStore.create(client.fetch_credential)

    upload_set = await resolve_upload_set(index, client, credentials.current)

    assert upload_set.files == []
    assert upload_set.skipped == 3


@pytest.mark.asyncio
async def test_dedup_failure_is_fatal(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient(check_error=ApiError('unavailable', code=8000000))
    credentials = await CredentialStore.create(client.fetch_credential)

    with pytest.raises(DedupCheckError) as exc_info:
        await resolve_upload_set(index, client, credentials.current)

    assert exc_info.value.code == 8000000


@pytest.mark.asyncio
async def test_empty_index_skips_network(tmp_path):
    client = FakeAssetsClient()
    credentials = await CredentialStore.create(client.fetch_credential)

    upload_set = await resolve_upload_set(build_index(tmp_path), client, credentials.current)

    assert upload_set.files == []
    assert client.check_calls == []


@pytest.mark.asyncio
async def test_finalize_commits_every_fingerprint(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient()
    credentials = await CredentialStore.create(client.fetch_credential)

    manifest = await finalize(index, client, credentials, UploadSettings(), sleep=RecordingSleep())

    assert manifest.committed
    assert client.commit_calls == [('jwt-1', {r.fingerprint for r in index.values()})]
    assert list(manifest.entries) == ['/css/main.css', '/img/logo.png', '/index.html']
    assert manifest.entries['/index.html'] == index['index.html'].fingerprint


@pytest.mark.asyncio
async def test_finalize_retries_once_after_delay(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient(commit_errors=[ApiError('flaky')])
    credentials = await CredentialStore.create(client.fetch_credential)
    sleep = RecordingSleep()

    manifest = await finalize(index, client, credentials, UploadSettings(), sleep=sleep)

    assert manifest.committed
    assert len(client.commit_calls) == 2
    assert sleep.delays == [1.0]
    assert credentials.refresh_count == 0


@pytest.mark.asyncio
async def test_finalize_refreshes_expired_token(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient(commit_errors=[AuthExpiredError('expired', code=8000013)])
    credentials = await CredentialStore.create(client.fetch_credential)

    manifest = await finalize(index, client, credentials, UploadSettings(), sleep=RecordingSleep())

    assert manifest.committed
    assert [token for token, _ in client.commit_calls] == ['jwt-1', 'jwt-2']


@pytest.mark.asyncio
async def test_finalize_second_failure_is_only_a_warning(site_dir):
    index = build_index(site_dir)
    client = FakeAssetsClient(commit_errors=[ApiError('down'), ApiError('still down')])
    credentials = await CredentialStore.create(client.fetch_credential)

    manifest = await finalize(index, client, credentials, UploadSettings(), sleep=RecordingSleep())

    assert not manifest.committed
    assert len(client.commit_calls) == 2
    assert len(manifest) == 3
