"""Shared pytest fixtures for all tests."""

import asyncio

import pytest

from cli.config import Config
from common.types import UploadCredential


class FakeAssetsClient:
    """
    In-memory stand-in for AssetsClient.

    upload_errors and commit_errors are consumed one per call; None entries
    mean that call succeeds.
    """

    def __init__(self, known=None, upload_errors=None, commit_errors=None, check_error=None):
        self.known = set(known or ())
        self.upload_errors = list(upload_errors or [])
        self.commit_errors = list(commit_errors or [])
        self.check_error = check_error
        self.credential_fetches = 0
        self.check_calls = []
        self.upload_calls = []
        self.commit_calls = []
        self.uploaded = []

    async def fetch_credential(self):
        self.credential_fetches += 1
        return UploadCredential(token=f"jwt-{self.credential_fetches}")

    async def check_missing(self, credential, fingerprints):
        self.check_calls.append(set(fingerprints))
        if self.check_error is not None:
            raise self.check_error
        return set(fingerprints) - self.known

    async def upload_batch(self, credential, files):
        await asyncio.sleep(0)
        self.upload_calls.append((credential.token, [f.logical_path for f in files]))
        if self.upload_errors:
            error = self.upload_errors.pop(0)
            if error is not None:
                raise error
        self.uploaded.extend(f.logical_path for f in files)
        self.known.update(f.fingerprint for f in files)

    async def commit_fingerprints(self, credential, fingerprints):
        self.commit_calls.append((credential.token, set(fingerprints)))
        if self.commit_errors:
            error = self.commit_errors.pop(0)
            if error is not None:
                raise error


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_client():
    return FakeAssetsClient()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .pages-deploy directory
    """
    config_dir = tmp_path / '.pages-deploy'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, monkeypatch):
    """
    Create temporary config instance with a clean environment.

    Returns:
        Config instance with temp config file
    """
    for name in ('CLOUDFLARE_API_TOKEN', 'CLOUDFLARE_ACCOUNT_ID',
                 'CLOUDFLARE_API_BASE_URL', 'CF_API_BASE_URL'):
        monkeypatch.delenv(name, raising=False)
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def site_dir(tmp_path):
    """
    Create a small static site.

    Returns:
        Path to a directory with index.html, a stylesheet and an image
    """
    root = tmp_path / 'site'
    (root / 'css').mkdir(parents=True)
    (root / 'img').mkdir()
    (root / 'index.html').write_text('<html><body>Hello</body></html>')
    (root / 'css' / 'main.css').write_text('body { color: red; }')
    (root / 'img' / 'logo.png').write_bytes(b'\x89PNG' + b'\x00' * 2048)
    return root
