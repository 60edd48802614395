"""Commits the deployment's fingerprint set and builds the manifest."""

import asyncio
from typing import Awaitable, Callable

from common.logging_config import get_logger
from common.types import DeploymentIndex, Manifest
from uploader.credentials import CredentialStore
from uploader.exceptions import ApiError, AuthExpiredError
from uploader.settings import UploadSettings

logger = get_logger(__name__)

COMMIT_FAILED_WARNING = (
    "Failed to update file hashes. Every upload appeared to succeed for this deployment, "
    "but you might need to re-upload for future deployments. This shouldn't have any impact "
    "other than slowing the upload speed of your next deployment."
)


async def _commit(client, credentials: CredentialStore, fingerprints, settings: UploadSettings, sleep) -> None:
    try:
        await client.commit_fingerprints(credentials.current, fingerprints)
        return
    except ApiError as e:
        logger.debug(f"Fingerprint commit failed, retrying once: {e.message}")
        await sleep(settings.commit_retry_delay)
        if isinstance(e, AuthExpiredError):
            await credentials.refresh()

    await client.commit_fingerprints(credentials.current, fingerprints)


async def finalize(
    index: DeploymentIndex,
    client,
    credentials: CredentialStore,
    settings: UploadSettings,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
) -> Manifest:
    """
    Record every fingerprint as referenced and return the manifest.

    The commit is bookkeeping only: when it fails twice the run still
    succeeds, a warning is logged and the manifest is marked uncommitted.

    Args:
        index: Full deployment index, uploaded and skipped files alike
        client: Assets client exposing commit_fingerprints()
        credentials: Shared credential store
        settings: Commit retry delay
        sleep: Coroutine used for the retry wait

    Returns:
        Manifest covering every indexed file
    """
    fingerprints = {record.fingerprint for record in index.values()}

    try:
        await _commit(client, credentials, fingerprints, settings, sleep)
    except ApiError as e:
        logger.warning(COMMIT_FAILED_WARNING)
        logger.debug(f"Fingerprint commit error: code={e.code} {e.message}")
        return Manifest.from_index(index, committed=False)

    return Manifest.from_index(index)
