"""End-to-end upload of an asset directory."""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from common.logging_config import get_logger
from common.types import Manifest
from common.utils import format_time
from uploader.credentials import CredentialStore
from uploader.dedup import resolve_upload_set
from uploader.finalizer import finalize
from uploader.indexer import build_index
from uploader.planner import plan_batches
from uploader.progress import ProgressReporter
from uploader.scheduler import UploadScheduler
from uploader.settings import UploadSettings

logger = get_logger(__name__)


async def upload_directory(
    directory,
    client,
    settings: Optional[UploadSettings] = None,
    progress_stream=None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
) -> Manifest:
    """
    Upload a directory of static assets and return its manifest.

    Indexing finishes, limits included, before the first network call.

    Args:
        directory: Root of the static assets
        client: Assets client (fetch_credential, check_missing, upload_batch, commit_fingerprints)
        settings: Platform limits
        progress_stream: Where the progress line is written (stdout by default)
        sleep: Coroutine used for retry waits

    Returns:
        Manifest mapping "/<path>" to fingerprint for every indexed file

    Raises:
        IndexingError: Pre-flight failure
        DedupCheckError: Missing-fingerprint check failed
        UploadFailedError: A batch exhausted its attempts
    """
    settings = settings or UploadSettings()

    index = build_index(directory, settings)

    credentials = await CredentialStore.create(client.fetch_credential)
    start = time.monotonic()

    upload_set = await resolve_upload_set(index, client, credentials.current)
    batches = plan_batches(upload_set.files, settings)

    reporter = ProgressReporter(total=len(index), done=upload_set.skipped, stream=progress_stream)
    reporter.start()
    scheduler = UploadScheduler(
        client,
        credentials,
        settings,
        on_progress=reporter.update,
        completed=upload_set.skipped,
        total=len(index),
        sleep=sleep
    )
    try:
        uploaded = await scheduler.run(batches)
    finally:
        reporter.close()

    skipped_message = f"({upload_set.skipped} already uploaded) " if upload_set.skipped else ""
    logger.info(
        f"✨ Success! Uploaded {uploaded} files {skipped_message}"
        f"{format_time(time.monotonic() - start)}"
    )

    return await finalize(index, client, credentials, settings, sleep=sleep)
