"""Bounded worker pool that drives upload batches to completion."""

import asyncio
from typing import Awaitable, Callable, List, Optional

from common.logging_config import get_logger
from common.types import UploadBatch
from uploader.credentials import CredentialStore
from uploader.exceptions import ApiError, AuthExpiredError, UploadFailedError
from uploader.settings import UploadSettings

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class UploadScheduler:
    """
    Uploads batches with at most upload_concurrency requests in flight.

    A batch that fails is retried with linear backoff (0s, 1s, 2s, ...) until
    it has used max_upload_attempts attempts. An expired token is refreshed
    before the retry. When a batch runs out of attempts the run is latched as
    failed: workers stop taking batches, requests already in flight finish,
    and run() raises UploadFailedError.
    """

    def __init__(
        self,
        client,
        credentials: CredentialStore,
        settings: UploadSettings,
        on_progress: Optional[ProgressCallback] = None,
        completed: int = 0,
        total: int = 0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize the scheduler.

        Args:
            client: Assets client exposing upload_batch()
            credentials: Shared credential store
            settings: Concurrency and retry limits
            on_progress: Called with (completed, total) after each batch
            completed: Files already counted as done (skipped by dedup)
            total: Total files in the deployment
            sleep: Coroutine used for backoff waits
        """
        self.client = client
        self.credentials = credentials
        self.settings = settings
        self.on_progress = on_progress
        self.completed = completed
        self.total = total
        self.sleep = sleep
        self.dispatched = 0
        self._lock = asyncio.Lock()
        self._failed = asyncio.Event()
        self._error: Optional[Exception] = None

    async def run(self, batches: List[UploadBatch]) -> int:
        """
        Upload every batch and wait for all workers.

        Returns:
            Number of files uploaded

        Raises:
            UploadFailedError: A batch exhausted its attempts or failed unexpectedly
        """
        if not batches:
            logger.debug("No batches to upload")
            return 0

        queue: asyncio.Queue = asyncio.Queue()
        for batch in batches:
            queue.put_nowait(batch)

        worker_count = min(self.settings.upload_concurrency, len(batches))
        logger.debug(f"Starting {worker_count} upload workers for {len(batches)} batches")

        results = await asyncio.gather(
            *(self._worker(i, queue) for i in range(worker_count)),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        if self._error is not None:
            raise UploadFailedError(
                "Failed to upload files. Please try again.",
                code=getattr(self._error, 'code', None) or 1
            ) from self._error

        return sum(len(batch) for batch in batches)

    async def _worker(self, worker_id: int, queue: asyncio.Queue) -> None:
        while not self._failed.is_set():
            try:
                batch = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            self.dispatched += 1
            try:
                await self._upload_with_retry(batch)
            except ApiError as e:
                self._latch(e)
                logger.error(
                    f"Batch of {len(batch)} files failed after {self.settings.max_upload_attempts} "
                    f"attempts [worker={worker_id}, code={e.code}]: {e.message}"
                )
                return
            except Exception as e:
                self._latch(e)
                logger.error(f"Batch of {len(batch)} files failed unexpectedly [worker={worker_id}]: {e!r}")
                raise

            await self._record_progress(len(batch))

    def _latch(self, error: Exception) -> None:
        if self._error is None:
            self._error = error
        self._failed.set()

    async def _upload_with_retry(self, batch: UploadBatch) -> None:
        attempt = 0
        while True:
            try:
                await self.client.upload_batch(self.credentials.current, batch.files)
                return
            except ApiError as e:
                attempt += 1
                if attempt >= self.settings.max_upload_attempts:
                    raise

                delay = (attempt - 1) * self.settings.retry_delay
                logger.warning(
                    f"Upload failed (attempt {attempt}/{self.settings.max_upload_attempts}), "
                    f"retrying in {delay}s: {e.message}"
                )
                await self.sleep(delay)

                if isinstance(e, AuthExpiredError):
                    try:
                        await self.credentials.refresh()
                    except ApiError as refresh_error:
                        logger.warning(f"Upload token refresh failed: {refresh_error.message}")

    async def _record_progress(self, count: int) -> None:
        async with self._lock:
            self.completed += count
            completed = self.completed

        if self.on_progress is not None:
            self.on_progress(completed, self.total)
