"""Packs the upload set into size- and count-bounded batches."""

from typing import Iterable, List

from common.logging_config import get_logger
from common.types import FileRecord, UploadBatch
from uploader.settings import UploadSettings

logger = get_logger(__name__)


def plan_batches(files: Iterable[FileRecord], settings: UploadSettings) -> List[UploadBatch]:
    """
    Partition files into upload batches.

    Files are placed largest first. The planner starts with one empty batch
    per upload worker and scans them from an offset that advances with every
    file, so consecutive files land in different batches. A file that fits
    nowhere opens a new batch.

    Args:
        files: Files to upload
        settings: Batch ceilings and worker count

    Returns:
        Non-empty batches; each file appears in exactly one
    """
    ordered = sorted(files, key=lambda f: (-f.size_in_bytes, f.logical_path))

    batches = [
        UploadBatch(max_size=settings.max_batch_size, max_file_count=settings.max_batch_file_count)
        for _ in range(settings.upload_concurrency)
    ]

    for offset, record in enumerate(ordered):
        count = len(batches)
        for i in range(count):
            batch = batches[(i + offset) % count]
            if batch.fits(record):
                batch.add(record)
                break
        else:
            batch = UploadBatch(max_size=settings.max_batch_size, max_file_count=settings.max_batch_file_count)
            batch.add(record)
            batches.append(batch)

    planned = [batch for batch in batches if batch.files]
    logger.debug(f"Planned {len(planned)} batches for {len(ordered)} files")
    return planned
