"""Filters the deployment index down to content the store is missing."""

from dataclasses import dataclass
from typing import List

from common.logging_config import get_logger
from common.types import DeploymentIndex, FileRecord, UploadCredential
from uploader.exceptions import ApiError, DedupCheckError

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadSet:
    """Files that need uploading, and how many were skipped."""
    files: List[FileRecord]
    skipped: int


async def resolve_upload_set(index: DeploymentIndex, client, credential: UploadCredential) -> UploadSet:
    """
    Ask the store which fingerprints it lacks and keep only those files.

    Skipped files still belong to the deployment; only their upload is
    avoided.

    Args:
        index: Full deployment index
        client: Assets client exposing check_missing()
        credential: Current upload credential

    Returns:
        UploadSet with the files to upload (index order) and the skip count

    Raises:
        DedupCheckError: The check failed; nothing can be uploaded safely
    """
    if not index:
        return UploadSet(files=[], skipped=0)

    fingerprints = {record.fingerprint for record in index.values()}

    try:
        missing = await client.check_missing(credential, fingerprints)
    except ApiError as e:
        logger.error(f"Missing-fingerprint check failed: {e}")
        raise DedupCheckError(f"Failed to check which files need uploading: {e.message}", code=e.code) from e

    files = [record for record in index.values() if record.fingerprint in missing]
    skipped = len(index) - len(files)
    logger.debug(f"Dedup check: {len(files)} to upload, {skipped} already stored")
    return UploadSet(files=files, skipped=skipped)
