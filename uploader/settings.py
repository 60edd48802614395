"""Platform limits and tuning knobs for an upload run."""

from dataclasses import dataclass, fields

from common.constants import (
    BULK_UPLOAD_CONCURRENCY,
    COMMIT_RETRY_DELAY_SECONDS,
    MAX_BUCKET_FILE_COUNT,
    MAX_BUCKET_SIZE_BYTES,
    MAX_FILE_COUNT,
    MAX_FILE_SIZE_BYTES,
    MAX_UPLOAD_ATTEMPTS,
    RETRY_DELAY_SECONDS,
)


@dataclass(frozen=True)
class UploadSettings:
    """
    Limits the pipeline honours.

    upload_concurrency doubles as the number of batches the planner starts
    with, so small deployments still use every worker.
    """
    max_file_size: int = MAX_FILE_SIZE_BYTES
    max_file_count: int = MAX_FILE_COUNT
    max_batch_size: int = MAX_BUCKET_SIZE_BYTES
    max_batch_file_count: int = MAX_BUCKET_FILE_COUNT
    upload_concurrency: int = BULK_UPLOAD_CONCURRENCY
    max_upload_attempts: int = MAX_UPLOAD_ATTEMPTS
    retry_delay: float = RETRY_DELAY_SECONDS
    commit_retry_delay: float = COMMIT_RETRY_DELAY_SECONDS

    def __post_init__(self):
        for name in ('max_file_size', 'max_file_count', 'max_batch_size',
                     'max_batch_file_count', 'upload_concurrency', 'max_upload_attempts'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.max_file_size > self.max_batch_size:
            raise ValueError("max_file_size cannot exceed max_batch_size")
        if self.retry_delay < 0 or self.commit_retry_delay < 0:
            raise ValueError("retry delays cannot be negative")

    @classmethod
    def from_dict(cls, data: dict) -> "UploadSettings":
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
