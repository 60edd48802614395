"""Walks an asset directory and builds the deployment index."""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple

from common.constants import IGNORE_LIST
from common.logging_config import get_logger
from common.types import DeploymentIndex, FileRecord
from common.utils import format_file_size
from uploader.exceptions import (
    FileTooLargeError,
    TooManyFilesError,
    UnreadableFileError,
)
from uploader.fingerprint import compute_fingerprint, file_extension, guess_content_type
from uploader.settings import UploadSettings

logger = get_logger(__name__)


def _walk(root: Path, settings: UploadSettings) -> List[Tuple[str, Path, int]]:
    """
    Collect (logical_path, absolute_path, size) for every eligible file.

    Symbolic links are skipped without being followed, so the walk can
    neither loop nor leave root.
    """
    found = []
    pending = [root]

    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise UnreadableFileError(f"Cannot read directory {directory}: {e}") from e

        for entry in entries:
            if entry.name in IGNORE_LIST:
                continue

            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    pending.append(Path(entry.path))
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                raise UnreadableFileError(f"Cannot read {entry.path}: {e}") from e

            logical_path = Path(entry.path).relative_to(root).as_posix()

            if size > settings.max_file_size:
                raise FileTooLargeError(
                    f"Pages only supports files up to {format_file_size(settings.max_file_size)} in size\n"
                    f"{logical_path} is {format_file_size(size)} in size",
                    path=logical_path,
                    size=size
                )

            found.append((logical_path, Path(entry.path), size))

    return found


def _read_record(logical_path: str, path: Path, size: int) -> FileRecord:
    try:
        content = path.read_bytes()
    except OSError as e:
        raise UnreadableFileError(f"Cannot read {logical_path}: {e}") from e

    return FileRecord(
        logical_path=logical_path,
        content=content,
        size_in_bytes=size,
        content_type=guess_content_type(logical_path),
        fingerprint=compute_fingerprint(content, file_extension(logical_path)),
    )


def build_index(root, settings: Optional[UploadSettings] = None) -> DeploymentIndex:
    """
    Index every file under root.

    The file-count ceiling is checked after the walk and before any file
    is read, so an oversized deployment fails fast and without network use.

    Args:
        root: Directory of static assets
        settings: Platform limits (defaults to the platform's own)

    Returns:
        Read-only mapping of logical path to FileRecord

    Raises:
        FileTooLargeError: A file is over the per-asset limit
        TooManyFilesError: The directory holds too many files
        UnreadableFileError: A file or directory could not be read
    """
    settings = settings or UploadSettings()
    root = Path(root)

    if not root.is_dir():
        raise UnreadableFileError(f"{root} is not a directory")

    entries = _walk(root, settings)

    if len(entries) > settings.max_file_count:
        raise TooManyFilesError(
            f"Pages only supports up to {settings.max_file_count:,} files in a deployment "
            f"(found {len(entries):,}). Ensure you have specified your build output directory correctly.",
            count=len(entries)
        )

    records: Dict[str, FileRecord] = {}
    total_size = 0
    for logical_path, path, size in entries:
        records[logical_path] = _read_record(logical_path, path, size)
        total_size += size

    logger.info(f"Indexed {len(records)} files ({format_file_size(total_size)}) in {root}")
    return MappingProxyType(records)
