"""Shared data type definitions (FileRecord, UploadBatch, UploadCredential, Manifest)."""

import json
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional


@dataclass(frozen=True)
class FileRecord:
    """
    One indexed asset.
    """
    logical_path: str
    content: bytes = field(repr=False)
    size_in_bytes: int
    content_type: str
    fingerprint: str


DeploymentIndex = Mapping[str, FileRecord]


@dataclass
class UploadBatch:
    """
    Group of files sent in a single upload request.

    The planner only ever grows a batch through add(), which refuses any file
    that would push it past either ceiling.
    """
    max_size: int
    max_file_count: int
    files: List[FileRecord] = field(default_factory=list)
    remaining_capacity: int = field(init=False)

    def __post_init__(self):
        self.remaining_capacity = self.max_size - self.total_size

    @property
    def total_size(self) -> int:
        return sum(f.size_in_bytes for f in self.files)

    def fits(self, record: FileRecord) -> bool:
        """Check whether record can join without breaking a ceiling."""
        return (
            self.remaining_capacity >= record.size_in_bytes
            and len(self.files) < self.max_file_count
        )

    def add(self, record: FileRecord) -> None:
        if not self.fits(record):
            raise ValueError(f"{record.logical_path} does not fit in batch")
        self.files.append(record)
        self.remaining_capacity -= record.size_in_bytes

    def __len__(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class UploadCredential:
    """
    Short-lived bearer token scoped to one project's asset namespace.
    """
    token: str = field(repr=False)
    fetched_at: float = field(default_factory=time.monotonic)

    def age(self, now: Optional[float] = None) -> float:
        """Seconds since the token was fetched."""
        return (time.monotonic() if now is None else now) - self.fetched_at


@dataclass(frozen=True)
class Manifest:
    """
    Final "/<path>" -> fingerprint mapping for a deployment.

    committed is False when the fingerprint commit call failed; the entries
    are still complete because they describe files on disk.
    """
    entries: Mapping[str, str]
    committed: bool = True

    @classmethod
    def from_index(cls, index: DeploymentIndex, committed: bool = True) -> "Manifest":
        entries = {
            f"/{path}": index[path].fingerprint
            for path in sorted(index)
        }
        return cls(entries=MappingProxyType(entries), committed=committed)

    def to_json(self) -> str:
        return json.dumps(dict(self.entries), indent=2)

    def __len__(self) -> int:
        return len(self.entries)
