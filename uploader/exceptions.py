"""Custom exception classes for the asset upload pipeline."""

from typing import Optional


class PagesDeployError(Exception):
    """
    Base exception class for all deployment errors.

    code is the remote error code when the platform reported one; the CLI
    uses it as the process exit status.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class IndexingError(PagesDeployError):
    """
    Raised when the asset directory cannot be indexed. Always pre-flight.
    """
    pass


class FileTooLargeError(IndexingError):
    """
    Raised when a file exceeds the per-asset size limit.
    """

    def __init__(self, message: str, path: str, size: int):
        super().__init__(message)
        self.path = path
        self.size = size


class TooManyFilesError(IndexingError):
    """
    Raised when the directory holds more files than a deployment allows.
    """

    def __init__(self, message: str, count: int):
        super().__init__(message, code=1)
        self.count = count


class UnreadableFileError(IndexingError):
    """
    Raised when a file or directory vanishes or cannot be read during the walk.
    """
    pass


class ApiError(PagesDeployError):
    """
    Raised when an assets API call fails, remotely or in transport.
    """
    pass


class AuthExpiredError(ApiError):
    """
    Raised when the upload token has expired and must be fetched again.
    """
    pass


class DedupCheckError(PagesDeployError):
    """
    Raised when the missing-fingerprint check fails.
    """
    pass


class UploadFailedError(PagesDeployError):
    """
    Raised when a batch exhausts its upload attempts.
    """
    pass
