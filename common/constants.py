"""Project-wide constants (platform limits, API error codes, ignore list)."""

MAX_FILE_SIZE_BYTES: int = 25 * 1024 * 1024  # 25 MiB per asset
MAX_FILE_COUNT: int = 20000

MAX_BUCKET_SIZE_BYTES: int = 50 * 1024 * 1024  # 50 MiB per upload request
MAX_BUCKET_FILE_COUNT: int = 5000
BULK_UPLOAD_CONCURRENCY: int = 3
MAX_UPLOAD_ATTEMPTS: int = 5

RETRY_DELAY_SECONDS: float = 1.0
COMMIT_RETRY_DELAY_SECONDS: float = 1.0

FINGERPRINT_LENGTH: int = 32
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

JWT_EXPIRED_ERROR_CODE: int = 8000013

DEFAULT_API_BASE_URL: str = "https://api.cloudflare.com/client/v4"

IGNORE_LIST: frozenset = frozenset({
    "_worker.js",
    "_redirects",
    "_headers",
    ".DS_Store",
    "node_modules",
    ".git",
})
