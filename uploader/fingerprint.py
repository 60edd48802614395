"""Content fingerprints used as dedup keys and remote storage keys."""

import base64
import mimetypes
import posixpath

from blake3 import blake3

from common.constants import DEFAULT_CONTENT_TYPE, FINGERPRINT_LENGTH


def file_extension(logical_path: str) -> str:
    """
    Get the extension of a path's basename without the leading dot.

    Dotfiles such as '.env' have no extension; 'a.tar.gz' yields 'gz'.
    """
    return posixpath.splitext(posixpath.basename(logical_path))[1][1:]


def compute_fingerprint(content: bytes, extension: str) -> str:
    """
    Compute the fingerprint of a file's content.

    The digest covers the base64 text of the content followed by the
    extension, so identical bytes under different extensions never collide.

    Args:
        content: Raw file bytes
        extension: Extension without the leading dot ('' when none)

    Returns:
        First 32 hex characters of the BLAKE3 digest
    """
    encoded = base64.b64encode(content).decode('ascii')
    digest = blake3((encoded + extension).encode('utf-8')).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


def guess_content_type(logical_path: str) -> str:
    return mimetypes.guess_type(logical_path)[0] or DEFAULT_CONTENT_TYPE
