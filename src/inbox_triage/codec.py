"""
Compact text encoding for message bodies kept in the store.

Bodies are gzip-compressed then base64-encoded so the JSON document stays
small and binary-safe.
"""

import base64
import gzip


def gzip_base64_encode(data: bytes) -> str:
    """Compress ``data`` with gzip and return it as base64 text."""
    return base64.b64encode(gzip.compress(data)).decode("ascii")


def gzip_base64_decode(encoded: str) -> bytes:
    """Inverse of gzip_base64_encode."""
    return gzip.decompress(base64.b64decode(encoded))
