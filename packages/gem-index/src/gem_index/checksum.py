# SPDX-License-Identifier: MIT
"""Content hashing for uploaded package archives."""

import hashlib


def compute_sha256(data: bytes) -> str:
    """Compute SHA256 hash of bytes data.

    Args:
        data: Bytes to hash

    Returns:
        Lowercase hex-encoded SHA256 hash
    """
    return hashlib.sha256(data).hexdigest()
