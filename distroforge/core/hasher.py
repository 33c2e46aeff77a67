"""Checksum helpers for archive integrity checks."""

from __future__ import annotations


def normalize_checksum(value: str) -> str:
    """Normalize a published checksum to lowercase hex.

    The WSL manifest publishes digests as ``0x``-prefixed upper-case hex;
    ``sha256:`` prefixes are accepted as well.

    >>> normalize_checksum("0xAB12")
    'ab12'
    """
    value = value.strip().lower()
    for prefix in ("0x", "sha256:"):
        if value.startswith(prefix):
            value = value[len(prefix):]
    return value
