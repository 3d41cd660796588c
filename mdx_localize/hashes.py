"""Memoized content digests for downloaded links."""

from __future__ import annotations

import hashlib
import threading
from typing import Dict, Optional


def content_digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class LinkHashes:
    """Map each remote link to the digest of the bytes downloaded for it.

    A digest is computed the first time it is needed and never changes
    afterwards, so comparing existing files against a link costs one hash of
    the existing file only.
    """

    def __init__(self) -> None:
        self._digests: Dict[str, str] = {}
        self._lock = threading.Lock()

    def ensure_computed(self, link: str, data: bytes) -> str:
        """Store a digest of ``data`` for ``link`` unless one already exists."""
        existing = self._digests.get(link)
        if existing is not None:
            return existing
        digest = content_digest(data)
        with self._lock:
            return self._digests.setdefault(link, digest)

    def digest(self, link: str) -> Optional[str]:
        return self._digests.get(link)

    def matches(self, link: str, data: bytes) -> bool:
        """Return True if ``data`` hashes to the digest stored for ``link``."""
        expected = self._digests.get(link)
        if expected is None:
            return False
        return content_digest(data) == expected

    def clear(self) -> None:
        with self._lock:
            self._digests.clear()

    def __contains__(self, link: object) -> bool:
        return link in self._digests

    def __len__(self) -> int:
        return len(self._digests)
