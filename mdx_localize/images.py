"""Image downloading and validation utilities."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests
from filetype import guess

from .config import DEFAULT_MAX_IMAGE_BYTES
from .errors import FetchError

logger = logging.getLogger("mdx_localize")

ALLOWED_IMAGE_TYPES = {"png", "jpg", "gif", "webp", "bmp", "tiff", "ico", "avif", "heic"}
USER_AGENT = "mdx-localize/0.1"


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    if not data:
        return None
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            ext = "jpg"
        if ext == "tif":
            ext = "tiff"
        if ext in ALLOWED_IMAGE_TYPES:
            return ext
    return None


class ImageFetcher:
    """Download remote images with a shared requests session.

    ``requests`` is blocking, so every download runs in a worker thread and
    the calling coroutine only suspends while it waits.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.max_bytes = max_bytes
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    async def fetch(self, link: str) -> bytes:
        return await asyncio.to_thread(self._fetch_sync, link)

    def _fetch_sync(self, link: str) -> bytes:
        try:
            resp = self.session.get(link, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(link, str(exc)) from exc

        data = resp.content
        if len(data) > self.max_bytes:
            raise FetchError(link, f"image larger than {self.max_bytes} bytes")
        logger.debug("Fetched %s (%d bytes)", link, len(data))
        return data

    def close(self) -> None:
        self.session.close()
