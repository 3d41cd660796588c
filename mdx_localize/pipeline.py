"""Rewrite a single remote image reference into a local one."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from .config import LocalizeConfig
from .hashes import LinkHashes
from .images import ImageFetcher, detect_image_format
from .locks import KeyedLock
from .models import ImageReference, LocalizeStats, ResolutionResult
from .naming import NameResolver, derive_base_name
from .storage import StorageAdapter, WriteResult
from .utils import is_remote_url

logger = logging.getLogger("mdx_localize")


class Fetcher(Protocol):
    async def fetch(self, link: str) -> bytes: ...


def format_image_tag(anchor: str, path: str) -> str:
    return f"![{anchor}]({path})"


class ImageLocalizer:
    """Download remote images once and point references at local copies.

    One instance owns the link digests and the per-name locks, so every
    document processed through it shares deduplication state. Failures never
    escape :meth:`process`; the original reference text is returned instead.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        config: Optional[LocalizeConfig] = None,
        fetcher: Optional[Fetcher] = None,
        hashes: Optional[LinkHashes] = None,
        gate: Optional[KeyedLock] = None,
        sniff: Callable[[bytes], Optional[str]] = detect_image_format,
    ) -> None:
        self.storage = storage
        self.config = config or LocalizeConfig()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ImageFetcher(
            timeout=self.config.fetch_timeout,
            max_bytes=self.config.max_image_bytes,
        )
        self.hashes = hashes if hashes is not None else LinkHashes()
        self.gate = gate if gate is not None else KeyedLock()
        self.sniff = sniff
        self.resolver = NameResolver(
            self.hashes,
            max_suffix_length=self.config.max_suffix_length,
            max_attempts=self.config.max_name_attempts,
        )
        self.stats = LocalizeStats()

    def close(self) -> None:
        """Release the HTTP session if this localizer created it."""
        if self._owns_fetcher and isinstance(self.fetcher, ImageFetcher):
            self.fetcher.close()

    async def process_reference(
        self, reference: ImageReference, prefix: Optional[str] = None
    ) -> str:
        return await self.process(
            reference.match, reference.anchor, reference.link, prefix=prefix
        )

    async def process(
        self,
        match: str,
        anchor: str,
        link: str,
        prefix: Optional[str] = None,
    ) -> str:
        """Return replacement text for one image reference, or ``match`` on failure."""
        if not is_remote_url(link):
            logger.debug("Leaving local reference %s untouched", link)
            return match

        try:
            data = await self.fetcher.fetch(link)

            extension = self.sniff(data)
            if not extension:
                logger.info("Skipping %s: unrecognized image content", link)
                self.stats.skipped += 1
                return match

            base_name = derive_base_name(
                anchor,
                link,
                extension,
                self.config.filename_template,
                prefix=prefix,
                prefix_max_length=self.config.prefix_max_length,
            )
            async with self.gate.hold(base_name):
                result = await self._store(base_name, link, data, extension)
        except Exception as exc:  # noqa: BLE001 - one bad image must not fail the document
            logger.warning("Image processing failed for %s: %s", link, exc)
            self.stats.failed += 1
            return match

        if result is None:
            self.stats.failed += 1
            return match
        return format_image_tag(anchor, result.file_name)

    async def _store(
        self, base_name: str, link: str, data: bytes, extension: str
    ) -> Optional[ResolutionResult]:
        # Another process may create the chosen name between the probe and the
        # write; resolve again so the new file is either reused or skipped.
        for attempt in range(1, self.config.write_attempts + 1):
            result = await self.resolver.resolve(
                self.storage,
                self.config.media_dir,
                base_name,
                link,
                data,
                extension,
            )
            if not result.need_write:
                self.stats.reused += 1
                return result

            outcome = await self.storage.create_binary(result.file_name, data)
            if outcome is WriteResult.WRITTEN:
                logger.info("Saved %s as %s", link, result.file_name)
                self.stats.written += 1
                return result
            logger.debug(
                "%s appeared before it could be written (attempt %d/%d)",
                result.file_name,
                attempt,
                self.config.write_attempts,
            )

        logger.warning(
            "Giving up on %s after %d write attempts", link, self.config.write_attempts
        )
        return None
