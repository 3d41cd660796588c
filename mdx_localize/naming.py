"""Candidate file names and the resolver that picks one of them."""

from __future__ import annotations

import logging
from itertools import islice
from pathlib import PurePosixPath
from typing import Iterator, Optional
from urllib.parse import unquote, urlparse

from .errors import NameSpaceExhaustedError
from .hashes import LinkHashes
from .models import ResolutionResult
from .storage import StorageAdapter
from .utils import clean_file_name, join_media_path, random_suffix

logger = logging.getLogger("mdx_localize")

EXTENSION_ALIASES = {"jpg": ("jpg", "jpeg"), "tiff": ("tiff", "tif")}


def iter_candidate_names(
    base_name: str, extension: str, suffix_length: int
) -> Iterator[str]:
    """Yield ``base.ext`` followed by endless ``base-<suffix>.ext`` variants."""
    yield f"{base_name}.{extension}"
    while True:
        yield f"{base_name}-{random_suffix(suffix_length)}.{extension}"


def strip_extension(name: str, extension: str) -> str:
    """Drop a trailing ``.ext`` (or a known alias) so it is not doubled."""
    lowered = name.lower()
    for alias in EXTENSION_ALIASES.get(extension, (extension,)):
        suffix = f".{alias}"
        if lowered.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def derive_base_name(
    anchor: str,
    link: str,
    extension: str,
    template: str,
    prefix: Optional[str] = None,
    prefix_max_length: int = 64,
) -> str:
    """Build the sanitized stem that candidate names and the lock key share.

    The anchor wins, then the last segment of the URL path, then the template.
    """
    base = anchor.strip()
    if not base:
        base = unquote(PurePosixPath(urlparse(link).path).name)
    if not base:
        base = template
    # Cleaning can expose a trailing extension (e.g. "cat.png?"), so strip
    # and clean until neither changes the name.
    base = clean_file_name(base, fallback=template)
    stripped = strip_extension(base, extension)
    while stripped != base:
        base = clean_file_name(stripped, fallback=template)
        stripped = strip_extension(base, extension)
    if prefix:
        base = clean_file_name(f"{prefix[:prefix_max_length]}_{base}", fallback=template)
    return base


class NameResolver:
    """Decide whether downloaded bytes reuse an existing file or need a new one.

    Must only be called while holding the lock for ``base_name``: the
    existence probe, the content comparison and the caller's write are a
    single check-then-act sequence.
    """

    def __init__(
        self,
        hashes: LinkHashes,
        max_suffix_length: int = 8,
        max_attempts: int = 100,
    ) -> None:
        self.hashes = hashes
        self.max_suffix_length = max_suffix_length
        self.max_attempts = max_attempts

    async def resolve(
        self,
        adapter: StorageAdapter,
        directory: str,
        base_name: str,
        link: str,
        data: bytes,
        extension: str,
    ) -> ResolutionResult:
        candidates = iter_candidate_names(base_name, extension, self.max_suffix_length)
        for image_name in islice(candidates, self.max_attempts):
            file_name = join_media_path(directory, image_name)
            if not await adapter.exists(file_name):
                return ResolutionResult(file_name, image_name, need_write=True)

            self.hashes.ensure_computed(link, data)
            existing = await adapter.read_binary(file_name)
            if self.hashes.matches(link, existing):
                logger.debug("Reusing %s for %s", file_name, link)
                return ResolutionResult(file_name, image_name, need_write=False)
            logger.debug("%s holds different content, trying another name", file_name)

        raise NameSpaceExhaustedError(base_name, self.max_attempts)
