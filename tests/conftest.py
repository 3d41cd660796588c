"""Pytest configuration and fixtures."""

import asyncio
from typing import Dict, List, Union

import pytest

from mdx_localize.config import LocalizeConfig
from mdx_localize.hashes import LinkHashes
from mdx_localize.pipeline import ImageLocalizer
from mdx_localize.storage import WriteResult


def make_png(seed: int = 1) -> bytes:
    """Return a minimal PNG header whose IHDR varies with ``seed``."""
    ihdr = seed.to_bytes(4, "big") + (1).to_bytes(4, "big") + b"\x08\x02\x00\x00\x00"
    return (
        b"\x89PNG\r\n\x1a\n"
        + len(ihdr).to_bytes(4, "big")
        + b"IHDR"
        + ihdr
        + b"\x00\x00\x00\x00"
        + b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )


def make_gif(seed: int = 1) -> bytes:
    return b"GIF89a" + seed.to_bytes(2, "little") + b"\x01\x00\x00\x00\x00;"


class MemoryStorage:
    """In-memory storage adapter that yields to the loop on every call."""

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}
        self.writes: List[str] = []
        self.reads: List[str] = []

    async def exists(self, path: str) -> bool:
        await asyncio.sleep(0)
        return path in self.files

    async def read_binary(self, path: str) -> bytes:
        await asyncio.sleep(0)
        self.reads.append(path)
        return self.files[path]

    async def create_binary(self, path: str, data: bytes) -> WriteResult:
        await asyncio.sleep(0)
        if path in self.files:
            return WriteResult.ALREADY_EXISTS
        self.files[path] = data
        self.writes.append(path)
        return WriteResult.WRITTEN


class StaticFetcher:
    """Fetcher serving canned payloads or raising canned errors."""

    def __init__(self, payloads: Dict[str, Union[bytes, Exception]]) -> None:
        self.payloads = payloads
        self.calls: List[str] = []

    async def fetch(self, link: str) -> bytes:
        self.calls.append(link)
        await asyncio.sleep(0)
        payload = self.payloads[link]
        if isinstance(payload, Exception):
            raise payload
        return payload


CAT_URL = "https://example.com/pics/cat.png"


@pytest.fixture
def png_bytes() -> bytes:
    return make_png(1)


@pytest.fixture
def other_png_bytes() -> bytes:
    return make_png(2)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def fetcher(png_bytes: bytes) -> StaticFetcher:
    return StaticFetcher({CAT_URL: png_bytes})


@pytest.fixture
def localizer(storage: MemoryStorage, fetcher: StaticFetcher) -> ImageLocalizer:
    return ImageLocalizer(
        storage,
        LocalizeConfig(media_dir="media"),
        fetcher=fetcher,
        hashes=LinkHashes(),
    )


@pytest.fixture
def fixed_suffix(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    """Make random suffixes deterministic: s1, s2, s3, ..."""
    issued: List[str] = []

    def fake_suffix(length: int) -> str:
        issued.append(f"s{len(issued) + 1}")
        return issued[-1]

    monkeypatch.setattr("mdx_localize.naming.random_suffix", fake_suffix)
    return issued
