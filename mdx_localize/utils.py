"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import re
import secrets
import string
from urllib.parse import urlparse

ILLEGAL_NAME_PATTERN = re.compile(r'[\\/:*?"<>|#^\[\]\x00-\x1f\x7f]+')
WHITESPACE_PATTERN = re.compile(r"\s+")
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
REMOTE_SCHEMES = ("http", "https")


def clean_file_name(value: str, fallback: str = "image") -> str:
    """Strip characters that are illegal in a path segment on common platforms."""
    cleaned = WHITESPACE_PATTERN.sub(" ", value)
    cleaned = ILLEGAL_NAME_PATTERN.sub("", cleaned).strip(" .")
    return cleaned or fallback


def is_remote_url(value: str) -> bool:
    """Return True for well-formed http(s) URLs with a host."""
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme.lower() in REMOTE_SCHEMES and bool(parsed.netloc)


def random_suffix(length: int) -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def join_media_path(directory: str, name: str) -> str:
    """Join a media directory and a file name using forward slashes."""
    directory = directory.strip().replace("\\", "/").strip("/")
    if not directory or directory == ".":
        return name
    return f"{directory}/{name}"
