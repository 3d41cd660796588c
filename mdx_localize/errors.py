"""Exceptions raised while localizing remote images."""

from __future__ import annotations


class LocalizeError(Exception):
    """Base class for image localization failures."""


class FetchError(LocalizeError):
    """The remote image could not be downloaded."""

    def __init__(self, link: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {link}: {reason}")
        self.link = link
        self.reason = reason


class NameSpaceExhaustedError(LocalizeError):
    """No usable file name was found within the configured attempt ceiling."""

    def __init__(self, base_name: str, attempts: int) -> None:
        super().__init__(
            f"Failed to generate a file name for {base_name!r} after {attempts} attempts"
        )
        self.base_name = base_name
        self.attempts = attempts
