"""Data models used throughout the localization pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """Inline image reference discovered while scanning a Markdown document."""

    match: str
    anchor: str
    link: str


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of picking a file name for freshly downloaded bytes."""

    file_name: str
    image_name: str
    need_write: bool


@dataclass
class LocalizeStats:
    """Counters describing what a localizer did with the references it saw."""

    written: int = 0
    reused: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def localized(self) -> int:
        return self.written + self.reused
