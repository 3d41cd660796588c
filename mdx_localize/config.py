"""Configuration objects and constants for image localization."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MEDIA_DIR = "media"
DEFAULT_FILENAME_TEMPLATE = "image"
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024


@dataclass
class LocalizeConfig:
    """Settings that control where and how downloaded images are stored."""

    media_dir: str = DEFAULT_MEDIA_DIR
    filename_template: str = DEFAULT_FILENAME_TEMPLATE
    max_suffix_length: int = 8
    max_name_attempts: int = 100
    write_attempts: int = 3
    fetch_timeout: float = 15.0
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    prefix_max_length: int = 64

    def __post_init__(self) -> None:
        if not self.filename_template.strip():
            raise ValueError("filename_template must not be empty")
        if not 1 <= self.max_suffix_length <= 32:
            raise ValueError("max_suffix_length must be between 1 and 32")
        if self.max_name_attempts < 1:
            raise ValueError("max_name_attempts must be at least 1")
        if self.write_attempts < 1:
            raise ValueError("write_attempts must be at least 1")
        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")
        if self.max_image_bytes <= 0:
            raise ValueError("max_image_bytes must be positive")
