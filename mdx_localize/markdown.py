"""Markdown scanning helpers that feed image references to the localizer."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import List, Optional

from .models import ImageReference
from .pipeline import ImageLocalizer

logger = logging.getLogger("mdx_localize")

IMAGE_TAG_PATTERN = re.compile(r"!\[(?P<anchor>[^\]\n]*)\]\((?P<link>[^)\s]+)\)")


def find_image_references(markdown: str) -> List[ImageReference]:
    """Return every inline image reference in document order."""
    return [
        ImageReference(match.group(0), match.group("anchor"), match.group("link"))
        for match in IMAGE_TAG_PATTERN.finditer(markdown)
    ]


async def localize_markdown(
    markdown: str,
    localizer: ImageLocalizer,
    prefix: Optional[str] = None,
) -> str:
    """Swap remote image links for local copies, processing all tags concurrently."""
    matches = list(IMAGE_TAG_PATTERN.finditer(markdown))
    if not matches:
        return markdown

    replacements = await asyncio.gather(
        *(
            localizer.process(
                match.group(0), match.group("anchor"), match.group("link"), prefix=prefix
            )
            for match in matches
        )
    )

    parts: List[str] = []
    position = 0
    for match, replacement in zip(matches, replacements):
        parts.append(markdown[position : match.start()])
        parts.append(replacement)
        position = match.end()
    parts.append(markdown[position:])
    logger.debug("Processed %d image reference(s)", len(matches))
    return "".join(parts)
