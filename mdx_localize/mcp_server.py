"""MCP server exposing the image localizer as a tool."""

from __future__ import annotations

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_MEDIA_DIR, LocalizeConfig
from .markdown import localize_markdown
from .pipeline import ImageLocalizer
from .storage import FileSystemAdapter

logger = logging.getLogger("mdx_localize.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="mdx-localize")


@mcp.tool()
async def localize(
    markdown: str,
    root: str,
    media_dir: str = DEFAULT_MEDIA_DIR,
) -> str:
    """Download remote images in Markdown under ``root`` and return the rewritten text."""

    storage_root = Path(root).expanduser()
    if not storage_root.is_dir():
        raise FileNotFoundError(f"Root directory does not exist: {storage_root}")

    localizer = ImageLocalizer(
        FileSystemAdapter(storage_root),
        LocalizeConfig(media_dir=media_dir),
    )
    try:
        return await localize_markdown(markdown, localizer)
    finally:
        localizer.close()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
