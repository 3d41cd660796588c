"""Command-line entry point for localizing remote images in Markdown files."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Sequence

from .config import DEFAULT_FILENAME_TEMPLATE, DEFAULT_MEDIA_DIR, LocalizeConfig
from .markdown import find_image_references, localize_markdown
from .pipeline import ImageLocalizer
from .storage import FileSystemAdapter

logger = logging.getLogger("mdx_localize.cli")

MARKDOWN_SUFFIXES = {".md", ".markdown"}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Download remote images referenced by Markdown files and rewrite the "
            "references to point at local copies."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markdown files, or directories searched recursively for .md and .markdown files",
    )
    parser.add_argument(
        "--root",
        default=Path("."),
        type=Path,
        help="Directory that media paths are relative to (default: current directory)",
    )
    parser.add_argument(
        "--media-dir",
        default=DEFAULT_MEDIA_DIR,
        help="Folder under --root where downloaded images are stored",
    )
    parser.add_argument(
        "--template",
        default=DEFAULT_FILENAME_TEMPLATE,
        help="Base file name used when neither alt text nor URL provide one",
    )
    parser.add_argument(
        "--max-suffix-length",
        type=int,
        default=8,
        help="Length of the random suffix added when a name is already taken",
    )
    parser.add_argument(
        "--max-name-attempts",
        type=int,
        default=100,
        help="Give up on an image after trying this many candidate names",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=15.0,
        help="HTTP timeout in seconds for each image download",
    )
    parser.add_argument(
        "--prefix-with-note",
        action="store_true",
        help="Prefix stored file names with the name of the Markdown file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def collect_markdown_files(paths: Sequence[Path]) -> List[Path]:
    files: List[Path] = []
    seen = set()
    for path in paths:
        if path.is_dir():
            found = sorted(
                p
                for p in path.rglob("*")
                if p.suffix.lower() in MARKDOWN_SUFFIXES and p.is_file()
            )
        elif path.is_file():
            found = [path]
        else:
            logger.warning("Skipping %s: no such file or directory", path)
            continue
        for candidate in found:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                files.append(candidate)
    return files


async def localize_files(
    files: Sequence[Path],
    localizer: ImageLocalizer,
    prefix_with_note: bool = False,
) -> int:
    """Rewrite each file in place; returns the number of files changed."""
    changed = 0
    for path in files:
        try:
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", path, exc)
            continue

        references = find_image_references(original)
        if not references:
            logger.debug("No image references in %s", path)
            continue

        prefix = path.stem if prefix_with_note else None
        updated = await localize_markdown(original, localizer, prefix=prefix)
        if updated == original:
            continue
        try:
            path.write_text(updated, encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to write %s: %s", path, exc)
            continue
        changed += 1
        logger.info("Updated %s (%d reference(s) scanned)", path, len(references))
    return changed


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    try:
        config = LocalizeConfig(
            media_dir=args.media_dir,
            filename_template=args.template,
            max_suffix_length=args.max_suffix_length,
            max_name_attempts=args.max_name_attempts,
            fetch_timeout=args.timeout,
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    files = collect_markdown_files(args.paths)
    if not files:
        logger.error("No Markdown files found")
        return 1

    localizer = ImageLocalizer(FileSystemAdapter(args.root), config)
    overall_start = time.perf_counter()
    try:
        changed = asyncio.run(localize_files(files, localizer, args.prefix_with_note))
    finally:
        localizer.close()
    total_elapsed = time.perf_counter() - overall_start

    stats = localizer.stats
    logger.info(
        "Finished in %.2fs (%d/%d files changed, %d image(s) localized: "
        "%d written, %d reused, %d skipped, %d failed)",
        total_elapsed,
        changed,
        len(files),
        stats.localized,
        stats.written,
        stats.reused,
        stats.skipped,
        stats.failed,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
