"""Command-line converter between rich-text markup, portable-text JSON, and rendered HTML."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from rich_text_resolver.errors import ParserDepthExceededError, ReferenceResolutionError
from rich_text_resolver.logger import get_logger
from rich_text_resolver.resolution.html import to_html
from rich_text_resolver.resolution.mapi import to_management_api_format
from rich_text_resolver.staging.base import blocks_from_json, blocks_to_json
from rich_text_resolver.transformers.portable_text import transform_html


def convert(text: str, source_format: str = "html", target_format: str = "json") -> str:
    """Convert `text` from `source_format` ("html" or "json") to `target_format`.

    `target_format` is one of "json" (portable text), "html", or "mapi" (Management API markup).
    """
    blocks = transform_html(text) if source_format == "html" else blocks_from_json(text=text)

    if target_format == "html":
        return to_html(blocks)
    if target_format == "mapi":
        return to_management_api_format(blocks)
    return blocks_to_json(blocks) or ""


def _main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Transform rich-text markup into portable text and render it back."
    )
    parser.add_argument("filepath", help="Path to the rich-text markup or JSON file.", type=str)
    parser.add_argument(
        "--from",
        dest="source_format",
        help="Format of the input file.",
        choices=("html", "json"),
        default="html",
    )
    parser.add_argument(
        "--to",
        dest="target_format",
        help="Format to write.",
        choices=("json", "html", "mapi"),
        default="json",
    )
    parser.add_argument(
        "--output",
        help="Path of the file to write; standard output when omitted.",
        type=str,
        default=None,
    )
    args = parser.parse_args(argv)
    logger = get_logger()

    with open(args.filepath, encoding="utf-8") as f:
        text = f.read()

    try:
        result = convert(text, args.source_format, args.target_format)
    except (ReferenceResolutionError, ParserDepthExceededError) as e:
        logger.error(e.message)
        return 1

    if args.output is None:
        sys.stdout.write(result + "\n")
    else:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
    return 0


if __name__ == "__main__":
    sys.exit(_main())
