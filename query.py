from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from sipp.backend import open_client_facade
from sipp.errors import SippError
from sipp.exception_handler import setup_logging
from sipp.snippet import Snippet


logger = logging.getLogger("sipp")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="List stored snippets, optionally filtered by a substring",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Case-insensitive substring matched against names and contents",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of snippets to print (default: all)",
    )
    parser.add_argument(
        "--content",
        action="store_true",
        help="Print each snippet's content as well",
    )
    parser.add_argument(
        "-r",
        "--remote",
        default=None,
        help="Remote server URL (defaults to SIPP_REMOTE_URL or the saved config)",
    )
    parser.add_argument(
        "-k",
        "--api-key",
        dest="api_key",
        default=None,
        help="API key for the remote server (defaults to SIPP_API_KEY or the saved config)",
    )

    return parser.parse_args(argv)


def format_snippets(snippets: Sequence[Snippet], *, show_content: bool = False) -> str:
    if not snippets:
        return "List of Snippets (0)\nNo results found."

    lines: list[str] = [f"List of Snippets ({len(snippets)})"]
    for index, snippet in enumerate(snippets, start=1):
        lines.extend(
            [
                "",
                f"{index}. {snippet.name}",
                f"   ID: {snippet.short_id}",
                f"   Created: {snippet.created_label()}",
            ]
        )
        if snippet.language:
            lines.append(f"   Language: {snippet.language}")
        if show_content:
            lines.extend(["   Content:", "   ```"])
            for content_line in snippet.content.splitlines() or [""]:
                lines.append(f"   {content_line}")
            lines.append("   ```")

    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> None:
    setup_logging("WARNING")

    args = parse_args(argv)

    if args.limit is not None and args.limit <= 0:
        print("--limit must be a positive integer", file=sys.stderr)
        sys.exit(2)

    try:
        facade = open_client_facade(args.remote, args.api_key)
        try:
            snippets = facade.list(args.query)
        finally:
            facade.close()
    except SippError as exc:
        logger.debug("Listing failed", exc_info=exc)
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    if args.limit is not None:
        snippets = snippets[: args.limit]
    print(format_snippets(snippets, show_content=args.content))


if __name__ == "__main__":
    main()
