from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from tqdm import tqdm

from sipp.backend import AccessFacade, open_client_facade
from sipp.errors import SippError
from sipp.exception_handler import ErrorHandler, setup_logging


logger = logging.getLogger("sipp")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Upload files as snippets and print their share links",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="Files to upload; each snippet is named after the file's basename",
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Highlighting hint stored with every uploaded snippet",
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


def upload_files(
    facade: AccessFacade,
    paths: Sequence[str],
    *,
    language: str | None = None,
    error_handler: ErrorHandler | None = None,
) -> List[str]:
    """Upload each file and return the share links of the ones that succeeded."""
    error_handler = error_handler or ErrorHandler()
    links: List[str] = []

    with tqdm(total=len(paths), desc="Uploading", unit="file", disable=len(paths) < 2) as progress:
        for raw_path in paths:
            path = Path(raw_path)
            try:
                content = path.read_text(encoding="utf-8")
                snippet = facade.create(path.name, content, language)
            except (OSError, UnicodeDecodeError, SippError) as exc:
                error_handler.collect_file_error(exc, raw_path, "upload")
            else:
                link = facade.share_link(snippet.short_id)
                links.append(link)
                tqdm.write(link)
            progress.update(1)

    return links


def main(argv: Sequence[str] | None = None) -> None:
    setup_logging("WARNING")

    args = parse_args(argv)
    error_handler = ErrorHandler()

    try:
        facade = open_client_facade(args.remote, args.api_key)
    except SippError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    try:
        upload_files(facade, args.files, language=args.language, error_handler=error_handler)
    except KeyboardInterrupt:
        print("\nUpload interrupted", file=sys.stderr)
        sys.exit(1)
    finally:
        facade.close()

    summary = error_handler.get_error_summary()
    if summary["total_errors"]:
        for failure in summary["failed_files"]:
            print(f"Error: {failure['file']}: {failure['error']}", file=sys.stderr)
        if summary["total_errors"] > 1:
            print(error_handler.format_error_report(), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
