import argparse
import logging
import os
import sys
from typing import Sequence

import uvicorn

import upload_snippets
from sipp.backend import open_client_facade, run_auth
from sipp.errors import SippError
from sipp.exception_handler import setup_logging
from sipp.tui import SnippetShell, TerminalSession


logger = logging.getLogger("sipp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Share text snippets from a local database or a sipp server"
    )
    subparsers = parser.add_subparsers(dest="command")

    server = subparsers.add_parser("server", help="Run the HTTP server")
    server.add_argument(
        "--host",
        default="0.0.0.0",
        help="Interface to bind (default: 0.0.0.0)",
    )
    server.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "3000")),
        help="Port to listen on (default: 3000)",
    )

    tui = subparsers.add_parser("tui", help="Run the interactive terminal client (default)")
    _add_client_arguments(tui)

    subparsers.add_parser("auth", help="Save the remote URL and API key for the clients")

    upload = subparsers.add_parser("upload", help="Upload files and print their share links")
    upload.add_argument("files", nargs="+", help="Files to upload")
    _add_client_arguments(upload)

    return parser


def _add_client_arguments(parser: argparse.ArgumentParser) -> None:
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


def run_server(host: str, port: int) -> None:
    setup_logging(os.getenv("SIPP_LOG_LEVEL", "INFO"))
    uvicorn.run("sipp.api.server:create_app", factory=True, host=host, port=port)


def run_tui(remote: str | None, api_key: str | None) -> None:
    setup_logging("WARNING")
    try:
        facade = open_client_facade(remote, api_key)
    except SippError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    SnippetShell(TerminalSession(facade)).run()


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "server":
        run_server(args.host, args.port)
    elif args.command == "auth":
        setup_logging("WARNING")
        try:
            run_auth()
        except (KeyboardInterrupt, EOFError):
            print("\nAborted", file=sys.stderr)
            sys.exit(1)
        except OSError as exc:
            print(f"Error: could not save config: {exc}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "upload":
        forwarded = list(args.files)
        if args.remote:
            forwarded += ["--remote", args.remote]
        if args.api_key:
            forwarded += ["--api-key", args.api_key]
        upload_snippets.main(forwarded)
    else:
        run_tui(getattr(args, "remote", None), getattr(args, "api_key", None))


if __name__ == "__main__":
    main()
