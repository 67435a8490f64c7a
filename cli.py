#!/usr/bin/env python3
"""Contact List CLI."""
from __future__ import annotations

import argparse
import sys

from contact_list.config import ConfigError, Settings, ensure_directories, load_settings
from contact_list.contacts import build_repository
from contact_list.logs import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contact-list",
        description="REST service for managing contacts and their avatars.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API under uvicorn.",
    )
    serve_parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Bind address.",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port number (defaults to $PORT or 5000).",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only).",
    )

    subparsers.add_parser(
        "check-config",
        help="Validate configuration and create the required directories.",
    )

    return parser


def _load() -> Settings | None:
    try:
        return load_settings()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return None


def _cmd_serve(host: str, port: int | None, reload: bool) -> int:
    import uvicorn

    settings = _load()
    if settings is None:
        return 1

    port = port or settings.port
    print(f"Contact List API on http://{host}:{port}")
    print(f"   Docs: http://localhost:{port}/docs")

    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _cmd_check_config() -> int:
    settings = _load()
    if settings is None:
        return 1

    configure_logging(settings.log_level)
    try:
        ensure_directories(settings)
    except ConfigError as exc:
        print(f"Directory check failed: {exc}", file=sys.stderr)
        return 1

    print(
        "Configuration OK",
        f"environment={settings.environment}",
        f"storage={build_repository(settings).backend}",
        f"uploads={settings.uploads_dir}",
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        return _cmd_serve(host=args.host, port=args.port, reload=args.reload)
    if args.command == "check-config":
        return _cmd_check_config()

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
