"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import sys

import uvicorn

from wildlife_sightings import __version__
from wildlife_sightings.api import create_app
from wildlife_sightings.config import get_settings
from wildlife_sightings.errors import InputValidationError
from wildlife_sightings.flows.fetch import fetch_viewport
from wildlife_sightings.logging_setup import configure_logging
from wildlife_sightings.query import parse_filters, parse_viewport


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="wildlife-sightings",
        description="Nearby wildlife sightings from eBird and iNaturalist",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    # 'serve' command - run the HTTP API
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    # 'fetch' command - snapshot one viewport to the data store
    fetch_parser = subparsers.add_parser("fetch", help="Fetch and store sightings for a viewport")
    fetch_parser.add_argument("--lat", required=True, help="Viewport center latitude")
    fetch_parser.add_argument("--lng", required=True, help="Viewport center longitude")
    fetch_parser.add_argument("--lat-delta", required=True, help="Viewport latitude span")
    fetch_parser.add_argument("--lng-delta", required=True, help="Viewport longitude span")
    fetch_parser.add_argument("--recency", choices=["today", "this_week", "this_month"])
    fetch_parser.add_argument("--has-photo", choices=["true", "false"])
    fetch_parser.add_argument("--taxa", help="Comma-separated taxa buckets (e.g. Bird,Insect)")
    fetch_parser.add_argument("--provider", help="Comma-separated providers (ebird,inat)")
    fetch_parser.add_argument(
        "--force", action="store_true", help="Fetch even if a fresh snapshot exists"
    )

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"eBird configured: {bool(settings.ebird_api_key)}")
    print(f"Data dir: {settings.data_dir}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: run the API under uvicorn."""
    settings = get_settings()
    host = args.host if args.host is not None else settings.api_host
    port = args.port if args.port is not None else settings.api_port

    print(f"Serving API on http://{host}:{port}/ (Ctrl+C to stop)")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    """Handle the 'fetch' command: run the snapshot flow for one viewport."""
    params = {
        "lat": args.lat,
        "lng": args.lng,
        "latDelta": args.lat_delta,
        "lngDelta": args.lng_delta,
        "recency": args.recency,
        "hasPhoto": args.has_photo,
        "taxa": args.taxa,
        "provider": args.provider,
    }
    try:
        viewport = parse_viewport(params)
        filters = parse_filters(params)
    except InputValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    result = fetch_viewport(viewport, filters, force=args.force)
    print(f"{result['observations']} sightings in {result['path']}")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging("DEBUG" if args.debug or settings.debug else settings.log_level)

    commands = {
        "info": cmd_info,
        "serve": cmd_serve,
        "fetch": cmd_fetch,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
