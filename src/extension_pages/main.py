"""Extension Pages command line entry point.

Usage:
    extension-pages build [--site-dir DIR] [--out-dir DIR] [--catalog-url URL] [--remote]
    extension-pages serve [--host HOST] [--port PORT] [same build options]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from extension_pages import __version__
from extension_pages.build import run_build
from extension_pages.config import DEFAULT_HOST, DEFAULT_PORT, BuildConfig
from extension_pages.errors import ExtensionPagesError

logger = logging.getLogger("extension_pages")


def configure_logging(verbose: bool) -> None:
    # stdout carries the build summary
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extension-pages",
        description="Generate static documentation pages for the extensions catalog.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--site-dir", type=Path, help="Site root holding static/servers.json")
    common.add_argument("--out-dir", type=Path, help="Build output directory")
    common.add_argument("--catalog-url", help="Remote catalog URL")
    common.add_argument(
        "--remote",
        action="store_true",
        help="Ignore the local snapshot and always fetch the remote catalog",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("build", parents=[common], help="Build routes and export data files")
    serve = sub.add_parser("serve", parents=[common], help="Build, then serve a preview")
    serve.add_argument("--host", default=DEFAULT_HOST)
    serve.add_argument("--port", type=int, default=DEFAULT_PORT)
    return parser


def config_from_args(args: argparse.Namespace) -> BuildConfig:
    config = BuildConfig.from_env()
    if args.site_dir is not None:
        config.site_dir = args.site_dir
    if args.out_dir is not None:
        config.out_dir = args.out_dir
    if args.catalog_url:
        config.catalog_url = args.catalog_url
    if args.remote:
        config.use_local_snapshot = False
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    config = config_from_args(args)

    logger.info(f"Extension Pages v{__version__}: {args.command}")
    try:
        result = asyncio.run(run_build(config))
    except ExtensionPagesError as e:
        logger.error(f"Build failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    print(json.dumps(result.to_dict(), indent=2))

    if args.command == "serve":
        import uvicorn

        from extension_pages.server import create_app

        app = create_app(result, config.export_dir)
        uvicorn.run(app, host=args.host, port=args.port, reload=False)

    return 0


if __name__ == "__main__":
    sys.exit(main())
