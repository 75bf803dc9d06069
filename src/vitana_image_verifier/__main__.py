"""
Vitana Image Verifier CLI

VTID: VTID-01212

Command-line interface for running the image verifier against one image.

Exit codes:
    0 - image accepted
    1 - image rejected by a verifier
    2 - verification could not be completed
"""

import argparse
import asyncio
import json
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__, __vtid__
from .descriptor import ContentDescriptor
from .errors import ImageVerifierError
from .logging_config import setup_logging
from .main import VerifierConfig
from .orchestrator import ImageVerifier
from .output import ConsoleFormatter, JsonFormatter, OutputLevel
from .output.base import BaseFormatter

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="vitana-image-verifier",
        description="Vitana Image Verifier - Admission gate backed by executable verifiers",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} ({__vtid__})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Verify command
    verify_parser = subparsers.add_parser("verify", help="Verify an image")
    verify_parser.add_argument("image_ref", help="Image reference, e.g. registry.example.com/app:1.0")
    verify_parser.add_argument("--digest", required=True, help="Descriptor digest")
    verify_parser.add_argument("--media-type", default="", help="Descriptor media type")
    verify_parser.add_argument("--size", type=int, default=0, help="Descriptor size in bytes")
    verify_parser.add_argument(
        "--annotation",
        "-a",
        action="append",
        dest="annotations",
        metavar="KEY=VALUE",
        help="Descriptor annotation (repeatable)",
    )
    verify_parser.add_argument("--bin-dir", help="Verifier directory")
    verify_parser.add_argument(
        "--max-verifiers",
        type=int,
        help="Verifiers to run: -1 for all, 0 to disable",
    )
    verify_parser.add_argument("--timeout-ms", type=int, help="Per-verifier timeout")
    verify_parser.add_argument("--max-concurrent", type=int, help="Verifiers run at once")
    verify_parser.add_argument(
        "--overall-timeout",
        type=float,
        help="Deadline in seconds for the whole verification",
    )
    verify_parser.add_argument("--json", action="store_true", help="Print JSON output")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8080")),
        help="Bind port (default: $PORT or 8080)",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Show configuration")
    config_parser.add_argument("--show", action="store_true", help="Show current config")

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet mode",
    )
    parser.add_argument(
        "--log-file",
        help="Log to file",
    )
    parser.add_argument(
        "--config",
        help="Config file path",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    return parser.parse_args(argv)


def parse_annotations(values: Optional[List[str]]) -> Dict[str, str]:
    """Parse KEY=VALUE pairs"""
    annotations = {}
    for value in values or []:
        key, sep, val = value.partition("=")
        if not sep or not key:
            raise ValueError(f"invalid annotation {value!r}, expected KEY=VALUE")
        annotations[key] = val
    return annotations


def load_config(args: argparse.Namespace) -> VerifierConfig:
    """Load config from file or environment, then apply CLI overrides"""
    if args.config and Path(args.config).exists():
        config = VerifierConfig.from_yaml(args.config)
    else:
        config = VerifierConfig.from_env()

    if getattr(args, "bin_dir", None):
        config.bin_dir = Path(args.bin_dir)
    if getattr(args, "max_verifiers", None) is not None:
        config.max_verifiers = args.max_verifiers
    if getattr(args, "timeout_ms", None) is not None:
        config.per_verifier_timeout_ms = args.timeout_ms
    if getattr(args, "max_concurrent", None) is not None:
        config.max_concurrent_verifiers = args.max_concurrent

    config.validate()
    return config


async def run_verify(args: argparse.Namespace, formatter: BaseFormatter) -> int:
    """Verify a single image"""
    try:
        config = load_config(args)
        descriptor = ContentDescriptor(
            media_type=args.media_type,
            digest=args.digest,
            size=args.size,
            annotations=parse_annotations(args.annotations),
        )
    except (ImageVerifierError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    verifier = ImageVerifier(config=config)

    start = time.monotonic()
    try:
        judgement = await verifier.verify_image(
            args.image_ref, descriptor, timeout=args.overall_timeout
        )
    except ImageVerifierError as e:
        formatter.error(args.image_ref, e)
        return EXIT_ERROR

    duration_ms = int((time.monotonic() - start) * 1000)
    formatter.judgement(args.image_ref, judgement, duration_ms=duration_ms)
    formatter.summary(verifier.get_stats())

    return EXIT_ACCEPTED if judgement.ok else EXIT_REJECTED


def show_config(args: argparse.Namespace) -> int:
    """Show the effective configuration"""
    if not args.show:
        print("Use --show to print the effective configuration")
        return 1

    try:
        config = load_config(args)
    except (ImageVerifierError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(json.dumps(config.to_dict(), indent=2))
    return 0


def run_server(args: argparse.Namespace) -> int:
    """Run the HTTP server"""
    import uvicorn

    uvicorn.run(
        "vitana_image_verifier.server:app",
        host=args.host,
        port=args.port,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    log_level = "DEBUG" if args.verbose >= 2 else ("INFO" if args.verbose >= 1 else "WARNING")
    if args.quiet:
        log_level = "ERROR"

    setup_logging(
        level=log_level,
        log_file=args.log_file,
        use_colors=not args.no_color,
    )

    output_level = OutputLevel.DEBUG if args.verbose >= 2 else (
        OutputLevel.VERBOSE if args.verbose >= 1 else (
            OutputLevel.QUIET if args.quiet else OutputLevel.NORMAL
        )
    )

    if args.command == "verify":
        if args.json:
            formatter = JsonFormatter(level=output_level)
        else:
            formatter = ConsoleFormatter(level=output_level, use_colors=not args.no_color)
        return asyncio.run(run_verify(args, formatter))
    elif args.command == "serve":
        return run_server(args)
    elif args.command == "config":
        return show_config(args)
    else:
        print("Use --help for usage information")
        return 1


if __name__ == "__main__":
    sys.exit(main())
