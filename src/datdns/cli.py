"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Parse arguments into Settings and ResolutionOptions
- Resolve each name and print one JSON object per line to stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import structlog

from datdns import __version__
from datdns.config import Settings
from datdns.errors import DatDnsError
from datdns.models.resolution import ResolutionOptions
from datdns.resolver import open_resolver

log = structlog.get_logger()


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr, stdout carries the results
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="datdns", description="Resolve names to dat keys")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Resolve one or more names.")
    resolve.add_argument("names", nargs="+", help="Hostnames, URLs or keys to resolve.")
    resolve.add_argument("--ignore-cache", action="store_true")
    resolve.add_argument("--ignore-cached-miss", action="store_true")
    resolve.add_argument("--no-dns-over-https", action="store_true")
    resolve.add_argument("--no-well-known", action="store_true")
    resolve.add_argument(
        "--persistent",
        action="store_true",
        help="Use the SQLite persistent cache as a fallback store.",
    )
    resolve.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


async def run_resolve(settings: Settings, names: list[str], options: ResolutionOptions) -> int:
    """Resolve ``names`` in order. Returns the process exit code."""
    failures = 0
    async with open_resolver(settings) as resolver:
        for name in names:
            try:
                key = await resolver.resolve_name(name, options)
            except DatDnsError as exc:
                failures += 1
                print(json.dumps({"name": name, **exc.to_dict()}))
                continue
            print(json.dumps({"name": name, "key": key}))
    return 1 if failures else 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides: dict = {}
    if args.persistent:
        overrides["cache"] = {"persistent": True}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    settings = Settings(**overrides)
    setup_logging(settings)

    options = ResolutionOptions(
        ignore_cache=args.ignore_cache,
        ignore_cached_miss=args.ignore_cached_miss,
        skip_dns_over_https=args.no_dns_over_https,
        skip_well_known=args.no_well_known,
    )
    return asyncio.run(run_resolve(settings, args.names, options))
