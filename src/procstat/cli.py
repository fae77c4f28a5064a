#!/usr/bin/env python3
"""
Command-line entry point for procstat.

    procstat serve   expose /proc/stat gauges on an HTTP /metrics endpoint
    procstat dump    print the gauges once in exposition format
    procstat top     live terminal dashboard of the raw counters
"""

import argparse
import sys
from typing import Sequence

from procstat.config import ExporterConfig, parse_label
from procstat.exceptions import ConfigError
from procstat.log_config import setup_logging


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--stat-path",
        type=str,
        default=None,
        help="Statistics source to read (default: /proc/stat or $PROCSTAT_STAT_PATH).",
    )


def _add_export_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--include-aggregate",
        action="store_true",
        default=None,
        help="Also export the all-cores row as core_all_* gauges.",
    )
    parser.add_argument(
        "--label",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Constant label added to every gauge. May be repeated.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="procstat",
        description="Republish /proc/stat counters as Prometheus gauges.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level, e.g. DEBUG or INFO (default: INFO or $PROCSTAT_LOG_LEVEL).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Serve gauges over HTTP.")
    _add_source_options(serve)
    _add_export_options(serve)
    serve.add_argument("--address", type=str, default=None, help="Address to listen on.")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on (default: 8080).")
    serve.add_argument(
        "--scrape-timeout",
        type=float,
        default=None,
        help="Seconds a single scrape may spend reading the source.",
    )

    dump = sub.add_parser("dump", help="Print gauges once and exit.")
    _add_source_options(dump)
    _add_export_options(dump)

    top = sub.add_parser("top", help="Live terminal dashboard.")
    _add_source_options(top)
    top.add_argument("--poll-rate", type=float, default=None, help="Seconds between reads.")

    return parser


def load_config(args: argparse.Namespace) -> ExporterConfig:
    """Merge environment defaults with the parsed command-line arguments."""
    labels = dict(parse_label(spec) for spec in getattr(args, "label", []))
    return ExporterConfig.from_env().with_overrides(
        stat_path=args.stat_path,
        address=getattr(args, "address", None),
        port=getattr(args, "port", None),
        scrape_timeout=getattr(args, "scrape_timeout", None),
        include_aggregate=getattr(args, "include_aggregate", None),
        const_labels=labels or None,
        log_level=args.log_level.upper() if args.log_level else None,
        poll_rate=getattr(args, "poll_rate", None),
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the procstat command."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        # The dashboard owns the terminal, dump owns stdout
        if args.command == "serve":
            setup_logging(config.log_level)
        elif args.command == "dump":
            setup_logging(config.log_level, stream=sys.stderr)
    except (ConfigError, ValueError) as exc:
        print(f"procstat: {exc}", file=sys.stderr)
        return 2

    if args.command == "serve":
        from procstat.exporter import serve

        try:
            serve(config)
        except OSError:
            return 1
        return 0

    if args.command == "dump":
        from procstat.exporter import render

        sys.stdout.write(render(config).decode("utf-8"))
        return 0

    from procstat.app import ProcStatApp

    ProcStatApp(stat_path=config.stat_path, poll_rate=config.poll_rate).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
