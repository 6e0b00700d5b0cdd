"""
amsync command-line interface.

Usage:
    amsync watch [--namespace NS]
    amsync reconcile NAME [--namespace NS] [--output text|json]
    amsync render CONFIG_FILE [--pagerduty-key KEY] [--snitch-url URL] [-o FILE]
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from amsync.config.settings import get_settings
from amsync.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amsync",
        description="Keep Alertmanager receivers in sync with credential secrets",
    )
    parser.add_argument("--log-level", help="Log level (overrides AMSYNC_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command")

    watch_parser = subparsers.add_parser("watch", help="Watch secrets and reconcile on change")
    watch_parser.add_argument("--namespace", "-n", help="Namespace to watch (default: AMSYNC_NAMESPACE)")

    reconcile_parser = subparsers.add_parser("reconcile", help="Run a single reconciliation pass")
    reconcile_parser.add_argument("name", help="Secret name to treat as the trigger")
    reconcile_parser.add_argument("--namespace", "-n", help="Namespace (default: AMSYNC_NAMESPACE)")
    reconcile_parser.add_argument("--output", choices=["text", "json"], default="text",
                                  help="Output format")

    render_parser = subparsers.add_parser(
        "render",
        help="Apply PagerDuty/watchdog channels to a local alertmanager.yaml",
    )
    render_parser.add_argument("config_file", help="Path to alertmanager.yaml")
    render_parser.add_argument("--pagerduty-key", help="PagerDuty routing key (omit to remove)")
    render_parser.add_argument("--snitch-url", help="Dead Man's Snitch URL (omit to remove)")
    render_parser.add_argument("--output", "-o", help="Write to file instead of stdout")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_format)

    if args.command == "watch":
        from amsync.cli.watch import watch_command

        sys.exit(watch_command(settings, namespace=args.namespace))

    if args.command == "reconcile":
        from amsync.cli.reconcile import reconcile_command

        sys.exit(reconcile_command(
            args.name,
            settings,
            namespace=args.namespace,
            output_format=args.output,
        ))

    if args.command == "render":
        from amsync.cli.render import render_command

        sys.exit(render_command(
            args.config_file,
            pagerduty_key=args.pagerduty_key,
            snitch_url=args.snitch_url,
            output=args.output,
        ))

    parser.print_help()
    sys.exit(1)
