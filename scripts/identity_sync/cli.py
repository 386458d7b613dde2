"""CLI entry point: sync, scheduler, status."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from scripts.identity_sync.config import load_config, load_graph_store_config
from scripts.identity_sync.graph import GraphStore
from scripts.identity_sync.logging_config import configure_logging
from scripts.identity_sync.sync_job import PROVIDER_ORDER, IdentitySyncJob

logger = logging.getLogger("identity_sync.cli")

PROVIDER_CHOICES = ["all", *PROVIDER_ORDER]


def cmd_sync(args: argparse.Namespace) -> None:
    """One-shot sync. Any failure is logged once and exits with status 1."""
    try:
        config = load_config()
        providers = PROVIDER_ORDER if args.provider == "all" else [args.provider]
        results = IdentitySyncJob(config, providers).run()
    except Exception as exc:
        logger.error(
            "An error occurred while processing identity data: %s", exc, exc_info=True
        )
        sys.exit(1)
    logger.info("Sync results: %s", results)


def cmd_scheduler(args: argparse.Namespace) -> None:
    """Start the APScheduler-based scheduling loop."""
    from scripts.identity_sync.scheduler import start_scheduler

    start_scheduler(load_config())


def cmd_status(args: argparse.Namespace) -> None:
    """Show recent ingestion runs."""
    with GraphStore(load_graph_store_config()) as store:
        runs = store.get_recent_runs(
            provider=args.provider if args.provider != "all" else None,
            limit=args.limit,
        )

    if not runs:
        print("No ingestion runs found.")
        return

    fmt = "{:<36}  {:<18}  {:<8}  {:<20}  {:<20}  {:>8}  {:>7}  {}"
    print(fmt.format(
        "RUN ID", "PROVIDER", "STATUS", "STARTED", "FINISHED",
        "UPSERTED", "SKIPPED", "ERROR",
    ))
    print("-" * 150)
    for r in runs:
        started = str(r["started_at"])[:19] if r.get("started_at") else ""
        finished = str(r["finished_at"])[:19] if r.get("finished_at") else ""
        error = (r.get("error_message") or "")[:40]
        print(fmt.format(
            str(r["id"])[:36],
            r["provider"],
            r["status"],
            started,
            finished,
            r.get("records_upserted") or 0,
            r.get("records_skipped") or 0,
            error,
        ))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="identity-graph",
        description="Sync AWS IAM, Google Workspace and Azure Entra ID users into Neo4j",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Run one-shot sync")
    sync_parser.add_argument(
        "--provider", "-p",
        choices=PROVIDER_CHOICES,
        default="all",
        help="Provider to sync (default: all, in order)",
    )
    sync_parser.set_defaults(func=cmd_sync)

    sched_parser = subparsers.add_parser("scheduler", help="Start scheduled sync loop")
    sched_parser.set_defaults(func=cmd_scheduler)

    status_parser = subparsers.add_parser("status", help="Show recent ingestion runs")
    status_parser.add_argument(
        "--provider", "-p",
        choices=PROVIDER_CHOICES,
        default="all",
        help="Filter by provider",
    )
    status_parser.add_argument(
        "--limit", "-l",
        type=int,
        default=10,
        help="Number of runs to show (default: 10)",
    )
    status_parser.set_defaults(func=cmd_status)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI entry point."""
    configure_logging(
        os.environ.get("LOG_LEVEL", "INFO"), os.environ.get("LOG_FORMAT", "json")
    )
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
