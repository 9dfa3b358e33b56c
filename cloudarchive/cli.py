# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Command line entry point.

    cloud-archive backup
    cloud-archive restore [--archive NAME]
    cloud-archive lifecycle [--show]
    cloud-archive latest

Configuration comes from environment variables (see cloudarchive.env).
Scheduling is left to whatever invokes the command (cron, a Kubernetes
CronJob, ...).
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Sequence

import structlog

from cloudarchive.backup import backup_from
from cloudarchive.config import ArchiveConfig
from cloudarchive.env import create_config_from_env
from cloudarchive.exceptions import CloudArchiveError
from cloudarchive.lifecycle.reconciler import get_latest, get_lifecycle_policy, reconcile_lifecycle
from cloudarchive.restore import restore_to
from cloudarchive.storage import StorageBackend, create_backend

logger = structlog.get_logger("cloudarchive.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cloud-archive",
        description="Back up a directory to object storage and restore it "
        "(pass config values as environment variables).",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Minimum log level (default: info).",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("backup", help="Archive the data directory and upload it.")

    restore = commands.add_parser("restore", help="Download an archive and unpack it.")
    restore.add_argument("--archive", help="Archive key to restore (default: FILE_NAME, then latest).")

    lifecycle = commands.add_parser("lifecycle", help="Enforce the bucket's retention rules.")
    lifecycle.add_argument("--show", action="store_true", help="Only print the current rules.")

    commands.add_parser("latest", help="Print the key of the newest archive.")

    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    # stdout carries the JSON summary only
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


async def run_command(
    args: argparse.Namespace,
    config: ArchiveConfig,
    backend: StorageBackend,
) -> dict:
    """Run one sub-command and return a JSON-serializable summary."""
    if args.command == "backup":
        result = await backup_from(config, backend)
        return {
            "operation_id": result.operation_id,
            "archive": result.tar.remote_key,
            "files": [str(f) for f in result.files],
            "policy": result.policy.to_dict(),
        }

    if args.command == "restore":
        restored = await restore_to(config, backend, archive=args.archive)
        return {
            "operation_id": restored.operation_id,
            "archive": restored.archive,
            "path": str(restored.path),
            "files": restored.files,
        }

    if args.command == "lifecycle":
        if args.show:
            policy = await get_lifecycle_policy(backend, config.bucket)
        else:
            policy = await reconcile_lifecycle(backend, config.bucket, config.retention_policy)
        return {"bucket": config.bucket, "policy": policy.to_dict()}

    latest = await get_latest(backend, config.bucket, config.file_name)
    return {"bucket": config.bucket, "latest": latest}


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = create_config_from_env()
        backend = create_backend(config)
        summary = asyncio.run(run_command(args, config, backend))
    except CloudArchiveError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
