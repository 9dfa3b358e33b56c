# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Restore Orchestrator - brings an archive back into the data directory.

Resolve the archive (explicit name or the latest one), download it, unpack
it, and remove the downloaded tarball on every exit path. Any failure is
reported to the caller as a single RestoreError chained to the stage error.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from cloudarchive.config import ArchiveConfig
from cloudarchive.events import Observer, log_event
from cloudarchive.exceptions import (
    CloudArchiveError,
    CorruptArchiveError,
    ResolutionError,
    RestoreError,
    TransferError,
    describe_error,
)
from cloudarchive.lifecycle.reconciler import get_latest
from cloudarchive.packaging import Packager, RestoredFiles, TarPackager, local_archive_name
from cloudarchive.storage.base import DownloadedArchive, StorageBackend


@dataclass
class RestoreResult:
    """Result of a restore run."""

    operation_id: str
    archive: str
    path: Path
    files: List[str] = field(default_factory=list)


async def resolve_archive_name(
    config: ArchiveConfig,
    backend: StorageBackend,
    archive: str | None = None,
    observer: Observer = log_event,
) -> str:
    """
    Decide which archive to restore.

    An explicit name (argument, then config) wins; the bucket is only
    listed when neither is set.

    Raises:
        ResolutionError: If the bucket cannot be listed or holds no archive
    """
    name = archive or config.archive
    if name:
        return name

    latest = await get_latest(backend, config.bucket, config.file_name, observer=observer)
    if not latest:
        raise ResolutionError(
            f"No archive matching prefix '{config.file_prefix}' found in bucket '{config.bucket}'",
            details={"bucket": config.bucket, "prefix": config.file_prefix},
        )
    return latest


async def _download(
    config: ArchiveConfig,
    backend: StorageBackend,
    archive_name: str,
    destination: Path,
) -> DownloadedArchive:
    try:
        downloaded = await backend.download(config.bucket, archive_name, destination)
    except Exception as e:
        raise TransferError(
            f"Failed to download file - {describe_error(e)}",
            details={"bucket": config.bucket, "key": archive_name},
        ) from e

    if downloaded is None:
        raise CorruptArchiveError(
            "The tarball was missing or corrupt: tarball is empty or write failed.",
            details={"bucket": config.bucket, "key": archive_name},
        )
    return downloaded


async def _unpack(
    packager: Packager,
    data_dir: Path,
    downloaded: DownloadedArchive,
) -> RestoredFiles:
    try:
        return await packager.unpack(data_dir, downloaded)
    except Exception as e:
        raise CorruptArchiveError(
            f"The tarball was missing or corrupt: {describe_error(e)}",
            details={"tarball_path": str(downloaded.file)},
        ) from e


async def restore_to(
    config: ArchiveConfig,
    backend: StorageBackend,
    *,
    archive: str | None = None,
    packager: Packager | None = None,
    observer: Observer = log_event,
) -> RestoreResult:
    """
    Restore an archive from the bucket into the data directory.

    Args:
        config: Archive configuration
        backend: Storage backend for the bucket
        archive: Archive key to restore (default: config.archive, then latest)
        packager: Archive packager (default: TarPackager)
        observer: Receives progress events

    Returns:
        RestoreResult with the data directory and the restored files

    Raises:
        RestoreError: If any stage fails; ``__cause__`` holds the stage error
    """
    from ulid import ULID

    operation_id = str(ULID())
    packager = packager or TarPackager(config.work_dir)
    data_dir = config.data_dir

    observer("restore_started", operation_id=operation_id, bucket=config.bucket, data_dir=str(data_dir))

    try:
        archive_name = await resolve_archive_name(config, backend, archive, observer=observer)
        observer("restore_archive_resolved", operation_id=operation_id, archive=archive_name)

        data_dir.mkdir(parents=True, exist_ok=True)
        destination = data_dir / local_archive_name(archive_name)
        downloaded = None

        try:
            downloaded = await _download(config, backend, archive_name, destination)
            restored = await _unpack(packager, data_dir, downloaded)
        finally:
            destination.unlink(missing_ok=True)
            if downloaded is not None:
                downloaded.file.unlink(missing_ok=True)

    except Exception as e:
        message = f"Restore attempt failed with: {describe_error(e)}"
        observer("restore_failed", level="error", operation_id=operation_id, error=message)
        details = e.details if isinstance(e, CloudArchiveError) else {}
        raise RestoreError(message, details=details) from e

    observer(
        "restore_completed",
        operation_id=operation_id,
        archive=archive_name,
        files=len(restored.files),
    )

    return RestoreResult(
        operation_id=operation_id,
        archive=archive_name,
        path=restored.path,
        files=restored.files,
    )
