# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Orchestrator - archives the data directory into the bucket.

The pipeline runs strictly in sequence:
1. Make sure the data directory exists
2. Reconcile the bucket's retention rules
3. Select files
4. Write the manifest
5. Package the files and manifest into a tarball
6. Upload the tarball, then always remove the local copy

Each stage that fails stops the pipeline with its own error.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from cloudarchive.config import ArchiveConfig
from cloudarchive.events import Observer, log_event
from cloudarchive.exceptions import (
    PackagingError,
    SelectionError,
    TransferError,
    describe_error,
)
from cloudarchive.lifecycle.policy import RetentionPolicy
from cloudarchive.lifecycle.reconciler import reconcile_lifecycle
from cloudarchive.manifest import ArchiveMetadata, manifest_path, relative_entries, write_manifest
from cloudarchive.naming import Clock, resolve_file_name, utc_now
from cloudarchive.packaging import Packager, TarPackager
from cloudarchive.selection import FileSelector, select_files
from cloudarchive.storage.base import StorageBackend


@dataclass
class BackupResult:
    """Result of a backup run."""

    operation_id: str
    tar: ArchiveMetadata
    files: List[Path]
    policy: RetentionPolicy = field(default_factory=RetentionPolicy)


async def backup_from(
    config: ArchiveConfig,
    backend: StorageBackend,
    *,
    select: FileSelector = select_files,
    packager: Packager | None = None,
    clock: Clock = utc_now,
    observer: Observer = log_event,
    patterns: Sequence[str] | None = None,
) -> BackupResult:
    """
    Back up the configured data directory to the configured bucket.

    Args:
        config: Archive configuration
        backend: Storage backend for the bucket
        select: File selector (default: glob under the data directory)
        packager: Archive packager (default: TarPackager in config.work_dir)
        clock: Source of the current UTC time
        observer: Receives progress events
        patterns: Glob patterns overriding config.patterns

    Returns:
        BackupResult with the archive metadata and the files archived
        (the manifest is not listed)

    Raises:
        LifecycleError: If retention rules cannot be reconciled
        SelectionError: If files cannot be enumerated
        PackagingError: If the tarball cannot be created
        TransferError: If the upload fails
    """
    from ulid import ULID

    operation_id = str(ULID())
    packager = packager or TarPackager(config.work_dir)
    patterns = list(patterns or config.patterns)
    data_dir = config.data_dir

    observer("backup_started", operation_id=operation_id, bucket=config.bucket, data_dir=str(data_dir))

    # Step 1: Data directory
    data_dir.mkdir(parents=True, exist_ok=True)

    # Step 2: Retention rules (LifecycleError propagates as-is)
    policy = await reconcile_lifecycle(
        backend, config.bucket, config.retention_policy, observer=observer
    )

    # Step 3: File selection
    try:
        selected = await select(data_dir, patterns)
    except Exception as e:
        message = (
            f"File selection failed for '{data_dir}' with pattern "
            f"'{', '.join(patterns)}': {describe_error(e)}"
        )
        observer("file_selection_failed", level="error", operation_id=operation_id, error=message)
        raise SelectionError(
            message,
            details={"path": str(data_dir), "patterns": patterns},
        ) from e

    # A manifest left by an earlier run is rewritten below, not archived twice
    manifest = manifest_path(data_dir)
    files = [Path(f) for f in selected if Path(f) != manifest]
    observer("files_selected", operation_id=operation_id, count=len(files))

    # Step 4: Manifest (a failure here surfaces when packaging)
    created_at = clock()
    try:
        manifest = await write_manifest(data_dir, files, created_at)
    except Exception as e:
        observer(
            "manifest_write_failed",
            level="error",
            operation_id=operation_id,
            path=str(manifest),
            error=str(e),
        )

    # Step 5: Package
    archive_name = resolve_file_name(config.file_name, created_at)
    try:
        archive_path = await packager.pack(data_dir, files + [manifest], archive_name)
    except Exception as e:
        message = f"Zipping files for upload failed; backup cannot continue: {describe_error(e)}"
        observer("packaging_failed", level="error", operation_id=operation_id, error=message)
        raise PackagingError(message, details={"archive": archive_name}) from e

    metadata = ArchiveMetadata(
        local_path=Path(archive_path),
        remote_key=archive_name,
        created_at=created_at,
        files=relative_entries(data_dir, files),
    )

    # Step 6: Upload; the local tarball is removed whatever happens
    try:
        await backend.upload(config.bucket, metadata.local_path, archive_name)
    except Exception as e:
        message = (
            "Failed to upload tarball to configured object store; "
            f"backup has failed: {describe_error(e)}"
        )
        observer("upload_failed", level="error", operation_id=operation_id, error=message)
        raise TransferError(
            message,
            details={"bucket": config.bucket, "key": archive_name},
        ) from e
    finally:
        metadata.local_path.unlink(missing_ok=True)

    observer(
        "backup_completed",
        operation_id=operation_id,
        bucket=config.bucket,
        archive=archive_name,
        files=len(files),
    )

    return BackupResult(
        operation_id=operation_id,
        tar=metadata,
        files=files,
        policy=policy,
    )
