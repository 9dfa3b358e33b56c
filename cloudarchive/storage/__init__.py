# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Storage Backends - one variant per object store, chosen once from config.
"""

from cloudarchive.config import ArchiveConfig, StorageProvider
from cloudarchive.storage.base import (
    DownloadedArchive,
    LifecycleDocument,
    ObjectSummary,
    StorageBackend,
)


def create_backend(config: ArchiveConfig) -> StorageBackend:
    """
    Build the storage backend for a configuration.

    SDK imports happen here so that only the selected store's library has
    to be importable.
    """
    if config.provider == StorageProvider.GCS:
        from cloudarchive.storage.gcs import GCSBackend

        return GCSBackend(
            project=config.gcs_project,
            credentials_file=config.gcs_credentials_file,
        )

    from cloudarchive.storage.s3 import S3Backend

    return S3Backend(region=config.region, endpoint_url=config.endpoint_url)


__all__ = [
    "create_backend",
    "StorageBackend",
    "ObjectSummary",
    "DownloadedArchive",
    "LifecycleDocument",
]
