# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Google Cloud Storage backend built on google-cloud-storage.

The SDK is synchronous, so every call runs in a thread pool to keep the
event loop free.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, List

import structlog
from google.api_core.exceptions import NotFound

from cloudarchive.lifecycle.gcs_rules import (
    build_gcs_lifecycle,
    merge_gcs_lifecycle,
    normalize_gcs_lifecycle,
)
from cloudarchive.storage.base import (
    DownloadedArchive,
    LifecycleDocument,
    ObjectSummary,
    StorageBackend,
)

logger = structlog.get_logger()

# Thread pool for blocking SDK calls
_executor = ThreadPoolExecutor(max_workers=4)


def _lifecycle_document(bucket: Any) -> LifecycleDocument:
    """Shape a bucket's lifecycle rules like the JSON API's ``lifecycle`` field."""
    rules = [dict(rule) for rule in bucket.lifecycle_rules]
    if not rules:
        return {}
    return {"lifecycle": {"rule": rules}}


class GCSBackend(StorageBackend):
    """GCS lifecycle rules, listings and transfers."""

    name = "gcs"
    lifecycle_normalizer = staticmethod(normalize_gcs_lifecycle)
    lifecycle_builder = staticmethod(build_gcs_lifecycle)
    lifecycle_merger = staticmethod(merge_gcs_lifecycle)

    def __init__(
        self,
        project: str | None = None,
        credentials_file: str | None = None,
        client: Any = None,
    ):
        if client is None:
            from google.cloud import storage

            if credentials_file:
                client = storage.Client.from_service_account_json(
                    credentials_file, project=project
                )
            elif project:
                client = storage.Client(project=project)
            else:
                # Application Default Credentials
                client = storage.Client()

        self.client = client

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(_executor, func, *args)

    def _get_lifecycle_sync(self, bucket_name: str) -> LifecycleDocument:
        bucket = self.client.get_bucket(bucket_name)
        return _lifecycle_document(bucket)

    def _set_lifecycle_sync(
        self, bucket_name: str, document: LifecycleDocument
    ) -> LifecycleDocument:
        bucket = self.client.get_bucket(bucket_name)
        # patch() replaces the whole rule list
        merged = self.merge_lifecycle(_lifecycle_document(bucket), document)
        bucket.lifecycle_rules = merged["lifecycle"]["rule"]
        bucket.patch()
        return _lifecycle_document(bucket)

    def _list_sync(self, bucket_name: str, prefix: str) -> List[ObjectSummary]:
        blobs = self.client.list_blobs(bucket_name, prefix=prefix or None)
        return [
            ObjectSummary(key=blob.name, last_modified=blob.updated or blob.time_created)
            for blob in blobs
        ]

    def _download_sync(
        self, bucket_name: str, key: str, destination: Path
    ) -> DownloadedArchive | None:
        blob = self.client.bucket(bucket_name).blob(key)
        try:
            blob.download_to_filename(str(destination))
        except NotFound:
            destination.unlink(missing_ok=True)
            return None
        return DownloadedArchive(file=destination, dir=destination.parent)

    def _upload_sync(self, bucket_name: str, source: Path, key: str) -> None:
        blob = self.client.bucket(bucket_name).blob(key)
        blob.upload_from_filename(str(source))

    async def get_lifecycle(self, bucket: str) -> LifecycleDocument:
        return await self._run(self._get_lifecycle_sync, bucket)

    async def set_lifecycle(
        self, bucket: str, document: LifecycleDocument
    ) -> LifecycleDocument:
        result = await self._run(self._set_lifecycle_sync, bucket, document)
        logger.info(
            "gcs_lifecycle_updated",
            bucket=bucket,
            rules=len((document.get("lifecycle") or {}).get("rule", [])),
        )
        return result

    async def list_objects(self, bucket: str, prefix: str = "") -> List[ObjectSummary]:
        return await self._run(self._list_sync, bucket, prefix)

    async def download(
        self, bucket: str, key: str, destination: Path
    ) -> DownloadedArchive | None:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        logger.info("gcs_download_started", bucket=bucket, key=key)
        result = await self._run(self._download_sync, bucket, key, destination)

        if result is None:
            logger.warning("gcs_object_missing", bucket=bucket, key=key)
        else:
            logger.info("gcs_download_completed", bucket=bucket, key=key, path=str(destination))
        return result

    async def upload(self, bucket: str, source: Path, key: str) -> None:
        await self._run(self._upload_sync, bucket, Path(source), key)
        logger.info("gcs_upload_completed", bucket=bucket, key=key)
