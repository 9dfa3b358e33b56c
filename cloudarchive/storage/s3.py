# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Amazon S3 backend (and S3-compatible stores) built on aiobotocore.

A client is created per call from a shared session, the same way the
rest of the package talks to S3.
"""

from pathlib import Path
from typing import Any, List

import aiofiles
import structlog
from botocore.exceptions import ClientError

from cloudarchive.lifecycle.s3_rules import (
    build_s3_lifecycle,
    merge_s3_lifecycle,
    normalize_s3_lifecycle,
)
from cloudarchive.storage.base import (
    DownloadedArchive,
    LifecycleDocument,
    ObjectSummary,
    StorageBackend,
)

logger = structlog.get_logger()

NO_LIFECYCLE_CODES = {"NoSuchLifecycleConfiguration"}
MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3Backend(StorageBackend):
    """S3 lifecycle configurations, listings and transfers."""

    name = "s3"
    lifecycle_normalizer = staticmethod(normalize_s3_lifecycle)
    lifecycle_builder = staticmethod(build_s3_lifecycle)
    lifecycle_merger = staticmethod(merge_s3_lifecycle)

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        session: Any = None,
        list_batch_size: int = 1000,
    ):
        if session is None:
            from aiobotocore.session import get_session

            session = get_session()

        self.region = region
        self.endpoint_url = endpoint_url
        self.session = session
        self.list_batch_size = list_batch_size

    def _client(self) -> Any:
        return self.session.create_client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
        )

    async def get_lifecycle(self, bucket: str) -> LifecycleDocument:
        async with self._client() as s3_client:
            try:
                response = await s3_client.get_bucket_lifecycle_configuration(Bucket=bucket)
            except ClientError as e:
                if _error_code(e) in NO_LIFECYCLE_CODES:
                    return {}
                raise

        return {"Rules": response.get("Rules", [])}

    async def set_lifecycle(
        self, bucket: str, document: LifecycleDocument
    ) -> LifecycleDocument:
        # The put replaces every rule, so rules the update leaves alone are carried over
        merged = self.merge_lifecycle(await self.get_lifecycle(bucket), document)

        async with self._client() as s3_client:
            await s3_client.put_bucket_lifecycle_configuration(
                Bucket=bucket,
                LifecycleConfiguration={"Rules": merged["Rules"]},
            )

        logger.info(
            "s3_lifecycle_updated",
            bucket=bucket,
            rules=len(merged["Rules"]),
            changed=len(document.get("Rules", [])),
        )

        # The put response carries no rules; read back what the bucket now holds
        return await self.get_lifecycle(bucket)

    async def list_objects(self, bucket: str, prefix: str = "") -> List[ObjectSummary]:
        summaries: List[ObjectSummary] = []
        params: dict = {"Bucket": bucket, "MaxKeys": self.list_batch_size}
        if prefix:
            params["Prefix"] = prefix

        async with self._client() as s3_client:
            paginator = s3_client.get_paginator("list_objects_v2")
            async for page in paginator.paginate(**params):
                for obj in page.get("Contents", []):
                    summaries.append(
                        ObjectSummary(key=obj["Key"], last_modified=obj["LastModified"])
                    )

        return summaries

    async def download(
        self, bucket: str, key: str, destination: Path
    ) -> DownloadedArchive | None:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        logger.info("s3_download_started", bucket=bucket, key=key)

        async with self._client() as s3_client:
            try:
                response = await s3_client.get_object(Bucket=bucket, Key=key)
            except ClientError as e:
                if _error_code(e) in MISSING_OBJECT_CODES:
                    logger.warning("s3_object_missing", bucket=bucket, key=key)
                    return None
                raise

            async with response["Body"] as stream:
                async with aiofiles.open(destination, "wb") as f:
                    await f.write(await stream.read())

        logger.info("s3_download_completed", bucket=bucket, key=key, path=str(destination))

        return DownloadedArchive(file=destination, dir=destination.parent)

    async def upload(self, bucket: str, source: Path, key: str) -> None:
        async with aiofiles.open(source, "rb") as f:
            body = await f.read()

        async with self._client() as s3_client:
            await s3_client.put_object(Bucket=bucket, Key=key, Body=body)

        logger.info("s3_upload_completed", bucket=bucket, key=key, size=len(body))
