# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for Cloud Archive tests.

Provides an in-memory storage backend, a frozen clock, an event recorder
and test configuration helpers.
"""

import os
import tempfile
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Dict, Generator, List, Tuple

import pytest
import structlog

from cloudarchive.lifecycle.gcs_rules import (
    build_gcs_lifecycle,
    merge_gcs_lifecycle,
    normalize_gcs_lifecycle,
)
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

# Set test environment variables
os.environ["CLOUD_ARCHIVE_ADMIN_API_KEY"] = "test-api-key-12345"

FROZEN_NOW = datetime(2018, 10, 10, 12, 10, 10, tzinfo=UTC)


class FakeBackend(StorageBackend):
    """
    In-memory bucket speaking either lifecycle document shape.

    Every call is recorded; ``*_error`` attributes make the matching
    operation raise.
    """

    def __init__(self, shape: str = "gcs", lifecycle: LifecycleDocument | None = None):
        self.name = shape
        if shape == "gcs":
            self.lifecycle_normalizer = normalize_gcs_lifecycle
            self.lifecycle_builder = build_gcs_lifecycle
            self.lifecycle_merger = merge_gcs_lifecycle
        else:
            self.lifecycle_normalizer = normalize_s3_lifecycle
            self.lifecycle_builder = build_s3_lifecycle
            self.lifecycle_merger = merge_s3_lifecycle

        self.lifecycle: LifecycleDocument = lifecycle or {}
        self.set_result: LifecycleDocument | None = None
        self.objects: Dict[str, Tuple[bytes, datetime]] = {}

        self.set_calls: List[LifecycleDocument] = []
        self.list_calls: List[Tuple[str, str]] = []
        self.download_calls: List[str] = []
        self.upload_calls: List[str] = []

        self.get_error: Exception | None = None
        self.set_error: Exception | None = None
        self.list_error: Exception | None = None
        self.download_error: Exception | None = None
        self.upload_error: Exception | None = None

    def put(self, key: str, body: bytes = b"data", modified: datetime = FROZEN_NOW) -> None:
        self.objects[key] = (body, modified)

    async def get_lifecycle(self, bucket: str) -> LifecycleDocument:
        if self.get_error:
            raise self.get_error
        return self.lifecycle

    async def set_lifecycle(self, bucket: str, document: LifecycleDocument) -> LifecycleDocument:
        self.set_calls.append(document)
        if self.set_error:
            raise self.set_error
        merged = self.merge_lifecycle(self.lifecycle, document)
        self.lifecycle = self.set_result if self.set_result is not None else merged
        return self.lifecycle

    async def list_objects(self, bucket: str, prefix: str = "") -> List[ObjectSummary]:
        self.list_calls.append((bucket, prefix))
        if self.list_error:
            raise self.list_error
        return [
            ObjectSummary(key=key, last_modified=modified)
            for key, (_, modified) in self.objects.items()
            if key.startswith(prefix)
        ]

    async def download(
        self, bucket: str, key: str, destination: Path
    ) -> DownloadedArchive | None:
        self.download_calls.append(key)
        if self.download_error:
            raise self.download_error
        if key not in self.objects:
            return None
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.objects[key][0])
        return DownloadedArchive(file=destination, dir=destination.parent)

    async def upload(self, bucket: str, source: Path, key: str) -> None:
        self.upload_calls.append(key)
        if self.upload_error:
            raise self.upload_error
        self.put(key, Path(source).read_bytes())


class RecordingObserver:
    """Observer that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def __call__(self, event: str, level: str = "info", **fields: Any) -> None:
        self.events.append((event, level, fields))

    @property
    def names(self) -> List[str]:
        return [event for event, _, _ in self.events]


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo any structlog configuration a test (or cli.main) installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_backend():
    """Factory for in-memory backends: make_backend("s3", lifecycle={...})."""
    return FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    """Empty in-memory bucket with GCS-shaped lifecycle documents."""
    return FakeBackend("gcs")


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def frozen_clock():
    """Clock fixed at 2018-10-10T12:10:10Z."""
    return lambda: FROZEN_NOW


@pytest.fixture
def test_config(temp_dir: Path):
    """Create a test configuration rooted in the temp directory."""
    from cloudarchive.builder import create_config

    return create_config(
        bucket="test-bucket",
        base_path=temp_dir,
        data_path="data",
        work_path=temp_dir / "work",
    )


@pytest.fixture
def data_dir(test_config) -> Path:
    """Data directory of test_config holding two small files."""
    path = test_config.data_dir
    path.mkdir(parents=True, exist_ok=True)
    (path / "one.txt").write_text("one")
    (path / "two.txt").write_text("two")
    return path
