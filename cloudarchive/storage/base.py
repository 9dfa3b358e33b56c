# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Storage backend interface.

A backend is one object store variant. It moves lifecycle documents and
archives in and out of a bucket, and it knows which lifecycle document
shape its store speaks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List

from cloudarchive.lifecycle.policy import RetentionDelta, RetentionPolicy

LifecycleDocument = Dict[str, Any]


@dataclass(frozen=True)
class ObjectSummary:
    """One stored object, as seen by a prefix listing."""

    key: str
    last_modified: datetime


@dataclass(frozen=True)
class DownloadedArchive:
    """A downloaded archive and the directory it was written to."""

    file: Path
    dir: Path


class StorageBackend(ABC):
    """
    Abstract base class for object store variants.

    Subclasses set ``lifecycle_normalizer``, ``lifecycle_builder`` and
    ``lifecycle_merger`` (as staticmethods) to the pure functions for their
    lifecycle document shape.
    """

    name: str = "abstract"
    lifecycle_normalizer: Callable[[LifecycleDocument], RetentionPolicy]
    lifecycle_builder: Callable[[RetentionDelta], LifecycleDocument]
    lifecycle_merger: Callable[[LifecycleDocument, LifecycleDocument], LifecycleDocument]

    def normalize_lifecycle(self, document: LifecycleDocument | None) -> RetentionPolicy:
        """Convert this store's lifecycle document to a canonical policy."""
        return self.lifecycle_normalizer(document)

    def build_lifecycle_update(self, delta: RetentionDelta) -> LifecycleDocument:
        """Build this store's lifecycle document for a delta."""
        return self.lifecycle_builder(delta)

    def merge_lifecycle(
        self, current: LifecycleDocument | None, update: LifecycleDocument
    ) -> LifecycleDocument:
        """Full document to write: ``update`` plus the current rules it leaves alone."""
        return self.lifecycle_merger(current, update)

    @abstractmethod
    async def get_lifecycle(self, bucket: str) -> LifecycleDocument:
        """Fetch the bucket's current lifecycle document."""

    @abstractmethod
    async def set_lifecycle(self, bucket: str, document: LifecycleDocument) -> LifecycleDocument:
        """
        Write the rules in ``document``, keeping current rules it does not replace.

        Returns:
            The lifecycle document the bucket holds after the write
        """

    @abstractmethod
    async def list_objects(self, bucket: str, prefix: str = "") -> List[ObjectSummary]:
        """List every object whose key starts with ``prefix``."""

    @abstractmethod
    async def download(
        self, bucket: str, key: str, destination: Path
    ) -> DownloadedArchive | None:
        """
        Download an object to ``destination``.

        Returns:
            DownloadedArchive, or None if the object does not exist
        """

    @abstractmethod
    async def upload(self, bucket: str, source: Path, key: str) -> None:
        """Upload a local file to ``key``."""
