# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Cloud Archive Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation to prevent
accidental modification while a backup or restore is running.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List
import re

from cloudarchive.lifecycle.policy import RetentionPolicy
from cloudarchive.naming import file_prefix


class StorageProvider(str, Enum):
    """Object store the bucket lives in."""

    S3 = "s3"
    GCS = "gcs"


DEFAULT_DATA_PATH = "archive"
DEFAULT_FILE_NAME = "archive_{{date}}.tgz"
DEFAULT_PATTERNS = ("**/*",)


def _validate_bucket_name(bucket: str) -> bool:
    """
    Validate a bucket name against the rules shared by S3 and GCS.

    Rules:
    - 3-222 characters (GCS allows dotted names up to 222)
    - Lowercase letters, numbers, hyphens, underscores, periods
    - Must start and end with letter or number
    - No consecutive periods
    - Not formatted as IP address
    """
    if not bucket or len(bucket) < 3 or len(bucket) > 222:
        return False

    if not re.match(r"^[a-z0-9][a-z0-9._-]*[a-z0-9]$", bucket):
        return False

    if ".." in bucket:
        return False

    if re.match(r"^\d+\.\d+\.\d+\.\d+$", bucket):
        return False

    return True


@dataclass(frozen=True)
class ArchiveConfig:
    """
    Immutable configuration for backup, restore and retention enforcement.
    """

    # Required: bucket holding the archives
    bucket: str

    # Which object store the bucket lives in
    provider: StorageProvider = StorageProvider.S3

    # Directory the data path is relative to
    base_path: Path = field(default_factory=lambda: Path("."))

    # Directory (under base_path) that is backed up and restored into
    data_path: str = DEFAULT_DATA_PATH

    # Archive name template; see cloudarchive.naming
    file_name: str = DEFAULT_FILE_NAME

    # Glob patterns selecting files under the data directory
    patterns: List[str] = field(default_factory=lambda: list(DEFAULT_PATTERNS))

    # Explicit archive to restore instead of the latest one
    archive: str | None = None

    # Expire archives after this many days (0 = leave unmanaged)
    delete_after_days: int = 0

    # Move archives to the cold tier after this many days (0 = leave unmanaged)
    coldline_after_days: int = 0

    # Where tarballs are built before upload (default: base_path)
    work_path: Path | None = None

    # S3 client settings
    region: str = "us-east-1"
    endpoint_url: str | None = None

    # GCS client settings
    gcs_project: str | None = None
    gcs_credentials_file: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not _validate_bucket_name(self.bucket):
            errors.append(f"Invalid bucket name: {self.bucket}")

        if self.delete_after_days < 0:
            errors.append(f"delete_after_days must be >= 0, got {self.delete_after_days}")

        if self.coldline_after_days < 0:
            errors.append(
                f"coldline_after_days must be >= 0, got {self.coldline_after_days}"
            )

        if not self.file_name:
            errors.append("file_name template must not be empty")

        if not self.patterns or not all(isinstance(p, str) and p for p in self.patterns):
            errors.append("patterns must contain at least one non-empty glob pattern")

        if not self.data_path:
            errors.append("data_path must not be empty")

        if errors:
            from cloudarchive.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    @property
    def data_dir(self) -> Path:
        """Absolute directory that is archived and restored into."""
        return Path(self.base_path).resolve() / self.data_path

    @property
    def work_dir(self) -> Path:
        """Directory tarballs are written to before upload."""
        return Path(self.work_path or self.base_path).resolve()

    @property
    def retention_policy(self) -> RetentionPolicy:
        """Desired retention limits; unmanaged limits are None."""
        return RetentionPolicy(
            delete_after_days=self.delete_after_days or None,
            coldline_after_days=self.coldline_after_days or None,
        )

    @property
    def file_prefix(self) -> str:
        """Key prefix shared by every archive this config produces."""
        return file_prefix(self.file_name)

    def with_updates(self, **kwargs) -> "ArchiveConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return ArchiveConfig(**current)
