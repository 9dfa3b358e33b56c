# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Cloud Archive Builder - Functional builder pattern for configuration.

This module provides pure functions for building ArchiveConfig objects.
Each function takes a config dict and returns a new dict with the
modification applied (immutable updates).
"""

from pathlib import Path
from typing import Any, Callable, Dict, List

from cloudarchive.config import (
    DEFAULT_DATA_PATH,
    DEFAULT_FILE_NAME,
    DEFAULT_PATTERNS,
    ArchiveConfig,
    StorageProvider,
)


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def create_empty_config() -> ConfigDict:
    """
    Create an initial empty configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "bucket": "",
        "provider": StorageProvider.S3,
        "base_path": Path("."),
        "data_path": DEFAULT_DATA_PATH,
        "file_name": DEFAULT_FILE_NAME,
        "patterns": list(DEFAULT_PATTERNS),
        "archive": None,
        "delete_after_days": 0,
        "coldline_after_days": 0,
        "work_path": None,
        "region": "us-east-1",
        "endpoint_url": None,
        "gcs_project": None,
        "gcs_credentials_file": None,
    }


def with_bucket(config: ConfigDict, bucket_name: str) -> ConfigDict:
    """
    Set the bucket archives are stored in.

    Args:
        config: Current configuration dictionary
        bucket_name: Name of the bucket

    Returns:
        New configuration dictionary with bucket set
    """
    return {**config, "bucket": bucket_name}


def with_provider(config: ConfigDict, provider: str | StorageProvider) -> ConfigDict:
    """
    Set the object store provider ("s3" or "gcs").
    """
    if isinstance(provider, str):
        provider = StorageProvider(provider.lower())
    return {**config, "provider": provider}


def with_s3_client(
    config: ConfigDict,
    region: str,
    endpoint_url: str | None = None,
) -> ConfigDict:
    """
    Configure the S3 client (region and optional custom endpoint).

    Args:
        config: Current configuration dictionary
        region: AWS region (e.g., 'us-east-1', 'eu-west-1')
        endpoint_url: S3-compatible endpoint, e.g. a MinIO server

    Returns:
        New configuration dictionary with provider set to S3
    """
    return {
        **config,
        "provider": StorageProvider.S3,
        "region": region,
        "endpoint_url": endpoint_url,
    }


def with_gcs_client(
    config: ConfigDict,
    project: str | None = None,
    credentials_file: str | None = None,
) -> ConfigDict:
    """
    Configure the Google Cloud Storage client.

    Args:
        config: Current configuration dictionary
        project: GCP project ID (optional, inferred from credentials)
        credentials_file: Service account JSON (optional, uses ADC if omitted)

    Returns:
        New configuration dictionary with provider set to GCS
    """
    return {
        **config,
        "provider": StorageProvider.GCS,
        "gcs_project": project,
        "gcs_credentials_file": credentials_file,
    }


def backup_directory(
    config: ConfigDict,
    base_path: Path | str,
    data_path: str = DEFAULT_DATA_PATH,
) -> ConfigDict:
    """
    Set the directory that is archived and restored into.

    Args:
        config: Current configuration dictionary
        base_path: Base directory
        data_path: Sub-directory of base_path holding the data

    Returns:
        New configuration dictionary with paths set
    """
    return {**config, "base_path": Path(base_path), "data_path": data_path}


def name_archives(config: ConfigDict, template: str) -> ConfigDict:
    """
    Set the archive name template, e.g. "db_{{dateTime}}.tgz".
    """
    if not template:
        raise ValueError("archive name template must not be empty")
    return {**config, "file_name": template}


def include_patterns(config: ConfigDict, patterns: List[str]) -> ConfigDict:
    """
    Replace the glob patterns selecting files for backup.
    """
    if not patterns:
        raise ValueError("at least one glob pattern is required")
    return {**config, "patterns": list(patterns)}


def discard_after(config: ConfigDict, days: int) -> ConfigDict:
    """
    Expire archives in the bucket after a number of days.

    Args:
        config: Current configuration dictionary
        days: Age in days; 0 leaves the expiration rule unmanaged

    Returns:
        New configuration dictionary with the delete limit set
    """
    if days < 0:
        raise ValueError(f"delete after days must be >= 0, got {days}")
    return {**config, "delete_after_days": days}


def move_to_coldline_after(config: ConfigDict, days: int) -> ConfigDict:
    """
    Move archives to the cold storage tier after a number of days.
    """
    if days < 0:
        raise ValueError(f"coldline after days must be >= 0, got {days}")
    return {**config, "coldline_after_days": days}


def restore_archive(config: ConfigDict, archive: str | None) -> ConfigDict:
    """
    Pin restore to a specific archive key instead of the latest one.
    """
    return {**config, "archive": archive or None}


def build_in(config: ConfigDict, work_path: Path | str) -> ConfigDict:
    """
    Set the directory tarballs are written to before upload.
    """
    return {**config, "work_path": Path(work_path)}


def build_config(config_dict: ConfigDict) -> ArchiveConfig:
    """
    Validate and build an immutable ArchiveConfig from a configuration dictionary.

    Args:
        config_dict: Configuration dictionary built using builder functions

    Returns:
        Validated, immutable ArchiveConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    if not config_dict.get("bucket"):
        from cloudarchive.exceptions import ConfigurationError

        raise ConfigurationError("bucket is required")

    return ArchiveConfig(**config_dict)


def pipe(*funcs: BuilderFunc) -> BuilderFunc:
    """
    Compose multiple builder functions into a single function.

    This allows a more readable pipeline style:

        config = pipe(
            lambda c: with_bucket(c, "my-bucket"),
            lambda c: discard_after(c, 30),
        )(create_empty_config())

    Args:
        *funcs: Builder functions to compose

    Returns:
        A single function that applies all functions in sequence
    """

    def composed(config: ConfigDict) -> ConfigDict:
        result = config
        for func in funcs:
            result = func(result)
        return result

    return composed


def create_config(
    bucket: str,
    *,
    provider: str | StorageProvider = "s3",
    base_path: str | Path = ".",
    data_path: str = DEFAULT_DATA_PATH,
    file_name: str = DEFAULT_FILE_NAME,
    patterns: List[str] | None = None,
    archive: str | None = None,
    delete_after_days: int = 0,
    coldline_after_days: int = 0,
    **kwargs: Any,
) -> ArchiveConfig:
    """
    Create a configuration from simple parameters.

    This is the recommended user-facing API for creating configurations.

    Args:
        bucket: Bucket name (required)
        provider: "s3" or "gcs" (default: "s3")
        base_path: Base directory (default: current directory)
        data_path: Data directory under base_path (default: "archive")
        file_name: Archive name template (default: "archive_{{date}}.tgz")
        patterns: Glob patterns to back up (default: ["**/*"])
        archive: Archive key to restore instead of the latest
        delete_after_days: Expire archives after N days (0 = unmanaged)
        coldline_after_days: Move archives to cold tier after N days (0 = unmanaged)
        **kwargs: Additional configuration options (region, endpoint_url, ...)

    Returns:
        Validated, immutable ArchiveConfig instance

    Example:
        config = create_config(
            bucket="my-backups",
            base_path="/var/lib/app",
            data_path="data",
            file_name="app_{{dateTime}}.tgz",
            delete_after_days=30,
            coldline_after_days=7,
        )
    """
    config_dict = create_empty_config()
    config_dict = with_bucket(config_dict, bucket)
    config_dict = with_provider(config_dict, provider)
    config_dict = backup_directory(config_dict, base_path, data_path)
    config_dict = name_archives(config_dict, file_name)

    if patterns:
        config_dict = include_patterns(config_dict, patterns)

    config_dict = discard_after(config_dict, delete_after_days)
    config_dict = move_to_coldline_after(config_dict, coldline_after_days)
    config_dict = restore_archive(config_dict, archive)

    # Apply any additional kwargs
    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)
