# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration.

The variable names are the ones the archive tool has always read, so
existing deployments keep working:

- OBJECT_STORE: bucket name (required)
- BASE_PATH: base directory (default: current directory)
- DATA_PATH: data directory under BASE_PATH (default: archive)
- FILE_NAME_FORMAT: archive name template (default: archive_{{date}}.tgz)
- FILE_PATTERNS: comma-separated glob patterns (default: **/*)
- FILE_NAME: explicit archive to restore (default: latest)
- DISCARD_AFTER: expire archives after N days (default: 0, unmanaged)
- COLDLINE_AFTER: move archives to the cold tier after N days (default: 0)
- STORAGE_PROVIDER: 's3' | 'gcs' (default: picked from the credentials present)
- AWS_REGION, S3_ENDPOINT_URL: S3 client settings
- GCS_PROJECT, GOOGLE_APPLICATION_CREDENTIALS: GCS client settings
- WORK_PATH: directory tarballs are built in (default: BASE_PATH)
"""

from __future__ import annotations

import os
from typing import List, Mapping

from cloudarchive.builder import (
    ConfigDict,
    backup_directory,
    build_config,
    build_in,
    create_empty_config,
    discard_after,
    include_patterns,
    move_to_coldline_after,
    name_archives,
    pipe,
    restore_archive,
    with_bucket,
    with_gcs_client,
    with_s3_client,
)
from cloudarchive.config import DEFAULT_DATA_PATH, DEFAULT_FILE_NAME, ArchiveConfig, StorageProvider
from cloudarchive.errors import (
    explain_empty_patterns_env,
    explain_invalid_days_env,
    explain_invalid_provider_env,
    explain_missing_bucket_env,
)
from cloudarchive.exceptions import ConfigurationError


def _parse_days(name: str, value: str | None) -> int:
    if not value:
        return 0
    try:
        days = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_days_env(name, value)) from exc
    if days < 0:
        raise ConfigurationError(explain_invalid_days_env(name, value))
    return days


def _parse_patterns(value: str | None) -> List[str]:
    if value is None:
        return ["**/*"]
    patterns = [p.strip() for p in value.split(",") if p.strip()]
    if not patterns:
        raise ConfigurationError(explain_empty_patterns_env(value))
    return patterns


def _parse_provider(env: Mapping[str, str]) -> StorageProvider:
    value = env.get("STORAGE_PROVIDER")
    if value:
        try:
            return StorageProvider(value.lower())
        except ValueError as exc:
            raise ConfigurationError(explain_invalid_provider_env(value)) from exc

    # Whichever credentials are present decide the backend
    if env.get("GOOGLE_APPLICATION_CREDENTIALS") or env.get("GCS_PROJECT"):
        return StorageProvider.GCS
    return StorageProvider.S3


def _client_settings(
    config: ConfigDict, provider: StorageProvider, env: Mapping[str, str]
) -> ConfigDict:
    if provider is StorageProvider.GCS:
        return with_gcs_client(
            config,
            project=env.get("GCS_PROJECT") or None,
            credentials_file=env.get("GOOGLE_APPLICATION_CREDENTIALS") or None,
        )
    return with_s3_client(
        config,
        region=env.get("AWS_REGION") or "us-east-1",
        endpoint_url=env.get("S3_ENDPOINT_URL") or None,
    )


def create_config_from_env(environ: Mapping[str, str] | None = None) -> ArchiveConfig:
    """
    Create an ArchiveConfig from environment variables.

    Args:
        environ: Mapping to read instead of os.environ (used by tests)

    Returns:
        Validated ArchiveConfig

    Raises:
        ConfigurationError: If a variable is missing or malformed
    """
    env = os.environ if environ is None else environ

    bucket = env.get("OBJECT_STORE")
    if not bucket:
        raise ConfigurationError(explain_missing_bucket_env())

    provider = _parse_provider(env)
    patterns = _parse_patterns(env.get("FILE_PATTERNS"))
    delete_after = _parse_days("DISCARD_AFTER", env.get("DISCARD_AFTER"))
    coldline_after = _parse_days("COLDLINE_AFTER", env.get("COLDLINE_AFTER"))
    work_path = env.get("WORK_PATH")

    steps = [
        lambda c: with_bucket(c, bucket),
        lambda c: _client_settings(c, provider, env),
        lambda c: backup_directory(
            c,
            env.get("BASE_PATH") or os.getcwd(),
            env.get("DATA_PATH") or DEFAULT_DATA_PATH,
        ),
        lambda c: name_archives(c, env.get("FILE_NAME_FORMAT") or DEFAULT_FILE_NAME),
        lambda c: include_patterns(c, patterns),
        lambda c: discard_after(c, delete_after),
        lambda c: move_to_coldline_after(c, coldline_after),
        lambda c: restore_archive(c, env.get("FILE_NAME")),
    ]
    if work_path:
        steps.append(lambda c: build_in(c, work_path))

    return build_config(pipe(*steps)(create_empty_config()))
