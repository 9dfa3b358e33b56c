# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Cloud Archive - scheduled backup and restore of a directory to object storage.

Archives a local directory tree into an S3 or Google Cloud Storage bucket,
restores the latest (or a named) archive, and keeps the bucket's
retention/tiering rules at the configured limits. Package name: cloudarchive.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from cloudarchive.builder import create_config
from cloudarchive.env import create_config_from_env

# Orchestration
from cloudarchive.backup import BackupResult, backup_from
from cloudarchive.restore import RestoreResult, restore_to

# Retention rules
from cloudarchive.lifecycle import RetentionPolicy, get_latest, reconcile_lifecycle

# Storage
from cloudarchive.storage import create_backend

__all__ = [
    # Version
    "__version__",
    # Configuration creation
    "create_config",
    "create_config_from_env",
    # Orchestration
    "backup_from",
    "restore_to",
    "BackupResult",
    "RestoreResult",
    # Retention rules
    "RetentionPolicy",
    "reconcile_lifecycle",
    "get_latest",
    # Storage
    "create_backend",
]
