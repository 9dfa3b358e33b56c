# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Lifecycle - canonical retention policy, per-store rule documents and reconciliation.
"""

from cloudarchive.lifecycle.policy import (
    RetentionPolicy,
    RetentionDelta,
    diff_policy,
)

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

from cloudarchive.lifecycle.reconciler import (
    get_latest,
    get_lifecycle_policy,
    reconcile_lifecycle,
)

__all__ = [
    # Policy
    "RetentionPolicy",
    "RetentionDelta",
    "diff_policy",
    # Rule documents
    "build_gcs_lifecycle",
    "merge_gcs_lifecycle",
    "normalize_gcs_lifecycle",
    "build_s3_lifecycle",
    "merge_s3_lifecycle",
    "normalize_s3_lifecycle",
    # Reconciler
    "get_latest",
    "get_lifecycle_policy",
    "reconcile_lifecycle",
]
