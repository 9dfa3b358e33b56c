# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Lifecycle Reconciler - keeps a bucket's retention rules at the configured limits.

Flow: FETCH -> DIFF -> (NOOP | APPLY) -> DONE. A failure while fetching or
applying is fatal and never retried.
"""

from typing import TYPE_CHECKING, List

from cloudarchive.events import Observer, log_event
from cloudarchive.exceptions import LifecycleError, ResolutionError, describe_error
from cloudarchive.lifecycle.policy import RetentionPolicy, diff_policy
from cloudarchive.naming import file_prefix

if TYPE_CHECKING:
    from cloudarchive.storage.base import ObjectSummary, StorageBackend


async def get_lifecycle_policy(backend: "StorageBackend", bucket: str) -> RetentionPolicy:
    """
    Read and normalize the bucket's current retention rules.

    Raises:
        LifecycleError: If the lifecycle document cannot be fetched
    """
    try:
        document = await backend.get_lifecycle(bucket)
    except Exception as e:
        raise LifecycleError(
            f"Failed to enforce lifecycle settings for '{bucket}': {describe_error(e)}",
            details={"bucket": bucket, "stage": "fetch"},
        ) from e

    return backend.normalize_lifecycle(document)


async def reconcile_lifecycle(
    backend: "StorageBackend",
    bucket: str,
    desired: RetentionPolicy,
    observer: Observer = log_event,
) -> RetentionPolicy:
    """
    Bring the bucket's retention rules in line with ``desired``.

    Only limits that are configured (non-zero) and differ from what the
    bucket reports are written. When nothing differs no write happens and
    ``desired`` is returned as-is.

    Args:
        backend: Storage backend for the bucket
        bucket: Bucket name
        desired: Configured limits
        observer: Receives progress events

    Returns:
        The policy in effect: ``desired`` on a no-op, otherwise the policy
        normalized from the document the backend returned

    Raises:
        LifecycleError: If fetching or applying fails
    """
    try:
        observed = await get_lifecycle_policy(backend, bucket)
    except LifecycleError as e:
        observer("lifecycle_fetch_failed", level="error", bucket=bucket, error=e.message)
        raise

    delta = diff_policy(desired, observed)

    if delta.is_empty():
        observer(
            "lifecycle_unchanged",
            bucket=bucket,
            delete_after_days=desired.delete_after_days,
            coldline_after_days=desired.coldline_after_days,
        )
        return desired

    observer(
        "lifecycle_update_started",
        bucket=bucket,
        observed=observed.to_dict(),
        changes=delta.to_dict(),
    )

    document = backend.build_lifecycle_update(delta)

    try:
        result = await backend.set_lifecycle(bucket, document)
    except Exception as e:
        message = f"Failed to update lifecycle settings for '{bucket}': {describe_error(e)}"
        observer("lifecycle_update_failed", level="error", bucket=bucket, error=message)
        raise LifecycleError(
            message,
            details={"bucket": bucket, "stage": "apply", "changes": delta.to_dict()},
        ) from e

    applied = backend.normalize_lifecycle(result)
    observer("lifecycle_updated", bucket=bucket, policy=applied.to_dict())
    return applied


def newest_first(summaries: List["ObjectSummary"]) -> List["ObjectSummary"]:
    """Order by last modified, newest first; equal timestamps by key."""
    by_key = sorted(summaries, key=lambda s: s.key)
    return sorted(by_key, key=lambda s: s.last_modified, reverse=True)


async def get_latest(
    backend: "StorageBackend",
    bucket: str,
    template: str,
    observer: Observer = log_event,
) -> str | None:
    """
    Find the most recently modified archive produced by ``template``.

    Args:
        backend: Storage backend for the bucket
        bucket: Bucket name
        template: Archive name template; its literal prefix narrows the listing
        observer: Receives progress events

    Returns:
        Key of the newest matching object, or None if there is none

    Raises:
        ResolutionError: If the bucket cannot be listed
    """
    prefix = file_prefix(template)
    observer("latest_lookup_started", bucket=bucket, prefix=prefix)

    try:
        summaries = await backend.list_objects(bucket, prefix)
    except Exception as e:
        message = f"Could not determine latest file from bucket '{bucket}': {describe_error(e)}"
        observer("latest_lookup_failed", level="error", bucket=bucket, error=message)
        raise ResolutionError(message, details={"bucket": bucket, "prefix": prefix}) from e

    ordered = newest_first(summaries)
    if not ordered:
        observer("latest_lookup_empty", level="warning", bucket=bucket, prefix=prefix)
        return None

    latest = ordered[0]
    observer("latest_lookup_completed", bucket=bucket, key=latest.key, candidates=len(ordered))
    return latest.key
