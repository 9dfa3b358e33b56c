# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Google Cloud Storage lifecycle documents.

GCS evaluates ``condition.age`` strictly after N days have elapsed, so a
canonical "after N days" is stored as ``age = N + 1`` and read back as
``age - 1``.
"""

from typing import Any, Dict, List

from cloudarchive.lifecycle.policy import RetentionDelta, RetentionPolicy

DELETE_ACTION = "Delete"
SET_STORAGE_CLASS_ACTION = "SetStorageClass"
COLDLINE = "COLDLINE"

# Classes an object may be in before the cold-tier transition
WARM_STORAGE_CLASSES = ["MULTI_REGIONAL", "REGIONAL", "NEARLINE", "STANDARD"]
ALL_STORAGE_CLASSES = WARM_STORAGE_CLASSES + [COLDLINE]

AGE_OFFSET = 1


def normalize_gcs_lifecycle(document: Dict[str, Any] | None) -> RetentionPolicy:
    """
    Convert a GCS ``{"lifecycle": {"rule": [...]}}`` document to a policy.

    Args:
        document: Bucket resource fields as returned by GCS

    Returns:
        RetentionPolicy; empty when the bucket has no rules
    """
    lifecycle = (document or {}).get("lifecycle") or {}
    rules: List[Dict[str, Any]] = lifecycle.get("rule") or []

    delete_after = None
    coldline_after = None

    for rule in rules:
        action = (rule.get("action") or {}).get("type")
        age = (rule.get("condition") or {}).get("age")
        if age is None:
            continue
        if action == DELETE_ACTION:
            delete_after = int(age) - AGE_OFFSET
        elif action == SET_STORAGE_CLASS_ACTION:
            coldline_after = int(age) - AGE_OFFSET

    return RetentionPolicy(
        delete_after_days=delete_after,
        coldline_after_days=coldline_after,
    )


def build_gcs_lifecycle(delta: RetentionDelta) -> Dict[str, Any]:
    """
    Build the lifecycle document that writes ``delta`` to a GCS bucket.

    Only fields present in the delta produce a rule. The delete rule is
    always emitted before the cold-tier rule.

    Args:
        delta: Fields to write

    Returns:
        Document shaped like ``{"lifecycle": {"rule": [...]}}``
    """
    rules: List[Dict[str, Any]] = []

    if delta.delete_after_days is not None:
        rules.append(
            {
                "action": {"type": DELETE_ACTION},
                "condition": {
                    "age": delta.delete_after_days + AGE_OFFSET,
                    "matchesStorageClass": list(ALL_STORAGE_CLASSES),
                },
            }
        )

    if delta.coldline_after_days is not None:
        rules.append(
            {
                "action": {
                    "type": SET_STORAGE_CLASS_ACTION,
                    "storageClass": COLDLINE,
                },
                "condition": {
                    "age": delta.coldline_after_days + AGE_OFFSET,
                    "matchesStorageClass": list(WARM_STORAGE_CLASSES),
                },
            }
        )

    return {"lifecycle": {"rule": rules}}


def merge_gcs_lifecycle(
    current: Dict[str, Any] | None, update: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Combine the bucket's current rules with an update document.

    GCS replaces the whole rule list on write. Existing rules whose action
    type the update does not carry are kept, so a delta touching only the
    cold-tier rule leaves the delete rule in place.

    Args:
        current: Document the bucket holds now
        update: Document from build_gcs_lifecycle

    Returns:
        Full document to write
    """
    existing = ((current or {}).get("lifecycle") or {}).get("rule") or []
    incoming = (update.get("lifecycle") or {}).get("rule") or []
    replaced = {(rule.get("action") or {}).get("type") for rule in incoming}

    kept = [
        rule for rule in existing if (rule.get("action") or {}).get("type") not in replaced
    ]
    return {"lifecycle": {"rule": kept + list(incoming)}}
