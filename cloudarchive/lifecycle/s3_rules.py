# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Amazon S3 lifecycle configurations.

S3 day counts are inclusive of day N and are written unmodified.
"""

from typing import Any, Dict, List

from cloudarchive.lifecycle.policy import RetentionDelta, RetentionPolicy

ENABLED = "Enabled"
COLD_STORAGE_CLASS = "GLACIER"

DELETE_RULE_ID = "cloud-archive-expire"
COLDLINE_RULE_ID = "cloud-archive-transition"

# Actions this package manages, and every action an S3 rule can carry
REPLACEABLE_ACTIONS = ("Expiration", "Transitions")
RULE_ACTIONS = REPLACEABLE_ACTIONS + (
    "NoncurrentVersionExpiration",
    "NoncurrentVersionTransitions",
    "AbortIncompleteMultipartUpload",
)


def normalize_s3_lifecycle(document: Dict[str, Any] | None) -> RetentionPolicy:
    """
    Convert an S3 ``{"Rules": [...]}`` configuration to a policy.

    Disabled rules are ignored.
    """
    rules: List[Dict[str, Any]] = (document or {}).get("Rules") or []

    delete_after = None
    coldline_after = None

    for rule in rules:
        if rule.get("Status") != ENABLED:
            continue

        transitions = rule.get("Transitions") or []
        if transitions and transitions[0].get("Days") is not None:
            coldline_after = int(transitions[0]["Days"])

        expiration = rule.get("Expiration") or {}
        if expiration.get("Days") is not None:
            delete_after = int(expiration["Days"])

    return RetentionPolicy(
        delete_after_days=delete_after,
        coldline_after_days=coldline_after,
    )


def build_s3_lifecycle(delta: RetentionDelta) -> Dict[str, Any]:
    """
    Build the ``LifecycleConfiguration`` that writes ``delta`` to S3.

    Only fields present in the delta produce a rule; expiration comes
    before transition.
    """
    rules: List[Dict[str, Any]] = []

    if delta.delete_after_days is not None:
        rules.append(
            {
                "ID": DELETE_RULE_ID,
                "Filter": {"Prefix": ""},
                "Status": ENABLED,
                "Expiration": {"Days": delta.delete_after_days},
            }
        )

    if delta.coldline_after_days is not None:
        rules.append(
            {
                "ID": COLDLINE_RULE_ID,
                "Filter": {"Prefix": ""},
                "Status": ENABLED,
                "Transitions": [
                    {
                        "Days": delta.coldline_after_days,
                        "StorageClass": COLD_STORAGE_CLASS,
                    }
                ],
            }
        )

    return {"Rules": rules}


def merge_s3_lifecycle(
    current: Dict[str, Any] | None, update: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Combine the bucket's current configuration with an update.

    ``PutBucketLifecycleConfiguration`` replaces every rule. The actions the
    update carries (expiration, transition) are stripped from existing
    rules; an existing rule is kept while it still holds any action.

    Args:
        current: Configuration the bucket holds now
        update: Configuration from build_s3_lifecycle

    Returns:
        Full configuration to write
    """
    incoming: List[Dict[str, Any]] = update.get("Rules") or []
    replaced = {
        action for rule in incoming for action in REPLACEABLE_ACTIONS if action in rule
    }
    incoming_ids = {rule.get("ID") for rule in incoming}

    kept: List[Dict[str, Any]] = []
    for rule in (current or {}).get("Rules") or []:
        if rule.get("ID") in incoming_ids:
            continue
        remaining = {key: value for key, value in rule.items() if key not in replaced}
        if any(action in remaining for action in RULE_ACTIONS):
            kept.append(remaining)

    return {"Rules": kept + list(incoming)}
