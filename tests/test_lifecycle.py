# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Lifecycle Tests.

These tests verify the retention rule handling:
1. Both document shapes normalize to the same canonical policy
2. Update documents carry only the changed rules, with the right offsets
3. The reconciler writes nothing when the bucket already matches
4. Fetch and apply failures are fatal and name the bucket
5. The latest archive is picked deterministically
"""

from datetime import datetime, timedelta, UTC

import pytest

from cloudarchive.exceptions import LifecycleError, ResolutionError
from cloudarchive.lifecycle import (
    RetentionPolicy,
    build_gcs_lifecycle,
    build_s3_lifecycle,
    diff_policy,
    get_latest,
    merge_gcs_lifecycle,
    merge_s3_lifecycle,
    normalize_gcs_lifecycle,
    normalize_s3_lifecycle,
    reconcile_lifecycle,
)


def gcs_document(delete_age=None, cold_age=None):
    rules = []
    if delete_age is not None:
        rules.append({"action": {"type": "Delete"}, "condition": {"age": delete_age}})
    if cold_age is not None:
        rules.append(
            {
                "action": {"type": "SetStorageClass", "storageClass": "COLDLINE"},
                "condition": {"age": cold_age},
            }
        )
    return {"lifecycle": {"rule": rules}}


# ============================================================================
# Normalizers
# ============================================================================

def test_gcs_ages_are_read_back_one_day_lower():
    policy = normalize_gcs_lifecycle(gcs_document(delete_age=31, cold_age=8))

    assert policy == RetentionPolicy(delete_after_days=30, coldline_after_days=7)


def test_gcs_rules_without_age_are_ignored():
    document = {"lifecycle": {"rule": [{"action": {"type": "Delete"}, "condition": {}}]}}

    assert normalize_gcs_lifecycle(document).is_empty()


@pytest.mark.parametrize("document", [None, {}, {"lifecycle": {}}, {"Rules": []}])
def test_gcs_empty_documents_give_empty_policy(document):
    policy = normalize_gcs_lifecycle(document)

    # Absent, never zero
    assert policy.delete_after_days is None
    assert policy.coldline_after_days is None


def test_s3_enabled_rules_are_read_without_offset():
    document = {
        "Rules": [
            {"ID": "expire", "Status": "Enabled", "Expiration": {"Days": 30}},
            {
                "ID": "cold",
                "Status": "Enabled",
                "Transitions": [{"Days": 7, "StorageClass": "GLACIER"}],
            },
        ]
    }

    assert normalize_s3_lifecycle(document) == RetentionPolicy(30, 7)


def test_s3_disabled_rules_are_ignored():
    document = {
        "Rules": [
            {"ID": "expire", "Status": "Disabled", "Expiration": {"Days": 30}},
            {
                "ID": "cold",
                "Status": "Enabled",
                "Transitions": [{"Days": 7, "StorageClass": "GLACIER"}],
            },
        ]
    }

    assert normalize_s3_lifecycle(document) == RetentionPolicy(None, 7)


def test_s3_document_without_rules_gives_empty_policy():
    assert normalize_s3_lifecycle({}).is_empty()
    assert normalize_s3_lifecycle({"lifecycle": {"rule": []}}).is_empty()


# ============================================================================
# Builders
# ============================================================================

def test_gcs_update_adds_one_day_and_storage_class_qualifiers():
    document = build_gcs_lifecycle(RetentionPolicy(delete_after_days=30, coldline_after_days=7))

    assert document == {
        "lifecycle": {
            "rule": [
                {
                    "action": {"type": "Delete"},
                    "condition": {
                        "age": 31,
                        "matchesStorageClass": [
                            "MULTI_REGIONAL",
                            "REGIONAL",
                            "NEARLINE",
                            "STANDARD",
                            "COLDLINE",
                        ],
                    },
                },
                {
                    "action": {"type": "SetStorageClass", "storageClass": "COLDLINE"},
                    "condition": {
                        "age": 8,
                        "matchesStorageClass": [
                            "MULTI_REGIONAL",
                            "REGIONAL",
                            "NEARLINE",
                            "STANDARD",
                        ],
                    },
                },
            ]
        }
    }


def test_s3_update_writes_days_unmodified():
    document = build_s3_lifecycle(RetentionPolicy(delete_after_days=30, coldline_after_days=7))

    rules = document["Rules"]
    assert [rule["Status"] for rule in rules] == ["Enabled", "Enabled"]
    assert rules[0]["Expiration"] == {"Days": 30}
    assert rules[1]["Transitions"] == [{"Days": 7, "StorageClass": "GLACIER"}]


def test_update_only_contains_fields_in_delta():
    gcs_rules = build_gcs_lifecycle(RetentionPolicy(coldline_after_days=5))["lifecycle"]["rule"]
    s3_rules = build_s3_lifecycle(RetentionPolicy(delete_after_days=20))["Rules"]

    assert [rule["action"]["type"] for rule in gcs_rules] == ["SetStorageClass"]
    assert len(s3_rules) == 1
    assert "Transitions" not in s3_rules[0]


@pytest.mark.parametrize(
    "build, normalize",
    [
        (build_gcs_lifecycle, normalize_gcs_lifecycle),
        (build_s3_lifecycle, normalize_s3_lifecycle),
    ],
)
def test_built_documents_normalize_to_the_same_days(build, normalize):
    policy = RetentionPolicy(delete_after_days=20, coldline_after_days=10)

    assert normalize(build(policy)) == policy


# ============================================================================
# Merging updates into the current rules
# ============================================================================

def test_gcs_merge_keeps_rules_of_other_action_types():
    current = gcs_document(delete_age=21, cold_age=6)
    update = build_gcs_lifecycle(RetentionPolicy(coldline_after_days=10))

    merged = merge_gcs_lifecycle(current, update)

    rules = merged["lifecycle"]["rule"]
    assert [rule["action"]["type"] for rule in rules] == ["Delete", "SetStorageClass"]
    assert normalize_gcs_lifecycle(merged) == RetentionPolicy(20, 10)


def test_gcs_merge_into_empty_bucket():
    update = build_gcs_lifecycle(RetentionPolicy(delete_after_days=30))

    assert merge_gcs_lifecycle({}, update) == update


def test_s3_merge_strips_only_replaced_actions():
    current = {
        "Rules": [
            {
                "ID": "combined",
                "Status": "Enabled",
                "Expiration": {"Days": 20},
                "Transitions": [{"Days": 5, "StorageClass": "GLACIER"}],
            },
            {
                "ID": "uploads",
                "Status": "Enabled",
                "AbortIncompleteMultipartUpload": {"DaysAfterInitiation": 7},
            },
        ]
    }
    update = build_s3_lifecycle(RetentionPolicy(coldline_after_days=10))

    merged = merge_s3_lifecycle(current, update)

    rules = merged["Rules"]
    assert [rule["ID"] for rule in rules] == ["combined", "uploads", "cloud-archive-transition"]
    assert "Transitions" not in rules[0]
    assert rules[0]["Expiration"] == {"Days": 20}
    assert normalize_s3_lifecycle(merged) == RetentionPolicy(20, 10)


def test_s3_merge_drops_rules_left_without_actions():
    current = build_s3_lifecycle(RetentionPolicy(delete_after_days=20, coldline_after_days=5))
    update = build_s3_lifecycle(RetentionPolicy(delete_after_days=30))

    merged = merge_s3_lifecycle(current, update)

    assert [rule["ID"] for rule in merged["Rules"]] == [
        "cloud-archive-transition",
        "cloud-archive-expire",
    ]
    assert normalize_s3_lifecycle(merged) == RetentionPolicy(30, 5)


# ============================================================================
# Diff
# ============================================================================

def test_diff_ignores_unmanaged_limits():
    delta = diff_policy(RetentionPolicy(None, None), RetentionPolicy(30, 7))

    assert delta.is_empty()


def test_diff_counts_absent_observed_value_as_change():
    delta = diff_policy(RetentionPolicy(30, 7), RetentionPolicy(None, 7))

    assert delta == RetentionPolicy(delete_after_days=30, coldline_after_days=None)


# ============================================================================
# Reconciler
# ============================================================================

@pytest.mark.asyncio
async def test_reconcile_noop_when_bucket_matches(make_backend, observer):
    backend = make_backend("gcs", lifecycle=gcs_document(delete_age=21, cold_age=11))
    desired = RetentionPolicy(delete_after_days=20, coldline_after_days=10)

    result = await reconcile_lifecycle(backend, "test-bucket", desired, observer=observer)

    assert result == desired
    assert backend.set_calls == []
    assert "lifecycle_unchanged" in observer.names


@pytest.mark.asyncio
async def test_reconcile_noop_when_nothing_is_managed(make_backend, observer):
    backend = make_backend("s3", lifecycle={})

    result = await reconcile_lifecycle(backend, "test-bucket", RetentionPolicy(), observer=observer)

    assert result.is_empty()
    assert backend.set_calls == []


@pytest.mark.asyncio
async def test_reconcile_writes_only_the_changed_rule(make_backend, observer):
    backend = make_backend("gcs", lifecycle=gcs_document(delete_age=21, cold_age=6))
    desired = RetentionPolicy(delete_after_days=20, coldline_after_days=10)

    result = await reconcile_lifecycle(backend, "test-bucket", desired, observer=observer)

    assert len(backend.set_calls) == 1
    rules = backend.set_calls[0]["lifecycle"]["rule"]
    assert len(rules) == 1
    assert rules[0]["action"]["type"] == "SetStorageClass"
    assert rules[0]["condition"]["age"] == 11

    # The untouched delete rule survives the write
    assert result == desired
    assert normalize_gcs_lifecycle(backend.lifecycle) == desired
    assert observer.names[-1] == "lifecycle_updated"

    await reconcile_lifecycle(backend, "test-bucket", desired, observer=observer)
    assert len(backend.set_calls) == 1


@pytest.mark.asyncio
async def test_reconcile_s3_partial_change_keeps_other_rule(make_backend, observer):
    backend = make_backend(
        "s3",
        lifecycle={
            "Rules": [
                {"ID": "expire", "Status": "Enabled", "Expiration": {"Days": 20}},
                {
                    "ID": "cold",
                    "Status": "Enabled",
                    "Transitions": [{"Days": 5, "StorageClass": "GLACIER"}],
                },
            ]
        },
    )
    desired = RetentionPolicy(delete_after_days=20, coldline_after_days=10)

    result = await reconcile_lifecycle(backend, "test-bucket", desired, observer=observer)

    assert [rule["ID"] for rule in backend.set_calls[0]["Rules"]] == ["cloud-archive-transition"]
    assert result == desired
    assert [rule["ID"] for rule in backend.lifecycle["Rules"]] == [
        "expire",
        "cloud-archive-transition",
    ]


@pytest.mark.asyncio
async def test_reconcile_result_comes_from_the_backend(make_backend, observer):
    backend = make_backend("s3", lifecycle={})
    backend.set_result = {
        "Rules": [{"ID": "expire", "Status": "Enabled", "Expiration": {"Days": 45}}]
    }

    result = await reconcile_lifecycle(
        backend, "test-bucket", RetentionPolicy(delete_after_days=30), observer=observer
    )

    assert backend.set_calls == [build_s3_lifecycle(RetentionPolicy(delete_after_days=30))]
    assert result == RetentionPolicy(delete_after_days=45)


@pytest.mark.asyncio
async def test_reconcile_is_idempotent(make_backend, observer):
    backend = make_backend("s3", lifecycle={})
    desired = RetentionPolicy(delete_after_days=30, coldline_after_days=7)

    await reconcile_lifecycle(backend, "test-bucket", desired, observer=observer)
    await reconcile_lifecycle(backend, "test-bucket", desired, observer=observer)

    assert len(backend.set_calls) == 1


@pytest.mark.asyncio
async def test_reconcile_fetch_failure_is_fatal(make_backend, observer):
    backend = make_backend("gcs")
    backend.get_error = RuntimeError("permission denied")

    with pytest.raises(LifecycleError) as exc_info:
        await reconcile_lifecycle(
            backend, "test-bucket", RetentionPolicy(delete_after_days=30), observer=observer
        )

    assert exc_info.value.message == (
        "Failed to enforce lifecycle settings for 'test-bucket': permission denied"
    )
    assert backend.set_calls == []
    assert "lifecycle_fetch_failed" in observer.names


@pytest.mark.asyncio
async def test_reconcile_apply_failure_is_fatal(make_backend, observer):
    backend = make_backend("gcs")
    backend.set_error = RuntimeError("quota exceeded")

    with pytest.raises(LifecycleError) as exc_info:
        await reconcile_lifecycle(
            backend, "test-bucket", RetentionPolicy(delete_after_days=30), observer=observer
        )

    assert "Failed to update lifecycle settings for 'test-bucket'" in exc_info.value.message
    assert "quota exceeded" in exc_info.value.message
    assert len(backend.set_calls) == 1


# ============================================================================
# Latest archive
# ============================================================================

@pytest.mark.asyncio
async def test_get_latest_returns_newest_key(backend, observer):
    now = datetime(2018, 10, 10, tzinfo=UTC)
    backend.put("archive_2018-10-08.tgz", modified=now - timedelta(days=2))
    backend.put("archive_2018-10-10.tgz", modified=now)
    backend.put("archive_2018-10-09.tgz", modified=now - timedelta(days=1))
    backend.put("other_2018-10-11.tgz", modified=now + timedelta(days=1))

    latest = await get_latest(backend, "test-bucket", "archive_{{date}}.tgz", observer=observer)

    assert latest == "archive_2018-10-10.tgz"
    assert backend.list_calls == [("test-bucket", "archive_")]


@pytest.mark.asyncio
async def test_get_latest_breaks_ties_by_key(backend, observer):
    now = datetime(2018, 10, 10, tzinfo=UTC)
    backend.put("archive_b.tgz", modified=now)
    backend.put("archive_a.tgz", modified=now)

    latest = await get_latest(backend, "test-bucket", "archive_{{date}}.tgz", observer=observer)

    assert latest == "archive_a.tgz"


@pytest.mark.asyncio
async def test_get_latest_empty_bucket(backend, observer):
    latest = await get_latest(backend, "test-bucket", "archive_{{date}}.tgz", observer=observer)

    assert latest is None


@pytest.mark.asyncio
async def test_get_latest_listing_failure_names_bucket(backend, observer):
    backend.list_error = RuntimeError("connection reset")

    with pytest.raises(ResolutionError) as exc_info:
        await get_latest(backend, "test-bucket", "archive_{{date}}.tgz", observer=observer)

    assert exc_info.value.message == (
        "Could not determine latest file from bucket 'test-bucket': connection reset"
    )
