# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Canonical retention policy shared by every storage backend.

Both fields count days since object creation. ``None`` means no rule of
that kind is configured, which is not the same thing as ``0``.
"""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class RetentionPolicy:
    """Backend-agnostic retention settings for a bucket."""

    delete_after_days: int | None = None
    coldline_after_days: int | None = None

    def is_empty(self) -> bool:
        return self.delete_after_days is None and self.coldline_after_days is None

    def to_dict(self) -> dict:
        return asdict(self)


# A delta is a policy holding only the fields that have to be written back.
RetentionDelta = RetentionPolicy


def diff_policy(desired: RetentionPolicy, observed: RetentionPolicy) -> RetentionDelta:
    """
    Compute the fields of ``desired`` that the bucket does not already have.

    A desired value of ``None`` or ``0`` is "not managed" and never produces
    a change. An observed value that is absent counts as different.

    Args:
        desired: Limits from configuration
        observed: Policy normalized from the bucket's current document

    Returns:
        RetentionDelta with only the changed fields set
    """
    delete_after = None
    coldline_after = None

    if desired.delete_after_days and desired.delete_after_days != observed.delete_after_days:
        delete_after = desired.delete_after_days

    if (
        desired.coldline_after_days
        and desired.coldline_after_days != observed.coldline_after_days
    ):
        coldline_after = desired.coldline_after_days

    return RetentionPolicy(
        delete_after_days=delete_after,
        coldline_after_days=coldline_after,
    )
