# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for Cloud Archive.

These helpers centralize wording for common configuration errors so that
the CLI, the environment loader and the HTTP routes read the same.
"""


def explain_missing_bucket_env() -> str:
    """
    Explain that the bucket environment variable is missing.
    """

    return (
        "Object store bucket is not configured. "
        "Set the OBJECT_STORE environment variable or pass bucket=... to create_config()."
    )


def explain_invalid_days_env(name: str, value: str | None) -> str:
    """
    Explain that a retention day count (DISCARD_AFTER, COLDLINE_AFTER) is invalid.
    """

    return (
        f"Invalid {name} value: {value!r}. "
        "It must be a non-negative integer number of days (0 leaves the rule unmanaged)."
    )


def explain_invalid_provider_env(value: str | None) -> str:
    """
    Explain that STORAGE_PROVIDER is invalid.
    """

    return (
        f"Invalid STORAGE_PROVIDER value: {value!r}. "
        "Expected 's3' or 'gcs', or leave unset to pick from the credentials present."
    )


def explain_empty_patterns_env(value: str | None) -> str:
    """
    Explain that FILE_PATTERNS produced no usable glob pattern.
    """

    return (
        f"Invalid FILE_PATTERNS value: {value!r}. "
        "Provide one or more comma-separated glob patterns, e.g. '**/*' or '*.db,*.json'."
    )


def explain_missing_admin_key_env() -> str:
    """
    Explain that the admin API key for the HTTP routes is missing.
    """

    return "CLOUD_ARCHIVE_ADMIN_API_KEY environment variable not set"
