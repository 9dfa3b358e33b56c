# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Cloud Archive Exceptions - Custom exceptions for the cloudarchive package.

Every failure is terminal for the current invocation. Each layer prefixes
its own stage description and keeps the inner message text verbatim.
"""


class CloudArchiveError(Exception):
    """Base exception for all cloudarchive errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CloudArchiveError):
    """Raised when configuration is invalid."""

    pass


class LifecycleError(CloudArchiveError):
    """Raised when the bucket's retention settings cannot be read or written."""

    pass


class SelectionError(CloudArchiveError):
    """Raised when files for backup cannot be enumerated."""

    pass


class PackagingError(CloudArchiveError):
    """Raised when an archive cannot be created."""

    pass


class CorruptArchiveError(PackagingError):
    """Raised when a downloaded archive is absent or cannot be unpacked."""

    pass


class TransferError(CloudArchiveError):
    """Raised when an upload or download fails."""

    pass


class ResolutionError(CloudArchiveError):
    """Raised when no archive can be identified for restore."""

    pass


class RestoreError(CloudArchiveError):
    """Raised when a restore attempt fails at any stage."""

    pass


def describe_error(exc: BaseException) -> str:
    """Return the message of an exception without the details suffix."""
    if isinstance(exc, CloudArchiveError):
        return exc.message
    return str(exc)
