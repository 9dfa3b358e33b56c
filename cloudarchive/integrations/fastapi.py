# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Cloud Archive FastAPI Integration - admin endpoints for FastAPI applications.

The routes let an external scheduler (or an operator) trigger a backup,
a restore or a retention check over HTTP. They never schedule anything
themselves.
"""

import os
from typing import Any, Awaitable

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cloudarchive.backup import backup_from
from cloudarchive.config import ArchiveConfig
from cloudarchive.errors import explain_missing_admin_key_env
from cloudarchive.exceptions import CloudArchiveError
from cloudarchive.lifecycle.reconciler import get_latest, get_lifecycle_policy, reconcile_lifecycle
from cloudarchive.restore import restore_to
from cloudarchive.storage import StorageBackend, create_backend

logger = structlog.get_logger()

# Security
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> bool:
    """
    Verify API key from Authorization header.

    The API key is read from the CLOUD_ARCHIVE_ADMIN_API_KEY environment
    variable. Requests must include: Authorization: Bearer <api_key>

    Raises:
        HTTPException: If API key is missing or invalid
    """
    api_key = os.getenv("CLOUD_ARCHIVE_ADMIN_API_KEY")

    if not api_key:
        raise HTTPException(status_code=500, detail=explain_missing_admin_key_env())

    if not credentials:
        raise HTTPException(status_code=401, detail="Authorization header required")

    if credentials.credentials != api_key:
        raise HTTPException(status_code=403, detail="Invalid API key")

    return True


async def _run(operation: str, awaitable: Awaitable[Any]) -> Any:
    """Await an archive operation, turning package errors into 502 responses."""
    try:
        return await awaitable
    except CloudArchiveError as e:
        logger.error("admin_operation_failed", operation=operation, error=str(e))
        raise HTTPException(status_code=502, detail=e.message) from e


def register_archive_routes(
    app: FastAPI,
    config: ArchiveConfig,
    backend: StorageBackend,
    prefix: str = "/admin/archive",
) -> None:
    """
    Register cloud archive admin endpoints on a FastAPI app.

    All endpoints require Bearer token authentication.

    Args:
        app: FastAPI application
        config: Archive configuration
        backend: Storage backend for the configured bucket
        prefix: URL prefix for endpoints (default: /admin/archive)
    """

    @app.post(f"{prefix}/backup", dependencies=[Depends(verify_api_key)])
    async def trigger_backup() -> dict:
        """
        Run a backup now.
        """
        result = await _run("backup", backup_from(config, backend))
        return {
            "operation_id": result.operation_id,
            "archive": result.tar.remote_key,
            "created_at": result.tar.created_at.isoformat(),
            "files": result.tar.files,
            "policy": result.policy.to_dict(),
        }

    @app.post(f"{prefix}/restore", dependencies=[Depends(verify_api_key)])
    async def trigger_restore(archive: str | None = None) -> dict:
        """
        Restore an archive into the data directory.

        Args:
            archive: Archive key to restore (default: configured, then latest)
        """
        result = await _run("restore", restore_to(config, backend, archive=archive))
        return {
            "operation_id": result.operation_id,
            "archive": result.archive,
            "path": str(result.path),
            "files": result.files,
        }

    @app.get(f"{prefix}/lifecycle", dependencies=[Depends(verify_api_key)])
    async def show_lifecycle() -> dict:
        """
        Current retention rules of the bucket, next to the configured limits.
        """
        current = await _run("lifecycle", get_lifecycle_policy(backend, config.bucket))
        return {
            "bucket": config.bucket,
            "current": current.to_dict(),
            "desired": config.retention_policy.to_dict(),
        }

    @app.post(f"{prefix}/lifecycle/enforce", dependencies=[Depends(verify_api_key)])
    async def enforce_lifecycle() -> dict:
        """
        Reconcile the bucket's retention rules with the configured limits.
        """
        policy = await _run(
            "lifecycle_enforce",
            reconcile_lifecycle(backend, config.bucket, config.retention_policy),
        )
        return {"bucket": config.bucket, "policy": policy.to_dict()}

    @app.get(f"{prefix}/latest", dependencies=[Depends(verify_api_key)])
    async def latest_archive() -> dict:
        """
        Key of the newest archive in the bucket.
        """
        latest = await _run("latest", get_latest(backend, config.bucket, config.file_name))
        return {"bucket": config.bucket, "latest": latest}

    @app.get(f"{prefix}/config", dependencies=[Depends(verify_api_key)])
    async def get_config() -> dict:
        """
        Get current configuration (credentials redacted).
        """
        return {
            "bucket": config.bucket,
            "provider": config.provider.value,
            "data_dir": str(config.data_dir),
            "file_name": config.file_name,
            "patterns": config.patterns,
            "archive": config.archive,
            "delete_after_days": config.delete_after_days,
            "coldline_after_days": config.coldline_after_days,
        }


def setup_archive_plugin(
    app: FastAPI,
    config: ArchiveConfig,
    backend: StorageBackend | None = None,
    prefix: str = "/admin/archive",
) -> StorageBackend:
    """
    Set up the cloud archive admin routes on an app.

    Args:
        app: FastAPI application
        config: Archive configuration
        backend: Storage backend (default: built from config)
        prefix: URL prefix for admin endpoints

    Returns:
        The storage backend the routes use
    """
    backend = backend or create_backend(config)

    # Store for access across requests
    app.state.archive_config = config
    app.state.archive_backend = backend

    register_archive_routes(app, config, backend, prefix)
    logger.info("archive_plugin_registered", bucket=config.bucket, provider=config.provider.value)

    return backend
